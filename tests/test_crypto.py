# tests/test_crypto.py

from __future__ import annotations

import asyncio
import json
from base64 import b64decode, b64encode

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from chronosync import crypto
from chronosync.crypto import ITERATIONS, NONCE_LEN, SALT_LEN, decode, derive_key, encode, pack, unpack
from chronosync.errors import (
    AuthenticationFailedError,
    DecodeError,
    EmptyPasswordError,
    IncompleteSnapshotError,
    InvalidEncodingError,
    MalformedCodeError,
)

PASSWORD = "correct-horse-battery-staple"


def _seal(payload: bytes, password: str) -> str:
    """Produce a code around an arbitrary plaintext, bypassing the model."""
    salt, nonce = b"\x01" * SALT_LEN, b"\x02" * NONCE_LEN
    return pack(salt, nonce, AESGCM(derive_key(password, salt)).encrypt(nonce, payload, None))


def test_derive_key_is_deterministic_and_salted() -> None:
    salt = bytes(range(SALT_LEN))
    key = derive_key("pw", salt)
    assert len(key) == 32
    assert derive_key("pw", salt) == key
    assert derive_key("pw", bytes(reversed(salt))) != key
    assert derive_key("pw2", salt) != key
    assert ITERATIONS == 100_000


def test_derive_key_matches_pbkdf2_hmac_sha256() -> None:
    import hashlib

    salt = b"0123456789abcdef"
    assert derive_key("pässword", salt) == hashlib.pbkdf2_hmac("sha256", "pässword".encode("utf-8"), salt, ITERATIONS, 32)


def test_derive_key_rejects_empty_password_and_bad_salt() -> None:
    with pytest.raises(EmptyPasswordError):
        derive_key("", b"\x00" * SALT_LEN)
    with pytest.raises(ValueError):
        derive_key("pw", b"short")


def test_concrete_scenario_round_trips_and_rejects_wrong_password(snapshot) -> None:
    code = encode(snapshot, PASSWORD)
    assert decode(code, PASSWORD) == snapshot
    with pytest.raises(AuthenticationFailedError):
        decode(code, "wrong-password")


def test_round_trip_preserves_optional_and_unknown_fields(rich_snapshot) -> None:
    code = encode(rich_snapshot, "pw")
    restored = decode(code, "pw")
    assert restored == rich_snapshot
    assert restored.tasks[0].image_url.startswith("data:image/png")
    assert restored.tasks[1].extra == {"priority": 2, "links": ["a", "b"]}


def test_round_trip_empty_collections() -> None:
    from chronosync.model import Snapshot

    empty = Snapshot(owner="bob")
    assert decode(encode(empty, "pw"), "pw") == empty


def test_code_layout(snapshot) -> None:
    code = encode(snapshot, PASSWORD)
    parts = code.split(".")
    assert len(parts) == 3
    assert len(b64decode(parts[0])) == SALT_LEN
    assert len(b64decode(parts[1])) == NONCE_LEN
    # AES-GCM appends a 16 byte tag to the JSON plaintext
    assert len(b64decode(parts[2])) == len(snapshot.to_bytes()) + 16
    assert code.isprintable() and "\n" not in code


def test_fresh_salt_and_nonce_per_call(snapshot) -> None:
    first = encode(snapshot, PASSWORD)
    second = encode(snapshot, PASSWORD)
    assert first != second
    salt1, nonce1, _ = unpack(first)
    salt2, nonce2, _ = unpack(second)
    assert salt1 != salt2
    assert nonce1 != nonce2
    assert decode(first, PASSWORD) == decode(second, PASSWORD) == snapshot


@pytest.mark.parametrize("position", [0, 10, -17, -1])
def test_tampered_ciphertext_is_rejected(snapshot, position) -> None:
    salt, nonce, ciphertext = unpack(encode(snapshot, PASSWORD))
    tampered = bytearray(ciphertext)
    tampered[position] ^= 0x01
    with pytest.raises(AuthenticationFailedError):
        decode(pack(salt, nonce, bytes(tampered)), PASSWORD)


def test_tampered_nonce_or_salt_is_rejected(snapshot) -> None:
    salt, nonce, ciphertext = unpack(encode(snapshot, PASSWORD))
    with pytest.raises(AuthenticationFailedError):
        decode(pack(salt, bytes([nonce[0] ^ 0x80]) + nonce[1:], ciphertext), PASSWORD)
    with pytest.raises(AuthenticationFailedError):
        decode(pack(bytes([salt[0] ^ 0x80]) + salt[1:], nonce, ciphertext), PASSWORD)


def test_truncated_ciphertext_is_rejected(snapshot) -> None:
    salt, nonce, ciphertext = unpack(encode(snapshot, PASSWORD))
    with pytest.raises(AuthenticationFailedError):
        decode(pack(salt, nonce, ciphertext[:-1]), PASSWORD)
    with pytest.raises(AuthenticationFailedError):
        decode(pack(salt, nonce, ciphertext[:4]), PASSWORD)


@pytest.mark.parametrize(
    "code",
    ["not-a-valid-code", "", "a.b", "a.b.c.d", "..", "a..c", ".b.c"],
)
def test_malformed_codes(code) -> None:
    with pytest.raises(MalformedCodeError):
        decode(code, "pw")


@pytest.mark.parametrize("code", ["a.b.c", "AAAA.AAAA.!!!!", "QUJD.QUJD.QUJ"])
def test_invalid_base64(code) -> None:
    with pytest.raises(InvalidEncodingError):
        decode(code, "pw")


def test_wrong_segment_sizes_are_malformed() -> None:
    good_salt, good_nonce = b"s" * SALT_LEN, b"n" * NONCE_LEN
    with pytest.raises(MalformedCodeError):
        decode(pack(b"s" * 8, good_nonce, b"c" * 32), "pw")
    with pytest.raises(MalformedCodeError):
        decode(pack(good_salt, b"n" * 16, b"c" * 32), "pw")


def test_surrounding_whitespace_is_ignored(snapshot) -> None:
    code = encode(snapshot, PASSWORD)
    assert decode(f"  {code}\n", PASSWORD) == snapshot


def test_line_breaks_inside_segments_are_ignored(snapshot) -> None:
    salt, nonce, ciphertext = encode(snapshot, PASSWORD).split(".")
    wrapped = f"{salt}.\n{nonce[:6]}\r\n{nonce[6:]}.{ciphertext[:20]}\n{ciphertext[20:40]} {ciphertext[40:]}\n"
    assert decode(wrapped, PASSWORD) == snapshot


def test_whitespace_only_segment_is_malformed() -> None:
    with pytest.raises(MalformedCodeError):
        decode("AAAA. \n.AAAA", "pw")


def test_snapshot_without_owner_cannot_be_encoded() -> None:
    from chronosync.model import Snapshot

    with pytest.raises(ValueError):
        encode(Snapshot(owner=""), "pw")


def test_empty_password_never_reaches_primitives(snapshot, monkeypatch) -> None:
    def boom(*args, **kwargs):
        raise AssertionError("primitive called")

    monkeypatch.setattr(crypto, "derive_key", boom)
    monkeypatch.setattr(crypto, "AESGCM", boom)
    monkeypatch.setattr(crypto, "urandom", boom)
    with pytest.raises(EmptyPasswordError):
        encode(snapshot, "")
    with pytest.raises(EmptyPasswordError):
        decode("AAAA.AAAA.AAAA", "")


@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        b"\xff\xfe",
        json.dumps(["user", "tasks", "tags"]).encode(),
        json.dumps({"tasks": [], "tags": []}).encode(),
        json.dumps({"user": "", "tasks": [], "tags": []}).encode(),
        json.dumps({"user": "alice", "tags": []}).encode(),
        json.dumps({"user": "alice", "tasks": []}).encode(),
        json.dumps({"user": "alice", "tasks": {}, "tags": []}).encode(),
        json.dumps({"user": "alice", "tasks": [{"id": "1"}], "tags": []}).encode(),
        json.dumps({"user": "alice", "tasks": [], "tags": [{"name": "Work"}]}).encode(),
    ],
)
def test_incomplete_snapshot(payload) -> None:
    with pytest.raises(IncompleteSnapshotError):
        decode(_seal(payload, "pw"), "pw")


def test_decodes_code_in_browser_layout() -> None:
    """A code assembled by hand the same way the browser client does it."""
    data = {
        "user": "alice",
        "tasks": [{"id": "1", "date": "2024-01-01", "startTime": "09:00", "endTime": "10:00",
                   "description": "Write report", "tag": "Work"}],
        "tags": [{"name": "Work", "color": "#0ea5e9"}],
    }
    salt, nonce = b"\x11" * SALT_LEN, b"\x22" * NONCE_LEN
    sealed = AESGCM(derive_key("pw", salt)).encrypt(nonce, json.dumps(data).encode(), None)
    code = ".".join(b64encode(x).decode() for x in (salt, nonce, sealed))
    restored = decode(code, "pw")
    assert restored.owner == "alice"
    assert restored.to_dict() == data


def test_all_import_failures_share_a_base_class() -> None:
    for exc in (MalformedCodeError, InvalidEncodingError, AuthenticationFailedError, IncompleteSnapshotError):
        assert issubclass(exc, DecodeError)


def test_async_wrappers(snapshot) -> None:
    async def run():
        code = await crypto.encode_async(snapshot, PASSWORD)
        return await crypto.decode_async(code, PASSWORD)

    assert asyncio.run(run()) == snapshot
