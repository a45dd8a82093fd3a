"""Password-based encryption of snapshots into portable sync codes.

Sync code format:

    BASE64(SALT, 16 bytes) "." BASE64(NONCE, 12 bytes) "." BASE64(CIPHERTEXT + TAG)

The key is PBKDF2-HMAC-SHA256(password, SALT, 100,000 iterations, 32 bytes)
and the payload is the snapshot JSON sealed with AES-256-GCM, no associated
data. Salt and nonce are fresh for every export. There is no version marker:
the layout is the one the browser client has always produced, so codes move
freely between both.
"""
from __future__ import annotations

import asyncio
import binascii
import logging
from base64 import b64decode, b64encode
from os import urandom
from typing import Tuple

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import (
    AuthenticationFailedError,
    EmptyPasswordError,
    EncryptionUnavailableError,
    InvalidEncodingError,
    MalformedCodeError,
)
from .model import Snapshot

logger = logging.getLogger(__name__)

SALT_LEN = 16
NONCE_LEN = 12
KEY_LEN = 32
ITERATIONS = 100_000
SEPARATOR = "."


def derive_key(password: str, salt: bytes) -> bytes:
    if not password:
        raise EmptyPasswordError("Password must not be empty")
    if len(salt) != SALT_LEN:
        raise ValueError(f"Salt must be {SALT_LEN} bytes")
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LEN,
            salt=salt,
            iterations=ITERATIONS,
        )
        return kdf.derive(password.encode("utf-8"))
    except UnsupportedAlgorithm as ex:
        raise EncryptionUnavailableError("PBKDF2-HMAC-SHA256 is not available") from ex


def _cipher(key: bytes) -> AESGCM:
    try:
        return AESGCM(key)
    except UnsupportedAlgorithm as ex:
        raise EncryptionUnavailableError("AES-GCM is not available") from ex


def _b64(data: bytes) -> str:
    return b64encode(data).decode("ascii")


def pack(salt: bytes, nonce: bytes, ciphertext: bytes) -> str:
    return SEPARATOR.join((_b64(salt), _b64(nonce), _b64(ciphertext)))


def unpack(code: str) -> Tuple[bytes, bytes, bytes]:
    """Split a sync code into (salt, nonce, ciphertext).

    Whitespace anywhere in the code is ignored, so codes that a mail or
    chat client wrapped over several lines still import.
    """
    parts = ["".join(p.split()) for p in code.split(SEPARATOR)]
    if len(parts) != 3 or not all(parts):
        raise MalformedCodeError("Invalid sync code format")
    try:
        salt, nonce, ciphertext = (b64decode(p, validate=True) for p in parts)
    except (binascii.Error, ValueError) as ex:
        raise InvalidEncodingError("Sync code is not valid base64") from ex
    if len(salt) != SALT_LEN or len(nonce) != NONCE_LEN:
        raise MalformedCodeError("Invalid sync code format")
    return salt, nonce, ciphertext


def encode(snapshot: Snapshot, password: str) -> str:
    if not password:
        raise EmptyPasswordError("Password must not be empty")
    salt = urandom(SALT_LEN)
    nonce = urandom(NONCE_LEN)
    key = derive_key(password, salt)
    ciphertext = _cipher(key).encrypt(nonce, snapshot.to_bytes(), None)
    logger.debug("Encrypted snapshot into %d ciphertext bytes", len(ciphertext))
    return pack(salt, nonce, ciphertext)


def decode(code: str, password: str) -> Snapshot:
    if not password:
        raise EmptyPasswordError("Password must not be empty")
    salt, nonce, ciphertext = unpack(code)
    key = derive_key(password, salt)
    try:
        plaintext = _cipher(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as ex:  # Wrong password or corruption
        raise AuthenticationFailedError("Incorrect password or corrupt sync code") from ex
    return Snapshot.from_bytes(plaintext)


async def encode_async(snapshot: Snapshot, password: str) -> str:
    return await asyncio.to_thread(encode, snapshot, password)


async def decode_async(code: str, password: str) -> Snapshot:
    return await asyncio.to_thread(decode, code, password)
