"""ChronoSync encrypted snapshot sync.

A user's tasks and tag palette are packed into a single text code, encrypted
under a password (PBKDF2-HMAC-SHA256 + AES-256-GCM), and restored on another
device by pasting the code and entering the same password. Importing always
replaces the local data for that user; nothing is merged.
"""

__all__ = [
    "Snapshot",
    "Task",
    "TagDefinition",
    "derive_key",
    "encode",
    "decode",
    "encode_async",
    "decode_async",
    "SyncError",
    "EmptyPasswordError",
    "EncryptionUnavailableError",
    "DecodeError",
    "MalformedCodeError",
    "InvalidEncodingError",
    "AuthenticationFailedError",
    "IncompleteSnapshotError",
]

from .crypto import decode, decode_async, derive_key, encode, encode_async  # noqa: E402
from .errors import (  # noqa: E402
    AuthenticationFailedError,
    DecodeError,
    EmptyPasswordError,
    EncryptionUnavailableError,
    IncompleteSnapshotError,
    InvalidEncodingError,
    MalformedCodeError,
    SyncError,
)
from .model import Snapshot, TagDefinition, Task  # noqa: E402
