"""Exception types raised by the sync codec and the local store."""
from __future__ import annotations


class SyncError(Exception):
    """Base class for every sync failure."""


class EmptyPasswordError(SyncError, ValueError):
    """Raised when a blank password is handed to the codec."""


class EncryptionUnavailableError(SyncError):
    """Raised when the cryptography backend lacks PBKDF2 or AES-GCM."""


class DecodeError(SyncError):
    """Raised when a sync code cannot be turned back into a snapshot."""


class MalformedCodeError(DecodeError):
    """The code is not three non-empty segments of the expected sizes."""


class InvalidEncodingError(DecodeError):
    """A segment of the code is not valid base64."""


class AuthenticationFailedError(DecodeError):
    """Wrong password, corrupted code or tampering.

    The three causes are indistinguishable to AES-GCM and are reported
    as one error on purpose.
    """


class IncompleteSnapshotError(DecodeError):
    """Decryption succeeded but the payload is not a complete snapshot."""


class StoreError(Exception):
    """Raised when the local store cannot be read or written."""


class NotLoggedInError(StoreError):
    """Raised when an export is attempted without a logged-in user."""
