"""Export and import of the local store through sync codes."""
from __future__ import annotations

import logging

from . import crypto
from .model import Snapshot
from .storage import LocalStore

logger = logging.getLogger(__name__)

USER_MESSAGE = "Import failed. The sync code or password may be incorrect. Please check and try again."


def export_code(store: LocalStore, password: str) -> str:
    snapshot = store.snapshot()
    code = crypto.encode(snapshot, password)
    logger.info(
        "Exported %s (%d tasks, %d tags)",
        snapshot.owner, len(snapshot.tasks), len(snapshot.tags),
    )
    return code


def import_code(store: LocalStore, code: str, password: str) -> Snapshot:
    # Decode fully before touching the store; a failure leaves it as it was.
    snapshot = crypto.decode(code, password)
    store.replace(snapshot)
    logger.info(
        "Imported %s (%d tasks, %d tags)",
        snapshot.owner, len(snapshot.tasks), len(snapshot.tags),
    )
    return snapshot
