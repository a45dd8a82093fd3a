"""Local persistence for the logged-in user's tasks and tags.

Directory layout (mirrors the browser client's localStorage keys):

    user.json           JSON string, the logged-in user (absent when logged out)
    tasks_<user>.json   JSON list of task objects
    tags_<user>.json    JSON list of tag objects

``<user>`` is percent-encoded so any name maps to a single file. Every write
goes to a temporary file first and is moved into place with ``os.replace``.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .errors import IncompleteSnapshotError, NotLoggedInError, StoreError
from .model import Snapshot, TagDefinition, Task

logger = logging.getLogger(__name__)

USER_FILE = "user.json"


class LocalStore:
    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, kind: str, user: str) -> Path:
        return self.root / f"{kind}_{quote(user, safe='')}.json"

    def _read(self, path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as ex:
            raise StoreError(f"Cannot read {path.name}: {ex}") from ex

    def _write(self, path: Path, value: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=self.root)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False)
            os.replace(tmp, path)
        except OSError as ex:
            Path(tmp).unlink(missing_ok=True)
            raise StoreError(f"Cannot write {path.name}: {ex}") from ex

    def _read_bytes(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as ex:
            raise StoreError(f"Cannot read {path.name}: {ex}") from ex

    def _restore(self, previous: Dict[Path, Optional[bytes]]) -> None:
        for path, data in previous.items():
            try:
                if data is None:
                    path.unlink(missing_ok=True)
                    continue
                fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=self.root)
                with os.fdopen(fd, "wb") as fh:
                    fh.write(data)
                os.replace(tmp, path)
            except OSError as ex:
                logger.error("Could not restore %s after a failed replace: %s", path.name, ex)

    # Session

    def current_user(self) -> Optional[str]:
        user = self._read(self.root / USER_FILE)
        if user is None:
            return None
        if not isinstance(user, str) or not user:
            raise StoreError(f"{USER_FILE} does not hold a user name")
        return user

    def login(self, name: str) -> str:
        name = name.strip()
        if not name:
            raise ValueError("User name must not be empty")
        self._write(self.root / USER_FILE, name)
        logger.info("Logged in as %s", name)
        return name

    def logout(self) -> None:
        (self.root / USER_FILE).unlink(missing_ok=True)
        logger.info("Logged out")

    # Per-user data

    def load_tasks(self, user: str) -> List[Task]:
        raw = self._read(self._path("tasks", user)) or []
        try:
            return [Task.from_dict(t, where=f"stored task #{i}") for i, t in enumerate(raw)]
        except (IncompleteSnapshotError, TypeError) as ex:
            raise StoreError(f"Stored tasks for {user} are invalid: {ex}") from ex

    def save_tasks(self, user: str, tasks: List[Task]) -> None:
        self._write(self._path("tasks", user), [t.to_dict() for t in tasks])

    def load_tags(self, user: str) -> List[TagDefinition]:
        raw = self._read(self._path("tags", user)) or []
        try:
            return [TagDefinition.from_dict(t, where=f"stored tag #{i}") for i, t in enumerate(raw)]
        except (IncompleteSnapshotError, TypeError) as ex:
            raise StoreError(f"Stored tags for {user} are invalid: {ex}") from ex

    def save_tags(self, user: str, tags: List[TagDefinition]) -> None:
        self._write(self._path("tags", user), [t.to_dict() for t in tags])

    # Sync hooks

    def snapshot(self) -> Snapshot:
        user = self.current_user()
        if user is None:
            raise NotLoggedInError("You must be logged in to export data.")
        return Snapshot(owner=user, tasks=self.load_tasks(user), tags=self.load_tags(user))

    def replace(self, snapshot: Snapshot) -> None:
        """Overwrite the snapshot owner's data and make them the current user.

        All three files change together: if any write fails, the ones already
        written are put back to their previous contents before the error
        propagates.
        """
        paths = [
            self._path("tasks", snapshot.owner),
            self._path("tags", snapshot.owner),
            self.root / USER_FILE,
        ]
        previous = {p: self._read_bytes(p) for p in paths}
        try:
            self.save_tasks(snapshot.owner, snapshot.tasks)
            self.save_tags(snapshot.owner, snapshot.tags)
            self._write(self.root / USER_FILE, snapshot.owner)
        except Exception:
            self._restore(previous)
            raise
        logger.info(
            "Replaced local data for %s (%d tasks, %d tags)",
            snapshot.owner, len(snapshot.tasks), len(snapshot.tags),
        )
