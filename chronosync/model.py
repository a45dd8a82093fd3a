"""Snapshot data contract shared by the codec, the store and the UIs.

Wire format (v1, same as the browser application's localStorage values):

    {"user": "<owner>",
     "tasks": [{"id", "date", "startTime", "endTime", "description", "tag",
                "imageUrl"?}, ...],
     "tags": [{"name", "color"}, ...]}

Keys this module does not know about are kept in ``extra`` and written back
unchanged, so newer clients can add fields without older ones dropping them.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import IncompleteSnapshotError

_TASK_FIELDS = (
    ("id", "id"),
    ("date", "date"),
    ("start_time", "startTime"),
    ("end_time", "endTime"),
    ("description", "description"),
    ("tag", "tag"),
)
_TASK_KEYS = {key for _, key in _TASK_FIELDS} | {"imageUrl"}
_TAG_KEYS = {"name", "color"}


def _required_str(obj: Dict[str, Any], key: str, where: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise IncompleteSnapshotError(f"{where} is missing required field '{key}'")
    return value


def _require_mapping(obj: Any, where: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise IncompleteSnapshotError(f"{where} is not an object")
    return obj


@dataclass
class Task:
    id: str
    date: str
    start_time: str
    end_time: str
    description: str
    tag: str
    image_url: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {key: getattr(self, attr) for attr, key in _TASK_FIELDS}
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, obj: Any, *, where: str = "task") -> "Task":
        obj = _require_mapping(obj, where)
        values = {attr: _required_str(obj, key, where) for attr, key in _TASK_FIELDS}
        image_url = obj.get("imageUrl")
        if image_url is not None and not isinstance(image_url, str):
            raise IncompleteSnapshotError(f"{where} has a non-text 'imageUrl'")
        extra = {k: v for k, v in obj.items() if k not in _TASK_KEYS}
        return cls(image_url=image_url, extra=extra, **values)


@dataclass
class TagDefinition:
    name: str
    color: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "color": self.color}
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, obj: Any, *, where: str = "tag") -> "TagDefinition":
        obj = _require_mapping(obj, where)
        extra = {k: v for k, v in obj.items() if k not in _TAG_KEYS}
        return cls(
            name=_required_str(obj, "name", where),
            color=_required_str(obj, "color", where),
            extra=extra,
        )


@dataclass
class Snapshot:
    """Everything one user exports: identity, tasks and tag palette."""

    owner: str
    tasks: List[Task] = field(default_factory=list)
    tags: List[TagDefinition] = field(default_factory=list)

    def __post_init__(self) -> None:
        # A code without an owner could never be imported again.
        if not self.owner:
            raise ValueError("Snapshot owner must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.owner,
            "tasks": [t.to_dict() for t in self.tasks],
            "tags": [t.to_dict() for t in self.tags],
        }

    @classmethod
    def from_dict(cls, obj: Any) -> "Snapshot":
        obj = _require_mapping(obj, "snapshot")
        owner = obj.get("user")
        if not isinstance(owner, str) or not owner:
            raise IncompleteSnapshotError("snapshot is missing required field 'user'")
        tasks = obj.get("tasks")
        if not isinstance(tasks, list):
            raise IncompleteSnapshotError("snapshot is missing required field 'tasks'")
        tags = obj.get("tags")
        if not isinstance(tags, list):
            raise IncompleteSnapshotError("snapshot is missing required field 'tags'")
        return cls(
            owner=owner,
            tasks=[Task.from_dict(t, where=f"task #{i}") for i, t in enumerate(tasks)],
            tags=[TagDefinition.from_dict(t, where=f"tag #{i}") for i, t in enumerate(tags)],
        )

    def to_bytes(self) -> bytes:
        # Compact separators match JSON.stringify, keeping codes interchangeable.
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Snapshot":
        try:
            obj = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as ex:
            raise IncompleteSnapshotError("Decrypted content not valid JSON") from ex
        return cls.from_dict(obj)
