# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from chronosync.model import Snapshot, TagDefinition, Task
from chronosync.storage import LocalStore


@pytest.fixture()
def snapshot() -> Snapshot:
    return Snapshot(
        owner="alice",
        tasks=[
            Task(
                id="1",
                date="2024-01-01",
                start_time="09:00",
                end_time="10:00",
                description="Write report",
                tag="Work",
            )
        ],
        tags=[TagDefinition(name="Work", color="#0ea5e9")],
    )


@pytest.fixture()
def rich_snapshot() -> Snapshot:
    """Optional image payload, non-ASCII text and fields from a newer client."""
    return Snapshot(
        owner="Zoë",
        tasks=[
            Task(
                id="1704099600000",
                date="2024-01-01",
                start_time="09:00",
                end_time="10:30",
                description="Réunion \"équipe\" / café ☕",
                tag="Meetings",
                image_url="data:image/png;base64,iVBORw0KGgo=",
            ),
            Task(
                id="1704103200000",
                date="2023-12-31",
                start_time="23:00",
                end_time="23:59",
                description="",
                tag="Personal",
                extra={"priority": 2, "links": ["a", "b"]},
            ),
        ],
        tags=[
            TagDefinition(name="Meetings", color="#f97316"),
            TagDefinition(name="Personal", color="#10b981", extra={"archived": False}),
        ],
    )


@pytest.fixture()
def store(tmp_path: Path) -> LocalStore:
    return LocalStore(tmp_path / "data")
