"""Test fixtures and utilities."""

from pathlib import Path

import pytest

from recordpipe.data_manager import MemoryStore

SAMPLE_TASKS = [
    {"id": 1, "title": "Write report", "status": "open", "tags": ["work", "urgent"]},
    {"id": 2, "title": "Buy milk", "status": "done", "tags": ["home"]},
    {"id": 3, "title": "Plan trip", "status": "open", "tags": []},
]


@pytest.fixture
def sample_tasks() -> list[dict]:
    """Fresh copy of the sample task records."""
    return [dict(task, tags=list(task["tags"])) for task in SAMPLE_TASKS]


@pytest.fixture
def store() -> MemoryStore:
    """Store without sync tracking."""
    return MemoryStore("tasks")


@pytest.fixture
def sync_store() -> MemoryStore:
    """Store with sync tracking enabled."""
    return MemoryStore("tasks", data_sync=True)


@pytest.fixture
def config_file(tmp_path) -> Path:
    """Config file path in a temporary directory."""
    return tmp_path / "recordpipe.yaml"
