"""Shared fixtures for the Site Chat tests."""

from __future__ import annotations

import pytest

from core.content_store import ContentStore
from core.history import HistoryStore
from core.models import ContentRecord
from core.storage import MemoryStore


def make_record(n: int = 0, **overrides) -> ContentRecord:
    """Return a ContentRecord for https://example.com/<n>."""
    fields = {
        "url": f"https://example.com/{n}",
        "title": f"Page {n}",
        "body": f"Body text for page number {n} with enough words to matter.",
        "links": [],
        "fetched_at": 1_700_000_000_000 + n,
    }
    fields.update(overrides)
    return ContentRecord(**fields)


@pytest.fixture
def storage() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def content_store(storage) -> ContentStore:
    return ContentStore(storage)


@pytest.fixture
def history_store(storage) -> HistoryStore:
    return HistoryStore(storage)
