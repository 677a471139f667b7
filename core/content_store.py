"""
Bounded cache of scraped pages, most recent first.

The whole list lives under one key of the injected ``KeyValueStore`` as a JSON
array of ContentRecord objects.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pydantic import ValidationError

from core.limits import MAX_SITES
from core.models import ContentRecord
from core.storage import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "scraped_websites"


class ContentStore:
    """Upsert/evict cache of ContentRecords keyed by URL."""

    def __init__(
        self,
        storage: KeyValueStore,
        key: str = STORAGE_KEY,
        capacity: int = MAX_SITES,
    ) -> None:
        self.storage = storage
        self.key = key
        self.capacity = capacity
        self._lock = threading.Lock()

    def all(self) -> list[ContentRecord]:
        """Return every stored record, most recent first.

        Corrupt storage reads as an empty list; invalid records are skipped.
        """
        raw = self.storage.get(self.key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring corrupt content cache under key=%r", self.key)
            return []

        records: list[ContentRecord] = []
        for item in raw:
            try:
                records.append(ContentRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping corrupt content record: %s", exc)
        return records

    def urls(self) -> list[str]:
        return [record.url for record in self.all()]

    def by_url(self, url: str) -> Optional[ContentRecord]:
        for record in self.all():
            if record.url == url:
                return record
        return None

    def upsert(self, record: ContentRecord) -> None:
        """Insert *record* at the front, replacing any record with the same URL."""
        with self._lock:
            records = [r for r in self.all() if r.url != record.url]
            records.insert(0, record)
            evicted = records[self.capacity:]
            records = records[: self.capacity]
            self.storage.set(self.key, [r.model_dump(mode="json") for r in records])

        logger.info("Stored content for %s (%d cached)", record.url, len(records))
        for old in evicted:
            logger.info("Evicted cached content for %s", old.url)

    def clear(self) -> None:
        self.storage.remove(self.key)
        logger.info("Cleared content cache")
