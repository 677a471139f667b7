"""
Chat history for Site Chat.

Messages are kept in conversation order under one key of the injected
``KeyValueStore``; only the newest ``MAX_HISTORY`` survive an append.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pydantic import ValidationError

from core.limits import MAX_HISTORY
from core.models import Message
from core.normalizer import now_ms
from core.storage import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "chat_history"

_id_lock = threading.Lock()
_last_id = 0


def _next_id() -> str:
    """Return a message id that sorts after every id issued before it."""
    global _last_id
    with _id_lock:
        _last_id = max(now_ms(), _last_id + 1)
        return str(_last_id)


def new_message(
    content: str,
    is_user: bool,
    sources: Optional[list[str]] = None,
) -> Message:
    """Create a Message stamped with a fresh id and the current time.

    Args:
        content: Message text.
        is_user: True for user input, False for generated answers.
        sources: URLs that grounded a generated answer.

    Returns:
        A new Message.
    """
    return Message(
        id=_next_id(),
        content=content,
        is_user=is_user,
        timestamp=now_ms(),
        sources=sources,
    )


class HistoryStore:
    """Bounded, append-only message log."""

    def __init__(
        self,
        storage: KeyValueStore,
        key: str = STORAGE_KEY,
        capacity: int = MAX_HISTORY,
    ) -> None:
        self.storage = storage
        self.key = key
        self.capacity = capacity
        self._lock = threading.Lock()

    def all(self) -> list[Message]:
        """Return all stored messages, oldest first.

        Returns:
            A list of Message objects; empty when nothing (or nothing
            readable) is stored.
        """
        raw = self.storage.get(self.key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring corrupt chat history under key=%r", self.key)
            return []

        messages: list[Message] = []
        for item in raw:
            try:
                messages.append(Message.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping corrupt history entry: %s", exc)
        return messages

    def append(self, message: Message) -> None:
        """Append *message*, evicting the oldest entries beyond capacity."""
        with self._lock:
            messages = self.all()
            messages.append(message)
            messages = messages[-self.capacity:]
            self.storage.set(
                self.key, [m.model_dump(mode="json") for m in messages]
            )
        logger.debug("Saved message id=%s (%d in history)", message.id, len(messages))

    def clear(self) -> None:
        self.storage.remove(self.key)
        logger.info("Cleared chat history")
