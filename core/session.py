"""
Chat session: the user-facing flow tying scraping, answering and history together.

    session = build_session(Settings())
    session.scrape("https://example.com")
    result = session.ask("Summarize this page")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from core.answer import AnswerEngine
from core.content_store import ContentStore
from core.history import HistoryStore, new_message
from core.models import AnswerResult, ContentRecord, Message, ScrapeResult
from core.scraper import ANTHROPIC_KEY, Scraper, get_api_key
from core.storage import KeyValueStore, SqliteStore
from core.strategies import HeuristicStrategy, build_strategy

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)


class ChatSession:
    """One local profile's sites, conversation and answer engine."""

    def __init__(
        self,
        content_store: ContentStore,
        history: HistoryStore,
        engine: AnswerEngine,
        scraper: Scraper,
    ) -> None:
        self.content_store = content_store
        self.history_store = history
        self.engine = engine
        self.scraper = scraper

    def scrape(self, url: str) -> ScrapeResult:
        return self.scraper.scrape(url)

    def ask(self, message: str, urls: Optional[Iterable[str]] = None) -> AnswerResult:
        """Ask a question about stored pages and record the exchange.

        Args:
            message: The user's question.
            urls: Pages to ground the answer on; ``None`` means every stored
                page, most recent first.

        Returns:
            The AnswerResult. On failure only the user message is recorded.
        """
        message = (message or "").strip()
        if urls is None:
            urls = self.content_store.urls()

        if message:
            self.history_store.append(new_message(message, is_user=True))

        result = self.engine.answer(message, list(urls))
        if result.success:
            self.history_store.append(
                new_message(result.response or "", is_user=False, sources=result.sources)
            )
        return result

    def sites(self) -> list[ContentRecord]:
        return self.content_store.all()

    def history(self) -> list[Message]:
        return self.history_store.all()

    def clear_history(self) -> None:
        self.history_store.clear()

    def clear_sites(self) -> None:
        self.content_store.clear()


def build_engine(
    settings: Settings,
    content_store: ContentStore,
    storage: Optional[KeyValueStore] = None,
) -> AnswerEngine:
    """Create the answer engine selected by *settings*.

    A user-stored Anthropic key in *storage* overrides the environment key.
    """
    stored_key = get_api_key(storage, ANTHROPIC_KEY) if storage is not None else None
    strategy = build_strategy(settings, api_key=stored_key)

    fallback = None
    if settings.heuristic_fallback and not isinstance(strategy, HeuristicStrategy):
        fallback = HeuristicStrategy()

    logger.info(
        "Answer strategy=%s fallback=%s",
        strategy.name,
        fallback.name if fallback else None,
    )
    return AnswerEngine(content_store, strategy, fallback=fallback)


def build_session(settings: Settings, storage: Optional[KeyValueStore] = None) -> ChatSession:
    """Wire storage, stores, scraper and engine for one profile.

    Args:
        settings: Application configuration.
        storage: Key-value store to use; defaults to SQLite at ``settings.db_path``.
    """
    if storage is None:
        storage = SqliteStore(settings.db_path)
    content_store = ContentStore(storage)
    return ChatSession(
        content_store=content_store,
        history=HistoryStore(storage),
        engine=build_engine(settings, content_store, storage),
        scraper=Scraper(content_store, storage, settings),
    )
