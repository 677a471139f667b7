"""Answer engine: resolve context, run the strategy, report a uniform result.

Flow
────
1. Reject blank questions                       → InvalidInput
2. Assemble context from the content store      → NoContext if nothing resolves
3. strategy.generate(message, entries)
     on failure: fallback.generate(...) when configured, else report the error

No exception leaves ``AnswerEngine.answer()``.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from core.content_store import ContentStore
from core.context import assemble
from core.errors import ErrorKind, SiteChatError
from core.models import AnswerResult, ContextEntry
from core.strategies import AnswerStrategy

logger = logging.getLogger(__name__)

NO_CONTEXT_MESSAGE = "No website content available. Please scrape a website first."
GENERIC_FAILURE_MESSAGE = "Failed to process message"


def _failure(error: str, kind: ErrorKind, sources: Optional[list[str]] = None) -> AnswerResult:
    return AnswerResult(success=False, error=error, error_kind=kind, sources=sources or [])


class AnswerEngine:
    """Answers questions about stored pages with one ``AnswerStrategy``.

    Stateless between calls apart from the injected store and strategies.
    """

    def __init__(
        self,
        store: ContentStore,
        strategy: AnswerStrategy,
        fallback: Optional[AnswerStrategy] = None,
    ) -> None:
        """Initialise the engine.

        Args:
            store: Content store to resolve URLs against.
            strategy: Primary answer strategy.
            fallback: Strategy to use when the primary one fails; ``None``
                reports the failure instead.
        """
        self.store = store
        self.strategy = strategy
        self.fallback = fallback

    def answer(self, message: str, urls: Iterable[str]) -> AnswerResult:
        """Answer *message* using the stored content of *urls*."""
        message = (message or "").strip()
        if not message:
            return _failure("Message must not be empty.", ErrorKind.INVALID_INPUT)

        # Uncapped; remote strategies apply MAX_CONTEXT_CHARS when building requests.
        entries = assemble(urls, self.store, cap=None)
        if not entries:
            return _failure(NO_CONTEXT_MESSAGE, ErrorKind.NO_CONTEXT)

        sources = [entry.url for entry in entries]
        logger.info(
            "Answering with strategy=%s over %d page(s)", self.strategy.name, len(entries)
        )

        try:
            return self._run(self.strategy, message, entries, sources)
        except SiteChatError as exc:
            error, kind = str(exc) or GENERIC_FAILURE_MESSAGE, exc.kind
            logger.warning("Strategy %s failed (%s): %s", self.strategy.name, kind.value, error)
        except Exception:
            logger.exception("Unexpected error from strategy %s", self.strategy.name)
            error, kind = GENERIC_FAILURE_MESSAGE, ErrorKind.UPSTREAM_FAILURE

        if self.fallback is not None:
            try:
                return self._run(self.fallback, message, entries, sources)
            except Exception:
                logger.exception("Fallback strategy %s failed", self.fallback.name)

        return _failure(error, kind, sources)

    @staticmethod
    def _run(
        strategy: AnswerStrategy,
        message: str,
        entries: list[ContextEntry],
        sources: list[str],
    ) -> AnswerResult:
        response = strategy.generate(message, entries)
        return AnswerResult(
            success=True,
            response=response,
            sources=sources,
            strategy=strategy.name,
        )
