"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.validate()   # raises ValueError on an unusable answer strategy
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

#: Accepted values for ``ANSWER_STRATEGY``.
STRATEGIES: tuple[str, ...] = ("auto", "anthropic", "proxy", "heuristic")


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them by patching ``os.environ``.
    """

    # ── API Keys ────────────────────────────────────────────────────────────
    anthropic_api_key: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", "")
    )
    firecrawl_api_key: str = field(
        default_factory=lambda: os.environ.get("FIRECRAWL_API_KEY", "")
    )
    firecrawl_api_url: str = field(
        default_factory=lambda: os.environ.get(
            "FIRECRAWL_API_URL", "https://api.firecrawl.dev"
        )
    )

    # ── Flask ───────────────────────────────────────────────────────────────
    debug: bool = field(
        default_factory=lambda: os.environ.get("FLASK_DEBUG", "0") == "1"
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "3001"))
    )

    # ── Answering ───────────────────────────────────────────────────────────
    #: One of ``STRATEGIES``; "auto" picks anthropic when a key is available.
    answer_strategy: str = field(
        default_factory=lambda: os.environ.get("ANSWER_STRATEGY", "auto").lower()
    )
    #: Answer with the local heuristics when the remote call fails.
    heuristic_fallback: bool = field(
        default_factory=lambda: os.environ.get("HEURISTIC_FALLBACK", "0") == "1"
    )
    #: Completion proxy endpoint used by the "proxy" strategy.
    proxy_url: str = field(
        default_factory=lambda: os.environ.get(
            "PROXY_URL", "http://localhost:3001/api/chat"
        )
    )
    completion_timeout: float = field(
        default_factory=lambda: float(os.environ.get("COMPLETION_TIMEOUT", "30"))
    )

    # ── Fetching ────────────────────────────────────────────────────────────
    fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_TIMEOUT", "15"))
    )

    # ── Storage ─────────────────────────────────────────────────────────────
    db_path: str = field(
        default_factory=lambda: os.environ.get("DB_PATH", "data/sitechat.db")
    )

    # ── AI Models ───────────────────────────────────────────────────────────
    #: Model used to answer questions about scraped content.
    chat_model: str = field(
        default_factory=lambda: os.environ.get("CHAT_MODEL", "claude-haiku-4-5")
    )

    def validate(self, stored_api_key: Optional[str] = None) -> None:
        """Raise ``ValueError`` if the answer strategy cannot be used.

        Args:
            stored_api_key: Anthropic key the user saved locally
                (``set-key anthropic``); satisfies the "anthropic" strategy
                in place of ``ANTHROPIC_API_KEY``.
        """
        if self.answer_strategy not in STRATEGIES:
            raise ValueError(
                f"ANSWER_STRATEGY must be one of {', '.join(STRATEGIES)}, "
                f"got {self.answer_strategy!r}."
            )
        if self.answer_strategy == "anthropic" and not (
            stored_api_key or self.anthropic_api_key
        ):
            raise ValueError(
                "No Anthropic API key: ANTHROPIC_API_KEY is not set and none "
                "has been stored with `site-chat set-key anthropic`. "
                "Copy .env.example to .env and add your key, or set "
                "ANSWER_STRATEGY=heuristic."
            )
