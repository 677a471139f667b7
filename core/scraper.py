"""Fetch a URL, normalise it, and cache the result.

Two fetch paths, tried in order:

1. Firecrawl ``/v1/scrape`` — only when a Firecrawl key is configured or
   stored. Any failure here is logged and falls through.
2. Plain HTTP GET of the page itself.

Only a failure of the last attempt is reported, as ``FetchFailed``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import requests
from pydantic import ValidationError

from core.content_store import ContentStore
from core.errors import ErrorKind, FetchFailed, InvalidInput, SiteChatError
from core.models import ContentRecord, FirecrawlResult, ScrapeResult
from core.normalizer import normalize_html, normalize_scrape
from core.storage import KeyValueStore

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

FIRECRAWL_KEY = "firecrawl_api_key"
ANTHROPIC_KEY = "anthropic_api_key"

USER_AGENT = "Mozilla/5.0 (compatible; SiteChat/0.1; +https://github.com/site-chat)"

_NO_KEY_HINT = " Try setting a Firecrawl API key for better results."


# ── Stored credentials ────────────────────────────────────────────────────────


def save_api_key(storage: KeyValueStore, name: str, value: str) -> None:
    """Store a user-supplied credential; a blank value removes it."""
    value = value.strip()
    if value:
        storage.set(name, value)
    else:
        storage.remove(name)


def get_api_key(storage: KeyValueStore, name: str) -> Optional[str]:
    value = storage.get(name)
    return value if isinstance(value, str) and value else None


def _with_scheme(url: str) -> str:
    if "://" not in url:
        return f"https://{url}"
    return url


# ── Scraper ───────────────────────────────────────────────────────────────────


class Scraper:
    """Fetches pages and upserts them into a ContentStore."""

    def __init__(
        self,
        content_store: ContentStore,
        storage: KeyValueStore,
        settings: Settings,
    ) -> None:
        self.content_store = content_store
        self.storage = storage
        self.settings = settings

    @property
    def firecrawl_key(self) -> Optional[str]:
        """Environment key first, then the user's stored key."""
        return self.settings.firecrawl_api_key or get_api_key(self.storage, FIRECRAWL_KEY)

    def scrape(self, url: str) -> ScrapeResult:
        """Fetch *url*, store its ContentRecord and report the outcome.

        Returns:
            A ScrapeResult; never raises.
        """
        try:
            record = self._fetch(url)
        except SiteChatError as exc:
            logger.warning("Scrape failed for %r: %s", url, exc)
            return ScrapeResult(success=False, error=str(exc), error_kind=exc.kind)
        except Exception as exc:
            logger.exception("Unexpected scrape error for %r", url)
            return ScrapeResult(
                success=False,
                error=f"Failed to scrape website: {exc}",
                error_kind=ErrorKind.FETCH_FAILED,
            )

        self.content_store.upsert(record)
        logger.info("Scraped %s: %r", record.url, record.title)
        return ScrapeResult(success=True, data=record)

    def _fetch(self, url: str) -> ContentRecord:
        url = (url or "").strip()
        if not url:
            raise InvalidInput("URL must not be empty.")
        url = _with_scheme(url)

        key = self.firecrawl_key
        if key:
            try:
                return self._fetch_firecrawl(url, key)
            except (requests.RequestException, ValidationError, ValueError, FetchFailed) as exc:
                logger.warning("Firecrawl failed for %s, falling back to simple fetch: %s", url, exc)

        try:
            return self._fetch_plain(url)
        except requests.RequestException as exc:
            hint = "" if key else _NO_KEY_HINT
            raise FetchFailed(f"Failed to fetch {url}: {exc}.{hint}") from exc

    def _fetch_firecrawl(self, url: str, key: str) -> ContentRecord:
        resp = requests.post(
            f"{self.settings.firecrawl_api_url.rstrip('/')}/v1/scrape",
            headers={"Authorization": f"Bearer {key}"},
            json={"url": url, "formats": ["markdown", "html"], "onlyMainContent": True},
            timeout=self.settings.fetch_timeout,
        )
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, dict):
            raise FetchFailed("Unexpected Firecrawl response")

        data = payload.get("data")
        if not isinstance(data, dict):
            data = {}
        result = FirecrawlResult.model_validate(
            {**data, "success": bool(payload.get("success"))}
        )
        if not result.success:
            raise FetchFailed(payload.get("error") or "Firecrawl reported failure")
        return normalize_scrape(url, result)

    def _fetch_plain(self, url: str) -> ContentRecord:
        logger.info("FETCH %s", url)
        resp = requests.get(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=self.settings.fetch_timeout,
        )
        resp.raise_for_status()
        return normalize_html(url, resp.text)
