"""Turn fetched pages into ContentRecords.

Two input shapes are accepted:

1. **Raw HTML** from a plain HTTP fetch — ``normalize_html()`` strips
   non-content elements, collapses whitespace and pulls out the title and
   links.
2. **Structured scrape results** from Firecrawl — ``normalize_scrape()``
   takes the markdown (or HTML) body and metadata title as given.

Either way the stored body is truncated to ``MAX_BODY_CHARS``.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Optional

from bs4 import BeautifulSoup

from core.errors import FetchFailed
from core.limits import MAX_BODY_CHARS, MAX_LINKS
from core.models import ContentRecord, FirecrawlResult

logger = logging.getLogger(__name__)

#: Elements that never carry page content.
_NON_CONTENT_TAGS: tuple[str, ...] = ("script", "style", "nav", "header", "footer")

_WHITESPACE = re.compile(r"\s+")


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def _parse(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "html.parser")
    except Exception as exc:
        raise FetchFailed(f"Could not parse page: {exc}") from exc


def _links_from_soup(soup: BeautifulSoup) -> list[str]:
    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href") or ""
        if href.startswith(("http", "/")):
            links.append(href)
            if len(links) >= MAX_LINKS:
                break
    return links


def extract_links(html: str) -> list[str]:
    """Return ``href`` values that start with ``http`` or ``/``.

    Document order is kept and duplicates are allowed; at most
    ``MAX_LINKS`` are returned.

    Examples:
        >>> extract_links('<a href="/a">A</a><a href="#top">T</a>')
        ['/a']
    """
    if not html:
        return []
    return _links_from_soup(_parse(html))


def extract_title(soup: BeautifulSoup, url: str) -> str:
    """Text of the first ``<title>`` element, or *url* when absent or blank."""
    tag = soup.find("title")
    title = tag.get_text().strip() if tag else ""
    return title or url


def extract_text(soup: BeautifulSoup) -> str:
    """Visible page text with non-content elements removed.

    Mutates *soup*: the non-content elements are decomposed.
    """
    for tag in soup(list(_NON_CONTENT_TAGS)):
        tag.decompose()
    root = soup.body
    if root is None:
        # Fragment without <body>: drop document metadata, keep the rest.
        for tag in soup(["head", "title"]):
            tag.decompose()
        root = soup
    return _WHITESPACE.sub(" ", root.get_text(" ")).strip()


def normalize_html(url: str, html: str, fetched_at: Optional[int] = None) -> ContentRecord:
    """Build a ContentRecord from a raw HTML document.

    Raises:
        FetchFailed: If the document cannot be parsed.
    """
    soup = _parse(html or "")
    # Links are read before stripping so navigation links are kept too.
    links = _links_from_soup(soup)
    title = extract_title(soup, url)
    body = extract_text(soup)

    logger.debug("Normalised HTML for %s: %d chars, %d links", url, len(body), len(links))
    return ContentRecord(
        url=url,
        title=title,
        body=body[:MAX_BODY_CHARS],
        links=links,
        fetched_at=fetched_at if fetched_at is not None else now_ms(),
    )


def normalize_scrape(
    url: str,
    result: FirecrawlResult,
    fetched_at: Optional[int] = None,
) -> ContentRecord:
    """Build a ContentRecord from a structured scraping-service result."""
    title = (result.metadata.title or "").strip() or url
    body = result.markdown or result.html or ""
    return ContentRecord(
        url=url,
        title=title,
        body=body[:MAX_BODY_CHARS],
        links=extract_links(result.html or ""),
        fetched_at=fetched_at if fetched_at is not None else now_ms(),
    )
