"""Prompt context assembly.

``assemble()`` resolves URLs against the content store, optionally capping
each page's text; ``build_prompt()`` renders the entries (capped again) into
the instruction template sent to the completion model.
"""

from __future__ import annotations

from typing import Iterable, Optional

from core.content_store import ContentStore
from core.limits import MAX_CONTEXT_CHARS
from core.models import ContextEntry

#: System instruction sent with every completion request.
SYSTEM_PROMPT = "You are a helpful assistant that answers questions about website content."

_PROMPT_TEMPLATE = (
    "You are an intelligent assistant. Use the following website content to "
    "answer the user's question.\n\n{context}\n\nUser question: {message}\n\nAnswer:"
)

_ENTRY_TEMPLATE = "Title: {title}\nURL: {url}\nContent: {text}\n"


def assemble(
    urls: Iterable[str],
    store: ContentStore,
    cap: Optional[int] = MAX_CONTEXT_CHARS,
) -> list[ContextEntry]:
    """Build one ContextEntry per URL that has stored content.

    URLs without a stored record, and items that are not strings, are
    skipped. An empty result means there is no usable context and the
    caller should stop.

    Args:
        urls: Page URLs in the order they should appear.
        store: Content store to resolve them against.
        cap: Maximum body characters per entry; ``None`` keeps the whole
            stored body.
    """
    records = {record.url: record for record in store.all()}
    entries: list[ContextEntry] = []
    for url in urls:
        if not isinstance(url, str):
            continue
        record = records.get(url)
        if record is None:
            continue
        entries.append(
            ContextEntry(
                url=record.url,
                title=record.title,
                text=record.body if cap is None else record.body[:cap],
                links=list(record.links),
            )
        )
    return entries


def render_context_block(entries: list[ContextEntry]) -> str:
    """Render entries separated by a ``---`` line."""
    return "\n---\n".join(
        _ENTRY_TEMPLATE.format(
            title=entry.title,
            url=entry.url,
            text=entry.text[:MAX_CONTEXT_CHARS],
        )
        for entry in entries
    )


def build_prompt(message: str, entries: list[ContextEntry]) -> str:
    """Return the user prompt for the completion call."""
    return _PROMPT_TEMPLATE.format(
        context=render_context_block(entries),
        message=message,
    )
