"""Local, deterministic answers built from scraped text.

Used when no completion model is configured, or as a fallback when the remote
call fails. Nothing here is generative: the question is classified by keyword
and the answer is stitched together from sentences, counts and links found in
the context entries.

Classification order (first match wins):

- SUMMARY     "summary", "summarize", "about"
- LINKS       "link", "links"
- STRUCTURE   "structure", "organize", "sections"
- SEARCH      any search term left after stop-word filtering
- OVERVIEW    everything else
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from core.limits import (
    LINKS_SHOWN,
    MATCHES_PER_ENTRY,
    MAX_SEARCH_TERMS,
    MIN_SENTENCE_CHARS,
    MIN_TERM_CHARS,
    SUMMARY_SENTENCES,
)
from core.models import ContextEntry

logger = logging.getLogger(__name__)

# ── Enums ──────────────────────────────────────────────────────────────────────


class QuestionKind(str, Enum):
    """What kind of local answer a question asks for."""

    SUMMARY = "summary"
    LINKS = "links"
    STRUCTURE = "structure"
    SEARCH = "search"
    OVERVIEW = "overview"


# ── Classification ─────────────────────────────────────────────────────────────

#: Keyword groups checked in priority order.
_KEYWORD_SIGNALS: tuple[tuple[QuestionKind, tuple[str, ...]], ...] = (
    (QuestionKind.SUMMARY, ("summary", "summarize", "about")),
    (QuestionKind.LINKS, ("links", "link")),
    (QuestionKind.STRUCTURE, ("structure", "organize", "sections")),
)

_STOP_WORDS: frozenset[str] = frozenset([
    "what", "is", "are", "the", "about", "tell", "me", "can", "you",
    "how", "when", "where", "why", "do", "does",
])

NO_LINKS_MESSAGE = "I didn't find any external links in the scraped content."

_SENTENCE_BREAK = re.compile(r"[.!?]+")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def extract_search_terms(message: str) -> list[str]:
    """Pull up to ``MAX_SEARCH_TERMS`` meaningful words out of a question.

    Examples:
        >>> extract_search_terms("What is the pricing model?")
        ['pricing', 'model?']
        >>> extract_search_terms("how do you do")
        []
    """
    terms = [
        word
        for word in message.lower().split()
        if len(word) >= MIN_TERM_CHARS and word not in _STOP_WORDS
    ]
    return terms[:MAX_SEARCH_TERMS]


def classify_question(message: str) -> QuestionKind:
    """Classify a question for the local responder.

    Examples:
        >>> classify_question("Summarize the links")
        <QuestionKind.SUMMARY: 'summary'>
        >>> classify_question("list the links")
        <QuestionKind.LINKS: 'links'>
        >>> classify_question("hi")
        <QuestionKind.OVERVIEW: 'overview'>
    """
    lowered = message.lower()
    for kind, signals in _KEYWORD_SIGNALS:
        if any(signal in lowered for signal in signals):
            return kind
    if extract_search_terms(message):
        return QuestionKind.SEARCH
    return QuestionKind.OVERVIEW


# ── Text helpers ───────────────────────────────────────────────────────────────


def split_sentences(text: str) -> list[str]:
    """Split on runs of ``.``, ``!`` and ``?``, keeping sentences over 20 chars."""
    sentences = (part.strip() for part in _SENTENCE_BREAK.split(text))
    return [s for s in sentences if len(s) > MIN_SENTENCE_CHARS]


def word_count(text: str) -> int:
    return len(text.split())


def paragraph_count(text: str) -> int:
    return len(_PARAGRAPH_BREAK.split(text))


def _footer(entry: ContextEntry) -> str:
    return f"*Source: {entry.url}*"


# ── Responses ──────────────────────────────────────────────────────────────────


def summarize(entries: list[ContextEntry]) -> str:
    """First few sentences of each page."""
    fragments = []
    for entry in entries:
        key_sentences = split_sentences(entry.text)[:SUMMARY_SENTENCES]
        fragments.append(
            f"**{entry.title}**\n{'. '.join(key_sentences)}...\n{_footer(entry)}"
        )
    return (
        f"Here's a summary of the {len(entries)} website(s):\n\n"
        + "\n\n".join(fragments)
    )


def list_links(entries: list[ContextEntry]) -> str:
    """Links across all pages, first ``LINKS_SHOWN`` only."""
    all_links = [link for entry in entries for link in entry.links]
    if not all_links:
        return NO_LINKS_MESSAGE

    shown = "\n".join(f"• {link}" for link in all_links[:LINKS_SHOWN])
    response = f"I found {len(all_links)} links across the websites:\n\n{shown}"
    if len(all_links) > LINKS_SHOWN:
        response += "\n\n...and more"
    return response


def analyze_structure(entries: list[ContextEntry]) -> str:
    """Word, paragraph and link counts per page."""
    fragments = [
        f"**{entry.title}**\n"
        f"- Word count: ~{word_count(entry.text)}\n"
        f"- Sections: ~{paragraph_count(entry.text)}\n"
        f"- Links: {len(entry.links)}\n"
        f"{_footer(entry)}"
        for entry in entries
    ]
    return "Here's the structure analysis:\n\n" + "\n\n".join(fragments)


def search_content(terms: list[str], entries: list[ContextEntry]) -> str:
    """Sentences mentioning any of *terms*, up to three per page."""
    joined_terms = ", ".join(terms)
    fragments = []
    for entry in entries:
        matches = [
            sentence
            for sentence in split_sentences(entry.text)
            if any(term in sentence.lower() for term in terms)
        ][:MATCHES_PER_ENTRY]
        if matches:
            fragments.append(f"**{entry.title}**\n{'. '.join(matches)}\n{_footer(entry)}")

    if not fragments:
        return (
            f'I couldn\'t find specific information about "{joined_terms}" in the '
            "scraped content. Try asking about the main topics or request a "
            "summary instead."
        )
    return f'Here\'s what I found about "{joined_terms}":\n\n' + "\n\n".join(fragments)


def overview(entries: list[ContextEntry]) -> str:
    """Titles, totals and a menu of supported requests."""
    titles = ", ".join(entry.title for entry in entries)
    total_words = sum(word_count(entry.text) for entry in entries)
    total_links = sum(len(entry.links) for entry in entries)
    return (
        f"I have access to {len(entries)} website(s): {titles}.\n\n"
        f"Total content: ~{total_words} words, {total_links} links.\n\n"
        "You can ask me to:\n"
        "• Summarize the content\n"
        "• Find specific information\n"
        "• Analyze the structure\n"
        "• List available links\n"
        "• Search for particular topics"
    )


# ── Public interface ───────────────────────────────────────────────────────────


def respond(message: str, entries: list[ContextEntry]) -> str:
    """Answer *message* from *entries* without a language model."""
    kind = classify_question(message)
    logger.info("Heuristic answer kind=%s for %d entries", kind.value, len(entries))

    if kind is QuestionKind.SUMMARY:
        return summarize(entries)
    if kind is QuestionKind.LINKS:
        return list_links(entries)
    if kind is QuestionKind.STRUCTURE:
        return analyze_structure(entries)
    if kind is QuestionKind.SEARCH:
        return search_content(extract_search_terms(message), entries)
    return overview(entries)
