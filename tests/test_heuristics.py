"""Tests for core/heuristics.py — local keyword-based answers."""

from __future__ import annotations

import pytest

from core.heuristics import (
    NO_LINKS_MESSAGE,
    QuestionKind,
    classify_question,
    extract_search_terms,
    respond,
    split_sentences,
)
from core.models import ContextEntry


def entry(n: int = 1, text: str = "", links: list[str] | None = None) -> ContextEntry:
    return ContextEntry(
        url=f"https://example.com/{n}",
        title=f"Site {n}",
        text=text,
        links=links or [],
    )


LONG_TEXT = (
    "Widgets are manufactured in the northern factory. "
    "Every widget ships with a two year warranty! "
    "Short one. "
    "Do customers really love the blue widgets? "
    "Gadgets are sold separately from the main catalogue."
)


# ── Classification ─────────────────────────────────────────────────────────────


class TestClassifyQuestion:
    @pytest.mark.parametrize(
        "message, kind",
        [
            ("Can you summarize this?", QuestionKind.SUMMARY),
            ("Give me a summary", QuestionKind.SUMMARY),
            ("What is this page about", QuestionKind.SUMMARY),
            ("list the links", QuestionKind.LINKS),
            ("Any LINK to pricing?", QuestionKind.LINKS),
            ("How is the site organized into sections", QuestionKind.STRUCTURE),
            ("pricing for widgets", QuestionKind.SEARCH),
            ("how do you do", QuestionKind.OVERVIEW),
            ("", QuestionKind.OVERVIEW),
        ],
    )
    def test_kinds(self, message, kind):
        assert classify_question(message) == kind

    def test_summary_beats_links(self):
        assert classify_question("summary of the links") == QuestionKind.SUMMARY

    def test_links_beat_structure(self):
        assert classify_question("structure of the links") == QuestionKind.LINKS


class TestExtractSearchTerms:
    def test_drops_stop_words_and_short_tokens(self):
        assert extract_search_terms("What is the AI policy of me") == ["policy"]

    def test_lowercases(self):
        assert extract_search_terms("WIDGET Pricing") == ["widget", "pricing"]

    def test_keeps_at_most_five(self):
        terms = extract_search_terms("alpha bravo charlie delta echo foxtrot golf")
        assert terms == ["alpha", "bravo", "charlie", "delta", "echo"]


class TestSplitSentences:
    def test_filters_short_sentences(self):
        sentences = split_sentences("Sentence number one is long. Tiny. Another long sentence here!")
        assert sentences == ["Sentence number one is long", "Another long sentence here"]

    def test_exactly_twenty_chars_excluded(self):
        assert split_sentences("Sentence one is here.") == []


# ── Responses ──────────────────────────────────────────────────────────────────


class TestSummary:
    def test_summary_format(self):
        result = respond("Can you summarize this?", [entry(1, LONG_TEXT)])
        assert result.startswith("Here's a summary of the 1 website(s):\n\n**Site 1**\n")
        assert "Widgets are manufactured in the northern factory. Every widget" in result
        assert "Short one" not in result
        assert result.endswith("...\n*Source: https://example.com/1*")

    def test_short_sentences_excluded(self):
        text = "Sentence one is here. Sentence two is here. Short."
        result = respond("Can you summarize this?", [entry(1, text)])
        assert "**Site 1**" in result
        assert "Short" not in result
        assert "*Source: https://example.com/1*" in result

    def test_at_most_five_sentences(self):
        text = " ".join(f"This is sentence number {i} of the page." for i in range(8))
        result = respond("summary", [entry(1, text)])
        assert "number 4" in result
        assert "number 5" not in result

    def test_multiple_entries_joined_by_blank_line(self):
        result = respond("summary", [entry(1, LONG_TEXT), entry(2, LONG_TEXT)])
        assert "2 website(s)" in result
        assert "*Source: https://example.com/1*\n\n**Site 2**" in result


class TestLinks:
    def test_no_links(self):
        assert respond("list the links", [entry(1, LONG_TEXT)]) == NO_LINKS_MESSAGE
        assert NO_LINKS_MESSAGE == "I didn't find any external links in the scraped content."

    def test_lists_links(self):
        result = respond("links please", [entry(1, links=["/a", "https://b.org"])])
        assert result == "I found 2 links across the websites:\n\n• /a\n• https://b.org"

    def test_caps_display_and_notes_more(self):
        links = [f"/p{i}" for i in range(12)]
        result = respond("links", [entry(1, links=links)])
        assert "I found 12 links" in result
        assert "• /p9" in result
        assert "• /p10" not in result
        assert result.endswith("...and more")

    def test_flattens_across_entries(self):
        result = respond("links", [entry(1, links=["/a"]), entry(2, links=["/b"])])
        assert "• /a\n• /b" in result


class TestStructure:
    def test_counts(self):
        text = "one two three\n\nfour five\n\nsix"
        result = respond("describe the structure", [entry(1, text, links=["/a"])])
        assert result == (
            "Here's the structure analysis:\n\n"
            "**Site 1**\n- Word count: ~6\n- Sections: ~3\n- Links: 1\n"
            "*Source: https://example.com/1*"
        )


class TestSearch:
    def test_matches_sentences(self):
        result = respond("widgets warranty", [entry(1, LONG_TEXT)])
        assert result.startswith('Here\'s what I found about "widgets, warranty":')
        assert "Widgets are manufactured in the northern factory" in result
        assert "two year warranty" in result
        assert "*Source: https://example.com/1*" in result

    def test_caps_matches_per_entry(self):
        text = " ".join(f"The widget model number {i} is great." for i in range(6))
        result = respond("widget", [entry(1, text)])
        assert "number 2" in result
        assert "number 3" not in result

    def test_entries_without_matches_omitted(self):
        other = "Nothing relevant is mentioned anywhere in this text."
        result = respond("warranty", [entry(1, LONG_TEXT), entry(2, other)])
        assert "Site 1" in result
        assert "Site 2" not in result

    def test_not_found(self):
        result = respond("zeppelins", [entry(1, LONG_TEXT)])
        assert result == (
            'I couldn\'t find specific information about "zeppelins" in the scraped '
            "content. Try asking about the main topics or request a summary instead."
        )


class TestOverview:
    def test_overview(self):
        entries = [entry(1, "one two three", links=["/a"]), entry(2, "four five")]
        result = respond("hi", entries)
        assert result.startswith("I have access to 2 website(s): Site 1, Site 2.\n\n")
        assert "Total content: ~5 words, 1 links." in result
        assert result.endswith("• Search for particular topics")
