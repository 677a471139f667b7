"""Tests for core/answer.py — the AnswerEngine contract."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from core.answer import NO_CONTEXT_MESSAGE, AnswerEngine
from core.errors import EmptyResponse, ErrorKind, UpstreamFailure
from core.limits import MAX_CONTEXT_CHARS
from core.strategies import HeuristicStrategy

from conftest import make_record


def make_strategy(name: str = "remote", answer: str = "Remote answer.", error=None):
    strategy = MagicMock()
    strategy.name = name
    if error is not None:
        strategy.generate.side_effect = error
    else:
        strategy.generate.return_value = answer
    return strategy


@pytest.fixture
def stocked_store(content_store):
    content_store.upsert(make_record(1, body="Widgets are built in the northern factory. " * 3))
    content_store.upsert(make_record(2))
    return content_store


class TestPreconditions:
    def test_blank_message_is_invalid_input(self, stocked_store):
        strategy = make_strategy()
        result = AnswerEngine(stocked_store, strategy).answer("   ", ["https://example.com/1"])
        assert result.success is False
        assert result.error_kind == ErrorKind.INVALID_INPUT
        strategy.generate.assert_not_called()

    def test_no_resolvable_urls_is_no_context(self, stocked_store):
        strategy = make_strategy()
        result = AnswerEngine(stocked_store, strategy).answer("What?", ["https://missing.test"])
        assert result.success is False
        assert result.error_kind == ErrorKind.NO_CONTEXT
        assert result.error == NO_CONTEXT_MESSAGE
        strategy.generate.assert_not_called()

    def test_empty_url_list_is_no_context(self, stocked_store):
        result = AnswerEngine(stocked_store, make_strategy()).answer("What?", [])
        assert result.error_kind == ErrorKind.NO_CONTEXT


class TestSuccess:
    def test_returns_strategy_answer_with_sources(self, stocked_store):
        strategy = make_strategy()
        result = AnswerEngine(stocked_store, strategy).answer(
            "What?", ["https://example.com/2", "https://missing.test", "https://example.com/1"]
        )
        assert result.success is True
        assert result.response == "Remote answer."
        assert result.sources == ["https://example.com/2", "https://example.com/1"]
        assert result.strategy == "remote"

        message, entries = strategy.generate.call_args.args
        assert message == "What?"
        assert [e.url for e in entries] == result.sources

    def test_heuristic_strategy(self, stocked_store):
        engine = AnswerEngine(stocked_store, HeuristicStrategy())
        result = engine.answer("summary and links", ["https://example.com/1"])
        assert result.success is True
        assert result.response.startswith("Here's a summary of the 1 website(s):")
        assert result.strategy == "heuristic"


class TestFailures:
    def test_empty_response_reported(self, stocked_store):
        strategy = make_strategy(error=EmptyResponse("No response from model"))
        result = AnswerEngine(stocked_store, strategy).answer("What?", ["https://example.com/1"])
        assert result.success is False
        assert result.error_kind == ErrorKind.EMPTY_RESPONSE
        assert result.error == "No response from model"

    def test_upstream_failure_reported(self, stocked_store):
        strategy = make_strategy(error=UpstreamFailure("boom"))
        result = AnswerEngine(stocked_store, strategy).answer("What?", ["https://example.com/1"])
        assert result.success is False
        assert result.error_kind == ErrorKind.UPSTREAM_FAILURE
        assert result.sources == ["https://example.com/1"]

    def test_unexpected_exception_does_not_escape(self, stocked_store):
        strategy = make_strategy(error=RuntimeError("kaboom"))
        result = AnswerEngine(stocked_store, strategy).answer("What?", ["https://example.com/1"])
        assert result.success is False
        assert result.error_kind == ErrorKind.UPSTREAM_FAILURE
        assert "kaboom" not in result.error

    def test_fallback_used_on_failure(self, stocked_store):
        engine = AnswerEngine(
            stocked_store,
            make_strategy(error=UpstreamFailure("down")),
            fallback=HeuristicStrategy(),
        )
        result = engine.answer("list the links", ["https://example.com/1"])
        assert result.success is True
        assert result.strategy == "heuristic"
        assert result.response == "I didn't find any external links in the scraped content."

    def test_failing_fallback_reports_primary_error(self, stocked_store):
        engine = AnswerEngine(
            stocked_store,
            make_strategy(error=UpstreamFailure("down")),
            fallback=make_strategy("backup", error=RuntimeError("also down")),
        )
        result = engine.answer("What?", ["https://example.com/1"])
        assert result.success is False
        assert result.error == "down"


class TestFullPageText:
    def test_heuristic_counts_words_beyond_prompt_cap(self, content_store):
        content_store.upsert(make_record(1, body="word " * 1000))
        engine = AnswerEngine(content_store, HeuristicStrategy())

        result = engine.answer("describe the structure", ["https://example.com/1"])

        assert "- Word count: ~1000\n" in result.response

    def test_heuristic_search_finds_late_sentence(self, content_store):
        body = "Filler text that says nothing at all. " * 80 + "The warranty lasts for two full years."
        assert body.index("warranty") > MAX_CONTEXT_CHARS
        content_store.upsert(make_record(1, body=body))
        engine = AnswerEngine(content_store, HeuristicStrategy())

        result = engine.answer("warranty", ["https://example.com/1"])

        assert result.response.startswith('Here\'s what I found about "warranty":')
        assert "The warranty lasts for two full years" in result.response

    def test_remote_strategy_receives_whole_body(self, content_store):
        content_store.upsert(make_record(1, body="x" * 5000))
        strategy = make_strategy()

        AnswerEngine(content_store, strategy).answer("What?", ["https://example.com/1"])

        _, entries = strategy.generate.call_args.args
        assert len(entries[0].text) == 5000

    def test_non_string_urls_are_ignored(self, stocked_store):
        strategy = make_strategy()
        result = AnswerEngine(stocked_store, strategy).answer(
            "What?", [["x"], {"u": 1}, "https://example.com/1"]
        )
        assert result.success is True
        assert result.sources == ["https://example.com/1"]
