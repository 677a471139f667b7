"""Error taxonomy for the question-answering pipeline.

Components raise these internally; the scraper and the answer engine turn
them into ``{success: False, error}`` results so none of them escape.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable failure category carried on result objects."""

    INVALID_INPUT = "invalid_input"
    FETCH_FAILED = "fetch_failed"
    NO_CONTEXT = "no_context"
    EMPTY_RESPONSE = "empty_response"
    UPSTREAM_FAILURE = "upstream_failure"


class SiteChatError(Exception):
    """Base class for every pipeline failure."""

    kind: ErrorKind = ErrorKind.UPSTREAM_FAILURE


class InvalidInput(SiteChatError):
    kind = ErrorKind.INVALID_INPUT


class FetchFailed(SiteChatError):
    kind = ErrorKind.FETCH_FAILED


class NoContext(SiteChatError):
    kind = ErrorKind.NO_CONTEXT


class UpstreamFailure(SiteChatError):
    kind = ErrorKind.UPSTREAM_FAILURE


class EmptyResponse(UpstreamFailure):
    """The completion call succeeded but produced no text."""

    kind = ErrorKind.EMPTY_RESPONSE
