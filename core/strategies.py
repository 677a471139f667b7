"""Answer strategies.

An ``AnswerStrategy`` turns a question plus context entries into answer text,
raising a ``SiteChatError`` subclass when it cannot. Three implementations:

* ``AnthropicStrategy`` — calls the Claude Messages API directly with a
  server-side or user-stored key.
* ``ProxyStrategy``     — posts to a trusted ``/api/chat`` endpoint that
  holds the key (see ``web/app.py``).
* ``HeuristicStrategy`` — local keyword heuristics, no network.

``build_strategy()`` picks one from settings once, at startup.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Protocol

import anthropic
import requests

from core import heuristics
from core.context import SYSTEM_PROMPT, build_prompt
from core.errors import EmptyResponse, UpstreamFailure
from core.limits import MAX_CONTEXT_CHARS, MAX_OUTPUT_TOKENS, TEMPERATURE
from core.models import ContextEntry

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)


class AnswerStrategy(Protocol):
    """Produces answer text for a question over context entries."""

    name: str

    def generate(self, message: str, entries: list[ContextEntry]) -> str: ...


# ── Remote: Anthropic ─────────────────────────────────────────────────────────


class AnthropicStrategy:
    """Answers with a single Claude completion call.

    The Anthropic client is lazy-initialised so that the strategy can be
    built without a key; a missing key surfaces as ``UpstreamFailure`` on
    the first call.
    """

    name = "anthropic"

    def __init__(self, settings: Settings, api_key: Optional[str] = None) -> None:
        """Initialise the strategy.

        Args:
            settings: Application configuration (model, timeout).
            api_key: Key to use instead of ``settings.anthropic_api_key``,
                e.g. one the user stored locally.
        """
        self.settings = settings
        self.api_key = api_key or settings.anthropic_api_key
        self._client: object = None  # Lazy-initialised anthropic.Anthropic

    @property
    def client(self) -> object:
        """Lazy-initialise and return the Anthropic SDK client."""
        if self._client is None:
            # max_retries=1: one retry on connection errors, 429s and 5xx.
            self._client = anthropic.Anthropic(
                api_key=self.api_key,
                timeout=self.settings.completion_timeout,
                max_retries=1,
            )
        return self._client

    def generate(self, message: str, entries: list[ContextEntry]) -> str:
        """Ask Claude to answer *message* from *entries*.

        Raises:
            UpstreamFailure: On a missing key or any API error.
            EmptyResponse: If the completion has no text after trimming.
        """
        if not self.api_key:
            raise UpstreamFailure("No Anthropic API key configured.")

        try:
            response = self.client.messages.create(
                model=self.settings.chat_model,
                max_tokens=MAX_OUTPUT_TOKENS,
                temperature=TEMPERATURE,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_prompt(message, entries)}],
            )
        except anthropic.APIError as exc:
            logger.warning("Anthropic completion failed: %s", exc)
            raise UpstreamFailure(f"Completion request failed: {exc}") from exc

        text = "".join(
            getattr(block, "text", "") or ""
            for block in (getattr(response, "content", None) or [])
            if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise EmptyResponse("No response from model")
        return text


# ── Remote: completion proxy ──────────────────────────────────────────────────


class ProxyStrategy:
    """Answers by posting to a ``POST /api/chat`` completion proxy."""

    name = "proxy"

    def __init__(self, endpoint: str, timeout: float = 30.0) -> None:
        self.endpoint = endpoint
        self.timeout = timeout

    def generate(self, message: str, entries: list[ContextEntry]) -> str:
        payload = {
            "message": message,
            "contexts": [
                {"title": e.title, "url": e.url, "text": e.text[:MAX_CONTEXT_CHARS]}
                for e in entries
            ],
        }
        try:
            resp = requests.post(self.endpoint, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Completion proxy unreachable at %s: %s", self.endpoint, exc)
            raise UpstreamFailure(f"Completion proxy unreachable: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not resp.ok:
            raise UpstreamFailure(data.get("error") or f"API error: {resp.status_code}")

        answer = (data.get("response") or "").strip()
        if not answer:
            raise EmptyResponse(data.get("error") or "No response from API")
        return answer


# ── Local ─────────────────────────────────────────────────────────────────────


class HeuristicStrategy:
    """Deterministic keyword-based answers; never fails."""

    name = "heuristic"

    def generate(self, message: str, entries: list[ContextEntry]) -> str:
        return heuristics.respond(message, entries)


# ── Selection ─────────────────────────────────────────────────────────────────


def build_strategy(settings: Settings, api_key: Optional[str] = None) -> AnswerStrategy:
    """Pick the answer strategy named by ``settings.answer_strategy``.

    Args:
        settings: Application configuration.
        api_key: Optional user-stored Anthropic key; takes precedence over
            the environment key.

    Returns:
        The configured strategy. ``"auto"`` means Anthropic when any key is
        available, heuristics otherwise.
    """
    choice = settings.answer_strategy
    key = api_key or settings.anthropic_api_key

    if choice == "auto":
        choice = "anthropic" if key else "heuristic"

    if choice == "anthropic":
        return AnthropicStrategy(settings, api_key=key)
    if choice == "proxy":
        return ProxyStrategy(settings.proxy_url, timeout=settings.completion_timeout)
    if choice == "heuristic":
        return HeuristicStrategy()
    raise ValueError(f"Unknown answer strategy: {settings.answer_strategy!r}")
