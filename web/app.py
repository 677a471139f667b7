"""
Flask web server for Site Chat.

Routes
──────
POST   /api/chat        Completion proxy: {message, contexts} → {response}
POST   /api/scrape      Scrape a URL into the content cache
GET    /api/sites       List cached pages
DELETE /api/sites       Clear the content cache
POST   /api/ask         Ask about cached pages (records history)
GET    /api/history     Conversation so far
DELETE /api/history     Clear the conversation
GET    /health          Liveness check
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from pydantic import ValidationError

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from config.settings import Settings
from core.errors import EmptyResponse, ErrorKind, UpstreamFailure
from core.models import ContextEntry
from core.scraper import ANTHROPIC_KEY, get_api_key
from core.session import ChatSession, build_session
from core.storage import SqliteStore
from core.strategies import AnthropicStrategy

logger = logging.getLogger(__name__)

#: HTTP status for each failure kind reported by the session routes.
_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NO_CONTEXT: 404,
    ErrorKind.FETCH_FAILED: 502,
    ErrorKind.EMPTY_RESPONSE: 502,
    ErrorKind.UPSTREAM_FAILURE: 502,
}


def _status_for(kind: Optional[ErrorKind]) -> int:
    return _STATUS_BY_KIND.get(kind, 500) if kind else 500


def create_app(
    settings: Optional[Settings] = None,
    session: Optional[ChatSession] = None,
    completion: Optional[AnthropicStrategy] = None,
) -> Flask:
    """Build the Flask app.

    Args:
        settings: Configuration; read from the environment when omitted.
        session: Chat session for the /api/scrape, /api/ask, … routes;
            built from *settings* when omitted.
        completion: Strategy behind ``/api/chat``; defaults to Anthropic with
            the server-side key.
    """
    settings = settings or Settings()
    if session is None:
        storage = SqliteStore(settings.db_path)
        settings.validate(get_api_key(storage, ANTHROPIC_KEY))
        session = build_session(settings, storage)
    else:
        settings.validate()
    completion = completion or AnthropicStrategy(settings)

    app = Flask(__name__)

    @app.errorhandler(405)
    def method_not_allowed(_exc):
        return jsonify({"error": "Method not allowed"}), 405

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    # ── Completion proxy ───────────────────────────────────────────────────

    @app.route("/api/chat", methods=["POST"])
    def chat():
        """Answer a question over caller-supplied contexts with Claude.

        Body: ``{"message": str, "contexts": [{"title", "url", "text"}]}``
        """
        body = request.get_json(silent=True) or {}
        message = body.get("message") if isinstance(body, dict) else None
        contexts = body.get("contexts") if isinstance(body, dict) else None

        if not isinstance(message, str) or not message.strip() or not contexts:
            return jsonify({"error": "Missing required fields"}), 400
        try:
            entries = [ContextEntry.model_validate(ctx) for ctx in contexts]
        except (ValidationError, TypeError):
            return jsonify({"error": "Missing required fields"}), 400

        try:
            answer = completion.generate(message.strip(), entries)
        except EmptyResponse:
            return jsonify({"error": "No response from model"}), 500
        except UpstreamFailure as exc:
            logger.error("Completion API error: %s", exc)
            return jsonify({"error": "Failed to process request"}), 500
        except Exception:
            logger.exception("Completion API error")
            return jsonify({"error": "Failed to process request"}), 500

        return jsonify({"response": answer})

    # ── Sites ──────────────────────────────────────────────────────────────

    @app.route("/api/scrape", methods=["POST"])
    def scrape():
        body = request.get_json(silent=True) or {}
        url = body.get("url", "") if isinstance(body, dict) else ""
        if not isinstance(url, str) or not url.strip():
            return jsonify({"error": "url is required"}), 400

        result = session.scrape(url)
        if not result.success:
            return jsonify({"error": result.error}), _status_for(result.error_kind)
        return jsonify(result.data.model_dump(mode="json"))

    @app.route("/api/sites")
    def list_sites():
        """Return cached pages without their body text."""
        return jsonify(
            [
                {
                    "url": record.url,
                    "title": record.title,
                    "fetched_at": record.fetched_at,
                    "links": record.links,
                }
                for record in session.sites()
            ]
        )

    @app.route("/api/sites", methods=["DELETE"])
    def clear_sites():
        session.clear_sites()
        return jsonify({"cleared": True})

    # ── Questions & history ────────────────────────────────────────────────

    @app.route("/api/ask", methods=["POST"])
    def ask():
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            return jsonify({"error": "Missing required fields"}), 400
        urls = body.get("urls")
        if urls is not None and (
            not isinstance(urls, list) or not all(isinstance(u, str) for u in urls)
        ):
            return jsonify({"error": "urls must be a list of strings"}), 400

        result = session.ask(body.get("message") or "", urls)
        if not result.success:
            return jsonify({"error": result.error}), _status_for(result.error_kind)
        return jsonify(
            {
                "response": result.response,
                "sources": result.sources,
                "strategy": result.strategy,
            }
        )

    @app.route("/api/history")
    def history():
        return jsonify([m.model_dump(mode="json") for m in session.history()])

    @app.route("/api/history", methods=["DELETE"])
    def clear_history():
        session.clear_history()
        return jsonify({"cleared": True})

    return app


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    settings = Settings()
    create_app(settings).run(debug=settings.debug, host="0.0.0.0", port=settings.port)
