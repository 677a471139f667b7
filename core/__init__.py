"""
site-chat core package.

Modules
───────
models         — Pydantic data models (ContentRecord, Message, ContextEntry, results)
normalizer     — HTML / scrape result → ContentRecord
scraper        — Firecrawl + plain-fetch page acquisition, stored credentials
content_store  — bounded page cache, most recent first
history        — bounded chat history
context        — prompt context assembly
heuristics     — local keyword-based answers
strategies     — Anthropic / proxy / heuristic answer strategies
answer         — AnswerEngine: context → strategy → AnswerResult
session        — ChatSession wiring for the web app and CLI
storage        — key-value persistence (SQLite, in-memory)
"""
