"""
Pydantic models shared across the Site Chat core.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from core.errors import ErrorKind


class ContentRecord(BaseModel):
    """Normalised text of one fetched page, as kept in the content store."""

    url: str
    title: str
    body: str
    links: list[str] = Field(default_factory=list)
    fetched_at: int  # epoch milliseconds


class ContextEntry(BaseModel):
    """Prompt-ready projection of a ContentRecord (never persisted)."""

    url: str
    title: str
    text: str
    links: list[str] = Field(default_factory=list)


class Message(BaseModel):
    """A single chat message, user-entered or generated."""

    id: str
    content: str
    is_user: bool
    timestamp: int  # epoch milliseconds
    sources: Optional[list[str]] = None


class AnswerResult(BaseModel):
    """Outcome of one AnswerEngine.answer() call."""

    success: bool
    response: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    sources: list[str] = Field(default_factory=list)
    strategy: Optional[str] = None


class ScrapeResult(BaseModel):
    """Outcome of one Scraper.scrape() call."""

    success: bool
    data: Optional[ContentRecord] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


# ── Scraping service payload ──────────────────────────────────────────────────


class FirecrawlMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None


class FirecrawlResult(BaseModel):
    """The subset of a Firecrawl ``/v1/scrape`` payload that we consume."""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    markdown: Optional[str] = None
    html: Optional[str] = None
    metadata: FirecrawlMetadata = Field(default_factory=FirecrawlMetadata)
