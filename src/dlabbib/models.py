"""Core data models used throughout dlabbib."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class RecordType(str, Enum):
    BOOK = "book"
    BOOK_SECTION = "bookSection"
    JOURNAL_ARTICLE = "journalArticle"


class Creator(BaseModel):
    """Represents a single author of a record."""

    first_name: str = ""
    last_name: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class CanonicalRecord(BaseModel):
    """Catalog- and Zotero-agnostic description of one bibliographic entry."""

    record_type: RecordType
    title: str = ""
    authors: list[Creator] = Field(default_factory=list)
    date: str = ""
    publisher: str = ""
    place: str = ""
    pages: str = ""
    isbn: str = ""
    book_title: str = ""
    series: str = ""
    series_number: str = ""
    volume: str = ""
    edition: str = ""
    publication_name: str = ""
    article_volume: str = ""
    article_issue: str = ""
    doi: str = ""
    abstract: str = ""
    language: str = ""
    extra_text: str = ""
    source_id: str = ""  # HAL id, empty for manual entries


class ErrorEntry(BaseModel):
    """One per-identifier or per-chunk failure recorded during an import run."""

    subject_id: str
    stage: str  # "fetch" or "write"
    message: str


class WriteSummary(BaseModel):
    imported: int = 0
    failures: int = 0
    errors: list[ErrorEntry] = Field(default_factory=list)


class ImportBatchResult(BaseModel):
    """Aggregate outcome of one import run."""

    requested: int = 0
    fetched: int = 0
    importable: int = 0
    imported: int = 0
    skipped: int = 0
    failures: int = 0
    errors: list[ErrorEntry] = Field(default_factory=list)


class ItemState(BaseModel):
    """A Zotero item as read before a conditional update."""

    key: str
    version: int
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def extra(self) -> str:
        return self.data.get("extra") or ""


class UpdateStatus(str, Enum):
    DONE = "done"
    CONFLICT = "conflict"
    FAILED = "failed"
    NOT_FOUND = "not_found"


class FlagUpdateOutcome(BaseModel):
    """Terminal state of one flag update request."""

    key: str
    status: UpdateStatus
    flags: dict[str, str] = Field(default_factory=dict)
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is UpdateStatus.DONE

    def to_payload(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True}
        return {"ok": False, "error": self.status.value, "message": self.message}


class LibraryItem(BaseModel):
    """Summary of a Zotero item with its parsed workflow flags."""

    key: str
    item_type: str
    title: str = ""
    date: str = ""
    year: str = ""
    creators_text: str = ""
    flags: dict[str, str] = Field(default_factory=dict)
