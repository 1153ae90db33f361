"""Completeness gate applied before a record may be sent to Zotero."""

from __future__ import annotations

from dlabbib.models import CanonicalRecord, RecordType

COMMON_REQUIRED = ("title", "authors", "date")
TYPE_REQUIRED: dict[RecordType, tuple[str, ...]] = {
    RecordType.BOOK: ("publisher", "place"),
    RecordType.BOOK_SECTION: ("book_title", "publisher", "place"),
    # Journal metadata is sparse in HAL; the journal name is the only extra requirement.
    RecordType.JOURNAL_ARTICLE: ("publication_name",),
}


def missing_fields(record: CanonicalRecord) -> list[str]:
    """Return the required fields that are empty on ``record``."""
    missing = [name for name in COMMON_REQUIRED if not getattr(record, name)]
    if "authors" not in missing and not any(author.last_name for author in record.authors):
        missing.append("authors")
    missing += [name for name in TYPE_REQUIRED[record.record_type] if not getattr(record, name)]
    return missing


def validate(record: CanonicalRecord) -> bool:
    return not missing_fields(record)
