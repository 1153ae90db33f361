"""Translate canonical records into Zotero item payloads."""

from __future__ import annotations

from typing import Any

from dlabbib.models import CanonicalRecord, RecordType

SOURCE_TAG_PREFIX = "HALID:"


def translate(record: CanonicalRecord) -> dict[str, Any]:
    """Return the Zotero API field set for ``record``'s item type."""
    item: dict[str, Any] = {
        "itemType": record.record_type.value,
        "title": record.title,
        "creators": [
            {
                "creatorType": "author",
                "firstName": author.first_name,
                "lastName": author.last_name,
            }
            for author in record.authors
        ],
    }
    if record.record_type is RecordType.JOURNAL_ARTICLE:
        item.update(
            publicationTitle=record.publication_name,
            date=record.date,
            volume=record.article_volume,
            issue=record.article_issue,
            pages=record.pages,
            DOI=record.doi,
        )
    else:
        if record.record_type is RecordType.BOOK_SECTION:
            item.update(bookTitle=record.book_title, pages=record.pages)
        else:
            item["numPages"] = record.pages
        item.update(
            series=record.series,
            seriesNumber=record.series_number,
            volume=record.volume,
            edition=record.edition,
            date=record.date,
            publisher=record.publisher,
            place=record.place,
            ISBN=record.isbn,
        )
    item.update(
        abstractNote=record.abstract,
        language=record.language,
        extra=record.extra_text,
        tags=[{"tag": f"{SOURCE_TAG_PREFIX}{record.source_id}"}] if record.source_id else [],
    )
    return item
