"""Map raw HAL documents onto canonical records."""

from __future__ import annotations

from typing import Any

import structlog

from dlabbib.models import CanonicalRecord, Creator, RecordType
from dlabbib.utils import as_string, normalize_doi, pick_first_non_empty

logger = structlog.get_logger(__name__)

HAL_TYPE_TABLE: dict[str, RecordType] = {
    "ART": RecordType.JOURNAL_ARTICLE,
    "OUV": RecordType.BOOK,
    "COUV": RecordType.BOOK_SECTION,
}

# Ordered aliases per canonical field; the first non-empty one wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("title_s", "title_t"),
    "publisher": ("publisher_s", "publisher_t"),
    "place": ("place_s", "city_s"),
    "pages": ("page_s",),
    "isbn": ("isbn_s",),
    "book_title": ("bookTitle_s", "bookTitle_t"),
    "series": ("series_s", "series_t"),
    "series_number": ("seriesNumber_s",),
    "volume": ("volume_s",),
    "edition": ("edition_s",),
    "publication_name": ("journalTitle_s", "journalTitle_t"),
    "article_volume": ("volume_s",),
    "article_issue": ("issue_s",),
    "abstract": ("abstract_s", "abstract_t"),
    "language": ("language_s",),
}
YEAR_FIELDS = ("year_i",)
FULL_DATE_FIELDS = ("producedDate_s", "publicationDate_s")


def map_document(doc: dict[str, Any]) -> CanonicalRecord | None:
    """Return the canonical record for ``doc``, or None when its type is not imported."""
    doc_type = as_string(doc.get("docType_s"))
    record_type = HAL_TYPE_TABLE.get(doc_type)
    if record_type is None:
        logger.debug("mapper.unsupported_type", doc_type=doc_type)
        return None

    fields = {name: pick_first_non_empty(doc, aliases) for name, aliases in FIELD_ALIASES.items()}
    hal_id = pick_first_non_empty(doc, ("halId_s",))
    return CanonicalRecord(
        record_type=record_type,
        authors=parse_creators(doc),
        date=resolve_date(doc),
        doi=normalize_doi(pick_first_non_empty(doc, ("doiId_s",))),
        extra_text=_provenance(hal_id, pick_first_non_empty(doc, ("docid",))),
        source_id=hal_id,
        **fields,
    )


def resolve_date(doc: dict[str, Any]) -> str:
    year = pick_first_non_empty(doc, YEAR_FIELDS)
    if year:
        return year
    return pick_first_non_empty(doc, FULL_DATE_FIELDS)[:10]


def parse_creators(doc: dict[str, Any]) -> list[Creator]:
    """Extract authors, preferring HAL's parallel last/first name arrays."""
    last_names = doc.get("authLastName_s")
    first_names = doc.get("authFirstName_s")
    if isinstance(last_names, list) and isinstance(first_names, list) and last_names and first_names:
        creators = []
        for last, first in zip(last_names, first_names):
            creator = Creator(first_name=as_string(first), last_name=as_string(last))
            if creator.first_name or creator.last_name:
                creators.append(creator)
        if creators:
            return creators

    full_names = doc.get("authFullName_s")
    if full_names is None:
        return []
    if not isinstance(full_names, list):
        full_names = [full_names]
    return [creator for creator in map(split_full_name, full_names) if creator is not None]


def split_full_name(raw: Any) -> Creator | None:
    """Split "Last, First" or "First Middle Last" into a creator."""
    name = as_string(raw)
    if not name:
        return None
    if "," in name:
        last, first = name.split(",", 1)
        return Creator(first_name=first.strip(), last_name=last.strip())
    tokens = name.split()
    return Creator(first_name=" ".join(tokens[:-1]), last_name=tokens[-1])


def _provenance(hal_id: str, docid: str) -> str:
    lines = []
    if hal_id:
        lines.append(f"HAL: {hal_id}")
    if docid:
        lines.append(f"HAL_DOCID: {docid}")
    return "\n".join(lines)
