"""Utility helpers for identifier cleanup and loose catalog values."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from typing import Any, TypeVar

from dlabbib.errors import InvalidInput

DOI_PREFIX_PATTERN = re.compile(r"^(?:https?://doi\.org/|doi:\s*)", flags=re.IGNORECASE)
YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")

T = TypeVar("T")


def normalize_identifiers(raw: Any) -> list[str]:
    """Return distinct, trimmed, non-empty identifiers in first-seen order."""
    if isinstance(raw, (str, bytes)) or not isinstance(raw, (list, tuple)):
        raise InvalidInput("Expected a list of identifiers")
    seen: dict[str, None] = {}
    for value in raw:
        if value is None:
            continue
        identifier = str(value).strip()
        if identifier:
            seen.setdefault(identifier, None)
    if not seen:
        raise InvalidInput("No usable identifiers supplied")
    return list(seen)


def as_string(value: Any) -> str:
    """Flatten a catalog value (scalar or multi-valued list) into a trimmed string."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        parts = (as_string(item) for item in value)
        return " ".join(part for part in parts if part).strip()
    return str(value).strip()


def pick_first_non_empty(doc: dict[str, Any], keys: Sequence[str]) -> str:
    for key in keys:
        value = as_string(doc.get(key))
        if value:
            return value
    return ""


def normalize_doi(raw: Any) -> str:
    return DOI_PREFIX_PATTERN.sub("", as_string(raw)).strip()


def extract_year(value: str) -> str:
    match = YEAR_PATTERN.search(value or "")
    return match.group(0) if match else ""


def chunked(items: Sequence[T], size: int) -> Iterator[tuple[int, Sequence[T]]]:
    """Yield `(start_index, chunk)` pairs of at most `size` items."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield start, items[start : start + size]
