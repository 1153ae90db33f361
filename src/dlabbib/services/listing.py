"""Read-side views of the Zotero library with parsed workflow flags."""

from __future__ import annotations

from typing import Any, Iterable

import structlog

from dlabbib.flags import parse_flags
from dlabbib.models import LibraryItem, RecordType
from dlabbib.utils import extract_year
from .zotero import ZoteroClient

logger = structlog.get_logger(__name__)

LISTED_TYPES = frozenset(record_type.value for record_type in RecordType)


class LibraryBrowser:
    """Pages through the library newest-first and summarises supported items."""

    def __init__(self, zotero: ZoteroClient, *, page_size: int = 100) -> None:
        self._zotero = zotero
        self._page_size = page_size

    async def list_items(
        self, *, limit: int = 200, item_types: Iterable[str] | None = None
    ) -> list[LibraryItem]:
        wanted = frozenset(item_types) if item_types else LISTED_TYPES
        items: list[LibraryItem] = []
        start = 0
        while len(items) < limit:
            page = await self._zotero.list_items(start=start, limit=self._page_size)
            if not page.items:
                break
            items.extend(summarize(data) for data in page.items if data.get("itemType") in wanted)
            if not page.has_more:
                break
            start += len(page.items)
        logger.debug("listing.done", count=len(items))
        return items[:limit]

    async def flags_for(self, key: str) -> dict[str, str]:
        item = await self._zotero.get_item(key)
        return parse_flags(item.extra)


def summarize(data: dict[str, Any]) -> LibraryItem:
    creators = [
        _creator_name(creator)
        for creator in data.get("creators") or []
        if creator and creator.get("creatorType") in ("author", "editor")
    ]
    date = data.get("date") or ""
    return LibraryItem(
        key=data.get("key", ""),
        item_type=data.get("itemType", ""),
        title=data.get("title") or "",
        date=date,
        year=extract_year(date),
        creators_text=", ".join(name for name in creators if name),
        flags=parse_flags(data.get("extra")),
    )


def _creator_name(creator: dict[str, Any]) -> str:
    last = (creator.get("lastName") or "").strip()
    first = (creator.get("firstName") or "").strip()
    return f"{last} {first}".strip() or (creator.get("name") or "").strip()
