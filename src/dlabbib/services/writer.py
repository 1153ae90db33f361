"""Chunked submission of translated items to Zotero."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

import structlog

from dlabbib.errors import UpstreamError
from dlabbib.models import ErrorEntry, WriteSummary
from dlabbib.utils import chunked
from .zotero import CreateResponse

logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE = 25


class ItemCreator(Protocol):
    async def create_items(self, items: Sequence[dict[str, Any]]) -> CreateResponse:
        ...


class BatchWriter:
    """Posts items in fixed-size chunks; a failed chunk never stops the next one."""

    def __init__(self, creator: ItemCreator, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._creator = creator
        self._chunk_size = chunk_size

    async def write_all(self, items: Sequence[dict[str, Any]]) -> WriteSummary:
        summary = WriteSummary()
        for start, chunk in chunked(items, self._chunk_size):
            try:
                response = await self._creator.create_items(chunk)
            except UpstreamError as exc:
                logger.warning("writer.chunk_failed", start=start, size=len(chunk), error=str(exc))
                summary.errors.append(
                    ErrorEntry(subject_id=f"batch:{start}", stage="write", message=str(exc))
                )
                continue
            summary.imported += len(response.successful)
            summary.failures += len(response.failed)
            for index, detail in response.failed.items():
                logger.info("writer.item_rejected", start=start, index=index, detail=detail)
            logger.info(
                "writer.chunk_done",
                start=start,
                successful=len(response.successful),
                failed=len(response.failed),
            )
        return summary
