"""Asynchronous import pipeline: HAL ids in, Zotero items out."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from dlabbib.errors import UpstreamError, ValidationRejected
from dlabbib.models import CanonicalRecord, ErrorEntry, ImportBatchResult, WriteSummary
from dlabbib.settings import Settings
from dlabbib.utils import normalize_identifiers
from .catalog import CatalogFetcher, HalCatalogFetcher, RawCatalogDocument
from .mapper import map_document
from .translator import translate
from .validation import missing_fields
from .writer import BatchWriter
from .zotero import ZoteroClient

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class _FetchOutcome:
    identifier: str
    document: RawCatalogDocument | None = None
    error: ErrorEntry | None = None


class ImportPipeline:
    """Coordinates catalog fetching, mapping, validation and chunked writes."""

    def __init__(
        self,
        fetcher: CatalogFetcher,
        writer: BatchWriter,
        *,
        concurrency: int = 4,
    ) -> None:
        self._fetcher = fetcher
        self._writer = writer
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, settings: Settings) -> "ImportPipeline":
        writer = BatchWriter(ZoteroClient(client, settings), chunk_size=settings.batch_size)
        return cls(
            HalCatalogFetcher(client, settings),
            writer,
            concurrency=settings.fetch_concurrency,
        )

    async def run(self, identifiers: Any) -> ImportBatchResult:
        """Import every distinct identifier and report what happened to each stage."""
        unique_ids = normalize_identifiers(identifiers)
        result = ImportBatchResult(requested=len(unique_ids))
        logger.info("import.start", requested=result.requested)

        outcomes = await asyncio.gather(*(self._fetch(identifier) for identifier in unique_ids))
        items: list[dict[str, Any]] = []
        for outcome in outcomes:
            if outcome.error is not None:
                result.errors.append(outcome.error)
                continue
            if outcome.document is None:
                continue
            result.fetched += 1
            record = map_document(outcome.document)
            if record is None:
                continue
            missing = missing_fields(record)
            if missing:
                logger.info("import.rejected", identifier=outcome.identifier, missing=missing)
                continue
            items.append(translate(record))

        result.importable = len(items)
        result.skipped = result.requested - result.importable
        summary = await self._writer.write_all(items)
        result.imported = summary.imported
        result.failures = summary.failures
        result.errors.extend(summary.errors)
        logger.info(
            "import.done",
            fetched=result.fetched,
            importable=result.importable,
            imported=result.imported,
            failures=result.failures,
            errors=len(result.errors),
        )
        return result

    async def create_record(self, record: CanonicalRecord) -> WriteSummary:
        """Write one manually entered record, refusing incomplete ones."""
        missing = missing_fields(record)
        if missing:
            raise ValidationRejected(missing)
        return await self._writer.write_all([translate(record)])

    async def _fetch(self, identifier: str) -> _FetchOutcome:
        async with self._semaphore:
            try:
                document = await self._fetcher.fetch(identifier)
            except UpstreamError as exc:
                return _FetchOutcome(
                    identifier,
                    error=ErrorEntry(subject_id=identifier, stage="fetch", message=str(exc)),
                )
        return _FetchOutcome(identifier, document=document)
