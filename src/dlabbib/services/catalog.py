"""Catalog fetchers turning HAL identifiers into raw HAL documents."""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog

from dlabbib.errors import UpstreamError
from dlabbib.settings import Settings

logger = structlog.get_logger(__name__)

# HAL fields vary between document types, so ask for every alias the mapper knows.
HAL_FIELDS = (
    "halId_s",
    "docid",
    "docType_s",
    "title_s",
    "title_t",
    "year_i",
    "producedDate_s",
    "publicationDate_s",
    "authFullName_s",
    "authLastName_s",
    "authFirstName_s",
    "journalTitle_s",
    "journalTitle_t",
    "volume_s",
    "issue_s",
    "page_s",
    "publisher_s",
    "publisher_t",
    "place_s",
    "city_s",
    "bookTitle_s",
    "bookTitle_t",
    "isbn_s",
    "series_s",
    "series_t",
    "seriesNumber_s",
    "edition_s",
    "doiId_s",
    "abstract_s",
    "abstract_t",
    "language_s",
)

RawCatalogDocument = dict[str, Any]


class CatalogFetcher(Protocol):
    """Protocol for components resolving one identifier to a catalog document."""

    name: str

    async def fetch(self, identifier: str) -> RawCatalogDocument | None:
        ...


class HalCatalogFetcher:
    """Looks documents up in the HAL search API, one query per identifier."""

    name = "hal"

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def fetch(self, identifier: str) -> RawCatalogDocument | None:
        logger.debug("catalog.lookup", identifier=identifier)
        params = {
            "q": f'halId_s:"{quote_phrase(identifier)}"',
            "wt": "json",
            "rows": 1,
            "fl": ",".join(HAL_FIELDS),
        }
        try:
            response = await self._client.get(
                self._settings.hal_search_url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self._settings.request_timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("catalog.transport_error", identifier=identifier, error=str(exc))
            raise UpstreamError(self.name, None, str(exc)) from exc
        if response.is_error:
            logger.warning("catalog.http_error", identifier=identifier, status=response.status_code)
            raise UpstreamError(self.name, response.status_code, response.text)
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(self.name, response.status_code, "invalid JSON payload") from exc
        body = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(body, dict):
            raise UpstreamError(self.name, response.status_code, "unexpected search payload")
        docs = body.get("docs") or []
        if not docs:
            logger.info("catalog.empty", identifier=identifier)
            return None
        return docs[0]


def quote_phrase(value: str) -> str:
    """Escape ``\\`` and ``"`` so ``value`` stays one literal Solr phrase."""
    return value.replace("\\", "\\\\").replace('"', '\\"')
