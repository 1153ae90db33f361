"""Thin async client for the Zotero Web API v3."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence
from urllib.parse import quote

import httpx
import structlog

from dlabbib.errors import MissingVersion, NotFound, UpstreamError, VersionConflict
from dlabbib.models import ItemState
from dlabbib.settings import Settings

logger = structlog.get_logger(__name__)

API_VERSION = "3"
WRITE_RESULT_KEYS = frozenset({"successful", "failed", "unsuccessful"})


@dataclass(slots=True)
class CreateResponse:
    """Per-item outcome of one create request, keyed by position in the request."""

    successful: dict[str, Any] = field(default_factory=dict)
    failed: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ItemPage:
    items: list[dict[str, Any]]
    has_more: bool


class ZoteroClient:
    """Reads, creates and conditionally updates items in one Zotero library."""

    name = "zotero"

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings
        self._items_url = (
            settings.zotero_base_url.rstrip("/") + settings.zotero_library_path() + "/items"
        )
        self._headers = {
            "Zotero-API-Key": settings.zotero_api_key or "",
            "Zotero-API-Version": API_VERSION,
        }

    async def get_item(self, key: str) -> ItemState:
        response = await self._request("GET", self._item_url(key))
        if response.status_code == 404:
            raise NotFound(key)
        self._raise_for_status(response)
        payload = self._json_object(response)
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise UpstreamError(self.name, response.status_code, "unexpected item payload")
        version = data.get("version", payload.get("version"))
        if not version:
            raise MissingVersion(key)
        return ItemState(key=key, version=int(version), data=data)

    async def create_items(self, items: Sequence[dict[str, Any]]) -> CreateResponse:
        response = await self._request(
            "POST",
            self._items_url,
            json=list(items),
            headers={"Content-Type": "application/json"},
        )
        self._raise_for_status(response)
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict) or not WRITE_RESULT_KEYS & payload.keys():
            # Older API answers carry no per-item breakdown; a 2xx means all were stored.
            return CreateResponse(successful={str(i): item for i, item in enumerate(items)})
        # v3 reports rejections under "failed"; "unsuccessful" is the legacy name.
        return CreateResponse(
            successful=payload.get("successful") or {},
            failed=payload.get("failed") or payload.get("unsuccessful") or {},
        )

    async def update_item(self, key: str, data: dict[str, Any], version: int) -> None:
        """PUT the full item, failing with VersionConflict if it changed since ``version``."""
        response = await self._request(
            "PUT",
            self._item_url(key),
            json=data,
            headers={
                "Content-Type": "application/json",
                "If-Unmodified-Since-Version": str(version),
            },
        )
        if response.status_code == 412:
            raise VersionConflict(key, version)
        if response.status_code == 404:
            raise NotFound(key)
        self._raise_for_status(response)

    async def list_items(self, *, start: int = 0, limit: int = 100) -> ItemPage:
        params = {
            "format": "json",
            "include": "data",
            "start": start,
            "limit": limit,
            "sort": "dateModified",
            "direction": "desc",
        }
        response = await self._request("GET", self._items_url, params=params)
        self._raise_for_status(response)
        try:
            entries = response.json()
        except ValueError as exc:
            raise UpstreamError(self.name, response.status_code, "invalid JSON payload") from exc
        if not isinstance(entries, list):
            raise UpstreamError(self.name, response.status_code, "unexpected item list payload")
        items = [entry.get("data") or {} for entry in entries if isinstance(entry, dict)]
        return ItemPage(items=items, has_more="next" in response.links)

    def _json_object(self, response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("zotero.invalid_payload", url=str(response.request.url))
            raise UpstreamError(self.name, response.status_code, "invalid JSON payload") from exc
        if not isinstance(payload, dict):
            raise UpstreamError(self.name, response.status_code, "unexpected item payload")
        return payload

    def _item_url(self, key: str) -> str:
        return f"{self._items_url}/{quote(key, safe='')}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._headers, **kwargs.pop("headers", {})}
        try:
            return await self._client.request(
                method, url, headers=headers, timeout=self._settings.request_timeout, **kwargs
            )
        except httpx.HTTPError as exc:
            logger.warning("zotero.transport_error", method=method, url=url, error=str(exc))
            raise UpstreamError(self.name, None, str(exc)) from exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_error:
            logger.warning(
                "zotero.http_error",
                method=response.request.method,
                status=response.status_code,
            )
            raise UpstreamError(self.name, response.status_code, response.text)
