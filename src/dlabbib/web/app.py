"""FastAPI surface for imports and flag updates."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from dlabbib.errors import (
    ConfigurationError,
    InvalidInput,
    MissingVersion,
    NotFound,
    UpstreamError,
    ValidationRejected,
)
from dlabbib.models import CanonicalRecord, ImportBatchResult, LibraryItem, UpdateStatus
from dlabbib.services import FlagUpdater, ImportPipeline, LibraryBrowser, ZoteroClient
from dlabbib.settings import Settings, get_settings

OUTCOME_STATUS = {
    UpdateStatus.DONE: status.HTTP_200_OK,
    UpdateStatus.CONFLICT: status.HTTP_409_CONFLICT,
    UpdateStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    UpdateStatus.FAILED: status.HTTP_502_BAD_GATEWAY,
}


class ImportRequest(BaseModel):
    # Left untyped so shape errors surface as InvalidInput from the pipeline.
    identifiers: Any = None


class FlagUpdateRequest(BaseModel):
    updates: dict[str, str] = Field(default_factory=dict)


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Factory used by uvicorn; ``transport`` replaces the network in tests."""
    settings = settings or get_settings()
    app = FastAPI(title="dlabbib")

    @asynccontextmanager
    async def client() -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(timeout=settings.request_timeout, transport=transport) as http:
            yield http

    @app.exception_handler(InvalidInput)
    async def invalid_input(request: Request, exc: InvalidInput) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(ConfigurationError)
    async def misconfigured(request: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.post("/import/hal", response_model=ImportBatchResult)
    async def import_hal(payload: ImportRequest) -> ImportBatchResult:
        async with client() as http:
            return await ImportPipeline.from_settings(http, settings).run(payload.identifiers)

    @app.post("/items", status_code=status.HTTP_201_CREATED)
    async def create_item(record: CanonicalRecord) -> dict[str, Any]:
        async with client() as http:
            try:
                summary = await ImportPipeline.from_settings(http, settings).create_record(record)
            except ValidationRejected as exc:
                raise HTTPException(
                    status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail={"error": "incomplete", "missing": exc.missing},
                ) from exc
        if summary.errors or not summary.imported:
            detail = summary.errors[0].message if summary.errors else "rejected by Zotero"
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=detail)
        return {"ok": True}

    @app.get("/items", response_model=list[LibraryItem])
    async def list_items(limit: int = 200) -> list[LibraryItem]:
        async with client() as http:
            try:
                return await LibraryBrowser(ZoteroClient(http, settings)).list_items(limit=limit)
            except UpstreamError as exc:
                raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=exc.body) from exc

    @app.get("/items/{key}/flags")
    async def item_flags(key: str) -> dict[str, str]:
        async with client() as http:
            try:
                return await LibraryBrowser(ZoteroClient(http, settings)).flags_for(key)
            except NotFound as exc:
                raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
            except (MissingVersion, UpstreamError) as exc:
                raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    @app.post("/items/{key}/flags")
    async def update_flags(key: str, payload: FlagUpdateRequest) -> JSONResponse:
        async with client() as http:
            outcome = await FlagUpdater(ZoteroClient(http, settings)).update(key, payload.updates)
        return JSONResponse(outcome.to_payload(), status_code=OUTCOME_STATUS[outcome.status])

    return app
