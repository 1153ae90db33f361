"""Shared builders for HAL documents used across tests."""

from __future__ import annotations

import json

import httpx


def hal_article(hal_id: str = "hal-0001", **overrides) -> dict:
    doc = {
        "halId_s": hal_id,
        "docid": "1234",
        "docType_s": "ART",
        "title_s": ["Measuring lab throughput"],
        "year_i": 2021,
        "authLastName_s": ["Curie", "Perrin"],
        "authFirstName_s": ["Marie", "Jean"],
        "journalTitle_s": "Journal of Lab Studies",
        "volume_s": "12",
        "issue_s": "3",
        "page_s": "45-67",
        "doiId_s": "https://doi.org/10.1000/jls.2021.3",
    }
    doc.update(overrides)
    return doc


class FakeRemote:
    """In-memory stand-in for the HAL search API and one Zotero library."""

    def __init__(self, hal_docs: dict[str, dict] | None = None) -> None:
        self.hal_docs = dict(hal_docs or {})
        self.hal_errors: dict[str, int] = {}
        self.items: dict[str, dict] = {}
        self.create_calls: list[list[dict]] = []
        self.failing_creates: set[int] = set()
        self.put_calls = 0
        self.put_status: int | None = None

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def add_item(self, key: str, version: int | None = 5, **fields) -> None:
        data = {"key": key, "itemType": "book", "title": "Stored", **fields}
        if version is not None:
            data["version"] = version
        self.items[key] = data

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "hal.test":
            return self._hal(request)
        return self._zotero(request)

    def _hal(self, request: httpx.Request) -> httpx.Response:
        identifier = request.url.params["q"].split(":", 1)[1].strip('"')
        if identifier in self.hal_errors:
            return httpx.Response(self.hal_errors[identifier], text="Solr is down")
        doc = self.hal_docs.get(identifier)
        docs = [doc] if doc else []
        return httpx.Response(200, json={"response": {"numFound": len(docs), "docs": docs}})

    def _zotero(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.strip("/").split("/")
        if len(parts) == 3 and request.method == "POST":
            return self._create(json.loads(request.content))
        if len(parts) == 3 and request.method == "GET":
            return self._list(request)
        key = parts[3]
        if key not in self.items:
            return httpx.Response(404, text="Item not found")
        if request.method == "GET":
            data = self.items[key]
            return httpx.Response(200, json={"key": key, "version": data.get("version"), "data": data})
        if request.method == "PUT":
            return self._put(key, request)
        return httpx.Response(405)

    def _create(self, batch: list[dict]) -> httpx.Response:
        call = len(self.create_calls)
        self.create_calls.append(batch)
        if call in self.failing_creates:
            return httpx.Response(500, text="An error occurred")
        successful: dict[str, dict] = {}
        failed: dict[str, dict] = {}
        for index, item in enumerate(batch):
            if item.get("title") == "REJECT":
                failed[str(index)] = {"code": 400, "message": "Invalid item"}
                continue
            key = f"ITEM{len(self.items):04d}"
            self.items[key] = {**item, "key": key, "version": 1}
            successful[str(index)] = {"key": key}
        success = {index: entry["key"] for index, entry in successful.items()}
        return httpx.Response(
            200, json={"successful": successful, "success": success, "unchanged": {}, "failed": failed}
        )

    def _list(self, request: httpx.Request) -> httpx.Response:
        start = int(request.url.params.get("start", 0))
        limit = int(request.url.params.get("limit", 100))
        data = list(self.items.values())
        page = data[start : start + limit]
        headers = {}
        if start + limit < len(data):
            headers["Link"] = f'<{request.url.copy_set_param("start", start + limit)}>; rel="next"'
        body = [{"key": item["key"], "version": item.get("version"), "data": item} for item in page]
        return httpx.Response(200, json=body, headers=headers)

    def _put(self, key: str, request: httpx.Request) -> httpx.Response:
        self.put_calls += 1
        if self.put_status is not None:
            return httpx.Response(self.put_status, text="Zotero refused the write")
        current = self.items[key]
        expected = int(request.headers["If-Unmodified-Since-Version"])
        if expected != current.get("version"):
            return httpx.Response(412, text="Item has been modified since specified version")
        data = json.loads(request.content)
        data["version"] = expected + 1
        self.items[key] = data
        return httpx.Response(204)
