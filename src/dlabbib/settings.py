"""Configuration helpers for dlabbib."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

from dlabbib.errors import ConfigurationError

LIBRARY_TYPES = ("users", "groups")


class Settings(BaseModel):
    """Runtime configuration loaded from env vars with sensible defaults."""

    zotero_api_key: str | None = None
    zotero_library_type: str | None = None
    zotero_library_id: str | None = None
    zotero_base_url: str = "https://api.zotero.org"
    hal_search_url: str = "https://api.archives-ouvertes.fr/search/"
    log_level: str = "INFO"
    fetch_concurrency: int = 4
    batch_size: int = 25
    request_timeout: float = 30.0

    def zotero_library_path(self) -> str:
        """Return the `/users/<id>` or `/groups/<id>` prefix of the configured library."""
        if not (self.zotero_api_key and self.zotero_library_type and self.zotero_library_id):
            raise ConfigurationError(
                "Missing Zotero configuration "
                "(ZOTERO_API_KEY / ZOTERO_LIBRARY_TYPE / ZOTERO_LIBRARY_ID)."
            )
        if self.zotero_library_type not in LIBRARY_TYPES:
            raise ConfigurationError(
                f"ZOTERO_LIBRARY_TYPE must be one of {', '.join(LIBRARY_TYPES)}, "
                f"got {self.zotero_library_type!r}."
            )
        return f"/{self.zotero_library_type}/{self.zotero_library_id}"

    def public_dump(self) -> dict:
        payload = self.model_dump()
        if payload["zotero_api_key"]:
            payload["zotero_api_key"] = "***"
        return payload

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        return cls(
            zotero_api_key=os.environ.get("ZOTERO_API_KEY") or None,
            zotero_library_type=os.environ.get("ZOTERO_LIBRARY_TYPE") or None,
            zotero_library_id=os.environ.get("ZOTERO_LIBRARY_ID") or None,
            zotero_base_url=os.environ.get("DLABBIB_ZOTERO_URL", "https://api.zotero.org"),
            hal_search_url=os.environ.get(
                "DLABBIB_HAL_URL", "https://api.archives-ouvertes.fr/search/"
            ),
            log_level=os.environ.get("DLABBIB_LOG_LEVEL", "INFO"),
            fetch_concurrency=int(os.environ.get("DLABBIB_FETCH_CONCURRENCY", "4")),
            batch_size=int(os.environ.get("DLABBIB_BATCH_SIZE", "25")),
            request_timeout=float(os.environ.get("DLABBIB_TIMEOUT", "30")),
        )


def get_settings() -> Settings:
    """Convenience accessor for lazy modules."""
    return Settings.load()
