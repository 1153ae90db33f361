"""Version-checked updates of the DLAB flag block on a Zotero item."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol

import structlog

from dlabbib.errors import InvalidInput, MissingVersion, NotFound, UpstreamError, VersionConflict
from dlabbib.flags import merge_flags, normalize_flag_value, parse_flags
from dlabbib.models import FlagUpdateOutcome, ItemState, UpdateStatus

logger = structlog.get_logger(__name__)


class UpdateState(str, Enum):
    FETCHING = "fetching"
    MERGING = "merging"
    WRITING = "writing"
    DONE = "done"
    CONFLICT = "conflict"
    FAILED = "failed"
    NOT_FOUND = "not_found"


class ItemStore(Protocol):
    async def get_item(self, key: str) -> ItemState:
        ...

    async def update_item(self, key: str, data: dict[str, Any], version: int) -> None:
        ...


class FlagUpdater:
    """Read item, merge flags, write back only if nobody changed it meanwhile.

    A version conflict is reported to the caller and never retried here: the
    other editor's change may invalidate the requested flags.
    """

    def __init__(self, store: ItemStore) -> None:
        self._store = store

    async def update(self, key: str, updates: Mapping[str, Any]) -> FlagUpdateOutcome:
        key = (key or "").strip()
        if not key:
            raise InvalidInput("Missing item key")
        requested = clean_updates(updates)

        self._log_state(key, UpdateState.FETCHING)
        try:
            item = await self._store.get_item(key)
        except NotFound as exc:
            self._log_state(key, UpdateState.NOT_FOUND)
            return FlagUpdateOutcome(key=key, status=UpdateStatus.NOT_FOUND, message=str(exc))
        except (MissingVersion, UpstreamError) as exc:
            self._log_state(key, UpdateState.FAILED, error=str(exc))
            return FlagUpdateOutcome(key=key, status=UpdateStatus.FAILED, message=str(exc))

        self._log_state(key, UpdateState.MERGING, version=item.version)
        extra = merge_flags(item.extra, requested)
        data = {**item.data, "extra": extra}

        self._log_state(key, UpdateState.WRITING, version=item.version)
        try:
            await self._store.update_item(key, data, item.version)
        except VersionConflict as exc:
            self._log_state(key, UpdateState.CONFLICT, version=item.version)
            return FlagUpdateOutcome(key=key, status=UpdateStatus.CONFLICT, message=str(exc))
        except NotFound as exc:
            self._log_state(key, UpdateState.NOT_FOUND)
            return FlagUpdateOutcome(key=key, status=UpdateStatus.NOT_FOUND, message=str(exc))
        except UpstreamError as exc:
            self._log_state(key, UpdateState.FAILED, error=str(exc))
            return FlagUpdateOutcome(key=key, status=UpdateStatus.FAILED, message=exc.body or str(exc))

        self._log_state(key, UpdateState.DONE)
        return FlagUpdateOutcome(key=key, status=UpdateStatus.DONE, flags=parse_flags(extra))

    def _log_state(self, key: str, state: UpdateState, **context: Any) -> None:
        logger.info("flags.state", key=key, state=state.value, **context)


def clean_updates(updates: Mapping[str, Any]) -> dict[str, str]:
    """Normalise requested flag values; keys must fit on one ``key: value`` line."""
    if not isinstance(updates, Mapping):
        raise InvalidInput("Flag updates must be a mapping")
    cleaned: dict[str, str] = {}
    for raw_key, raw_value in updates.items():
        key = str(raw_key).strip()
        if not key or key.startswith("#") or any(char in key for char in ":\r\n"):
            raise InvalidInput(f"Invalid flag name {raw_key!r}")
        cleaned[key] = normalize_flag_value(str(raw_value or ""))
    return cleaned
