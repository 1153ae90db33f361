"""Exception hierarchy shared by the import pipeline and the flag updater."""

from __future__ import annotations


class DlabError(Exception):
    """Base class for every error raised by dlabbib."""


class InvalidInput(DlabError, ValueError):
    """Raised when a caller request is malformed. No work is attempted."""


class ConfigurationError(DlabError):
    """Raised when service credentials or library identifiers are missing."""


class UpstreamError(DlabError):
    """A remote service failed at the transport or HTTP level."""

    def __init__(self, service: str, status: int | None, body: str) -> None:
        self.service = service
        self.status = status
        self.body = body
        label = f"HTTP {status}" if status is not None else "transport error"
        super().__init__(f"{service} {label}: {body}" if body else f"{service} {label}")


class NotFound(DlabError):
    """The requested Zotero item does not exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Zotero item {key!r} not found")


class MissingVersion(DlabError):
    """Zotero answered without the version stamp needed for a conditional write."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Zotero item {key!r} has no version")


class VersionConflict(DlabError):
    """The item changed since it was read; the caller must re-fetch and decide again."""

    def __init__(self, key: str, version: int) -> None:
        self.key = key
        self.version = version
        super().__init__(f"Zotero item {key!r} was modified after version {version}")


class ValidationRejected(DlabError):
    """A manually supplied record fails the completeness gate."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Record is missing required fields: {', '.join(missing)}")
