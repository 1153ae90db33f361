"""DLAB bibliography tooling: HAL imports and workflow flags on top of Zotero."""

__version__ = "0.1.0"
