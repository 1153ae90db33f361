"""Service abstractions for dlabbib."""

from .catalog import HAL_FIELDS, CatalogFetcher, HalCatalogFetcher
from .listing import LibraryBrowser
from .mapper import HAL_TYPE_TABLE, map_document, parse_creators
from .pipeline import ImportPipeline
from .translator import translate
from .updater import FlagUpdater, UpdateState
from .validation import missing_fields, validate
from .writer import BatchWriter
from .zotero import CreateResponse, ItemPage, ZoteroClient

__all__ = [
    "HAL_FIELDS",
    "HAL_TYPE_TABLE",
    "CatalogFetcher",
    "HalCatalogFetcher",
    "map_document",
    "parse_creators",
    "validate",
    "missing_fields",
    "translate",
    "BatchWriter",
    "ZoteroClient",
    "CreateResponse",
    "ItemPage",
    "ImportPipeline",
    "FlagUpdater",
    "UpdateState",
    "LibraryBrowser",
]
