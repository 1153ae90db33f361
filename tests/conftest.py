from __future__ import annotations

import pytest

from dlabbib.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        zotero_api_key="secret",
        zotero_library_type="groups",
        zotero_library_id="4242",
        zotero_base_url="https://zotero.test",
        hal_search_url="https://hal.test/search/",
    )
