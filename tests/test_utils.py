import pytest

from dlabbib.errors import InvalidInput
from dlabbib.utils import chunked, extract_year, normalize_doi, normalize_identifiers, pick_first_non_empty


def test_normalize_identifiers_dedupes_and_trims() -> None:
    raw = ["A1", "A1", " A2", "", "  ", "A2 "]
    assert normalize_identifiers(raw) == ["A1", "A2"]


def test_normalize_identifiers_is_idempotent() -> None:
    once = normalize_identifiers([" hal-1", "hal-2", "hal-1 "])
    assert normalize_identifiers(once) == once


@pytest.mark.parametrize("raw", [None, "hal-1", {"ids": ["hal-1"]}, ["", "   "], []])
def test_normalize_identifiers_rejects_unusable_input(raw) -> None:
    with pytest.raises(InvalidInput):
        normalize_identifiers(raw)


def test_normalize_doi_strips_prefixes() -> None:
    assert normalize_doi("https://doi.org/10.1000/XYZ") == "10.1000/XYZ"
    assert normalize_doi("DOI: 10.1000/abc") == "10.1000/abc"
    assert normalize_doi(None) == ""


def test_pick_first_non_empty_skips_blank_aliases() -> None:
    doc = {"title_s": ["  "], "title_t": ["Une histoire", "du laboratoire"]}
    assert pick_first_non_empty(doc, ("title_s", "title_t")) == "Une histoire du laboratoire"
    assert pick_first_non_empty(doc, ("missing",)) == ""


def test_extract_year_and_chunked() -> None:
    assert extract_year("March 2019") == "2019"
    assert extract_year("n.d.") == ""
    assert [start for start, _ in chunked(list(range(60)), 25)] == [0, 25, 50]
