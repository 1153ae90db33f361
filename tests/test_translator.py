from dlabbib.models import CanonicalRecord, Creator, RecordType
from dlabbib.services.mapper import map_document
from dlabbib.services.translator import translate
from helpers import hal_article


def test_article_translation_matches_zotero_schema() -> None:
    item = translate(map_document(hal_article()))
    assert item["itemType"] == "journalArticle"
    assert item["publicationTitle"] == "Journal of Lab Studies"
    assert item["DOI"] == "10.1000/jls.2021.3"
    assert item["creators"][0] == {"creatorType": "author", "firstName": "Marie", "lastName": "Curie"}
    assert item["tags"] == [{"tag": "HALID:hal-0001"}]
    assert "publisher" not in item and "bookTitle" not in item


def test_book_section_translation() -> None:
    record = CanonicalRecord(
        record_type=RecordType.BOOK_SECTION,
        title="Chapter",
        authors=[Creator(last_name="Perrin")],
        date="2019",
        book_title="Collected essays",
        publisher="PUL",
        place="Lyon",
        pages="10-20",
        isbn="978-2-00-000000-0",
    )
    item = translate(record)
    assert item["itemType"] == "bookSection"
    assert (item["bookTitle"], item["pages"], item["ISBN"]) == ("Collected essays", "10-20", "978-2-00-000000-0")
    assert item["tags"] == []
    assert "publicationTitle" not in item


def test_book_pages_become_page_count() -> None:
    record = CanonicalRecord(record_type=RecordType.BOOK, title="Book", pages="320")
    item = translate(record)
    assert item["numPages"] == "320"
    assert "pages" not in item and "bookTitle" not in item
