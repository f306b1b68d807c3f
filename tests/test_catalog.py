from __future__ import annotations

from pathlib import Path

import pytest

from flipbook.configs import DEFAULT_CATALOG
from flipbook.core.catalog import Book, Catalog, DocumentReference

CATALOG_YAML = """
books:
  - id: first
    title: First Book
    author: A. Writer
    year: 1999
    source_location: pdfs/first.pdf
    tags: [essay, media]
  - id: second
    title: Second Book
    source_location: https://example.com/second.pdf
"""


def _write_catalog(tmp_path: Path, text: str = CATALOG_YAML) -> Path:
    path = tmp_path / "books.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_catalog_keeps_file_order_and_resolves_locations(tmp_path) -> None:
    catalog = Catalog.from_yaml(_write_catalog(tmp_path))
    assert [book.id for book in catalog] == ["first", "second"]
    first = catalog.get_book("first")
    assert first.source_location == str((tmp_path / "pdfs" / "first.pdf").resolve())
    assert first.byline == "A. Writer (1999)"
    assert first.tags == ("essay", "media")
    # URLs are left alone.
    assert catalog.get_book("second").source_location == "https://example.com/second.pdf"


def test_catalog_base_dir_overrides_file_directory(tmp_path) -> None:
    library = tmp_path / "library"
    catalog = Catalog.from_yaml(_write_catalog(tmp_path), base_dir=library)
    assert catalog.get_book("first").source_location == str(
        (library / "pdfs" / "first.pdf").resolve()
    )


def test_document_references(tmp_path) -> None:
    catalog = Catalog.from_yaml(_write_catalog(tmp_path))
    refs = catalog.list_documents()
    assert [ref.id for ref in refs] == ["first", "second"]
    assert catalog.get_document("second") == DocumentReference(
        "second", "Second Book", "https://example.com/second.pdf"
    )
    assert catalog.get_document("missing") is None
    assert catalog.get_book("missing") is None


def test_duplicate_ids_are_rejected() -> None:
    with pytest.raises(ValueError):
        Catalog([Book("a", "A"), Book("a", "Again")])


def test_entry_without_id_is_rejected(tmp_path) -> None:
    with pytest.raises(ValueError):
        Catalog.from_yaml(_write_catalog(tmp_path, "books:\n  - title: Nameless\n"))


def test_bundled_catalog_lists_two_books() -> None:
    catalog = Catalog.from_yaml(DEFAULT_CATALOG)
    assert len(catalog) == 2
    assert catalog.get_book("interference") is not None
    assert all(book.source_location.endswith(".pdf") for book in catalog)
