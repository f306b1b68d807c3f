from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

import yaml

from flipbook.utils.logger import logger


@dataclass(frozen=True)
class DocumentReference:
    """Identifies the document a viewer should decode."""
    id: str
    title: str
    source_location: str


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    author: str = ""
    description: str = ""
    source_location: str = ""
    year: Optional[int] = None
    tags: tuple = field(default_factory=tuple)

    def reference(self) -> DocumentReference:
        return DocumentReference(self.id, self.title, self.source_location)

    @property
    def byline(self) -> str:
        if self.author and self.year:
            return f"{self.author} ({self.year})"
        return self.author

    @classmethod
    def from_dict(cls, payload: dict, base_dir: Optional[Path] = None) -> "Book":
        book_id = str(payload.get("id") or "").strip()
        if not book_id:
            raise ValueError(f"Catalog entry without an id: {payload!r}")
        location = str(payload.get("source_location") or "").strip()
        year = payload.get("year")
        return cls(
            id=book_id,
            title=str(payload.get("title") or book_id),
            author=str(payload.get("author") or ""),
            description=str(payload.get("description") or "").strip(),
            source_location=_resolve_location(location, base_dir),
            year=int(year) if year is not None else None,
            tags=tuple(str(tag) for tag in payload.get("tags") or ()),
        )


def _resolve_location(location: str, base_dir: Optional[Path]) -> str:
    if not location or base_dir is None:
        return location
    scheme = urlparse(location).scheme
    if scheme and len(scheme) > 1:
        return location
    path = Path(location).expanduser()
    if path.is_absolute():
        return str(path)
    return str((base_dir / path).resolve())


class Catalog:
    """Static, insertion-ordered list of the books the library offers."""

    def __init__(self, books: Iterable[Book] = ()) -> None:
        self._books: Dict[str, Book] = {}
        for book in books:
            if book.id in self._books:
                raise ValueError(f"Duplicate book id in catalog: {book.id}")
            self._books[book.id] = book

    @classmethod
    def from_yaml(
        cls, catalog_file: str | Path, base_dir: Optional[str | Path] = None
    ) -> "Catalog":
        path = Path(catalog_file).expanduser()
        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh) or {}
        entries = payload.get("books") if isinstance(payload, dict) else payload
        root = Path(base_dir).expanduser() if base_dir else path.parent
        books = [Book.from_dict(entry, root) for entry in entries or []]
        logger.info("Loaded %d books from %s", len(books), path)
        return cls(books)

    def __len__(self) -> int:
        return len(self._books)

    def __iter__(self):
        return iter(self._books.values())

    def books(self) -> List[Book]:
        return list(self._books.values())

    def get_book(self, book_id: str) -> Optional[Book]:
        return self._books.get(book_id)

    def list_documents(self) -> List[DocumentReference]:
        return [book.reference() for book in self._books.values()]

    def get_document(self, book_id: str) -> Optional[DocumentReference]:
        book = self._books.get(book_id)
        return book.reference() if book is not None else None
