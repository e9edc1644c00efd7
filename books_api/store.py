"""
Thread-safe in-memory storage for book records.
"""

import uuid
from typing import Dict, List, Optional

import structlog

from books_api.models import Book
from utilities.locks import ReadWriteLock

logger = structlog.get_logger(__name__)


DEMO_BOOKS = [
    {"title": "Clean Architecture", "author": "Robert C. Martin", "year": 2017},
    {"title": "The Go Programming Language", "author": "Alan A. A. Donovan", "year": 2015},
]


def generate_book_id() -> str:
    """Generate a new opaque book identifier (random UUID4 text)."""
    return str(uuid.uuid4())


class BookStore:
    """
    In-memory mapping from book id to Book, guarded by a single reader/writer lock.

    Reads share the lock, writes hold it exclusively. Records are copied on the
    way in and on the way out, so callers never hold a reference to stored state.
    Iteration order is insertion order, which makes listings deterministic.
    """

    def __init__(self):
        self._books: Dict[str, Book] = {}
        self._lock = ReadWriteLock()

    def __len__(self) -> int:
        return self.count()

    def list(self) -> List[Book]:
        """Return a snapshot copy of every stored book in creation order."""
        with self._lock.read_locked():
            return [book.model_copy() for book in self._books.values()]

    def get(self, book_id: str) -> Optional[Book]:
        """Return a copy of the book stored under ``book_id``, or None."""
        with self._lock.read_locked():
            book = self._books.get(book_id)
            return book.model_copy() if book is not None else None

    def exists(self, book_id: str) -> bool:
        with self._lock.read_locked():
            return book_id in self._books

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._books)

    def put(self, book_id: str, book: Book) -> None:
        """
        Insert or overwrite the record at ``book_id``.

        Raises:
            ValueError: if ``book.id`` does not match the key
        """
        if book.id != book_id:
            raise ValueError(f"Book id '{book.id}' does not match store key '{book_id}'")
        with self._lock.write_locked():
            self._books[book_id] = book.model_copy()

    def delete(self, book_id: str) -> bool:
        """Remove the record if present; return whether a removal occurred."""
        with self._lock.write_locked():
            return self._books.pop(book_id, None) is not None

    def merge(
        self,
        book_id: str,
        title: Optional[str] = None,
        author: Optional[str] = None,
        year: Optional[int] = None
    ) -> Optional[Book]:
        """
        Overwrite the non-empty fields of an existing book in one critical section.

        Empty strings and a zero or missing year leave the stored value as is.

        Returns:
            The merged book, or None if no book is stored under ``book_id``
        """
        with self._lock.write_locked():
            existing = self._books.get(book_id)
            if existing is None:
                return None

            changes = {}
            if title:
                changes["title"] = title
            if author:
                changes["author"] = author
            if year:
                changes["year"] = year

            merged = existing.model_copy(update=changes)
            self._books[book_id] = merged
            return merged.model_copy()

    def replace(self, book_id: str, book: Book) -> Optional[Book]:
        """
        Overwrite an existing book in one critical section, keeping its id.

        Returns:
            The stored book, or None if no book is stored under ``book_id``
        """
        replacement = book.model_copy(update={"id": book_id})
        with self._lock.write_locked():
            if book_id not in self._books:
                return None
            self._books[book_id] = replacement
            return replacement.model_copy()


def seed_demo_books(store: BookStore) -> List[Book]:
    """Store the demonstration books and return them."""
    seeded = []
    for fields in DEMO_BOOKS:
        book = Book(id=generate_book_id(), **fields)
        store.put(book.id, book)
        seeded.append(book)

    logger.info("Seeded demo books", count=len(seeded))
    return seeded
