"""
Request handling layer for the Books API.

Translates parsed HTTP input into store operations, applies payload validation
and pagination, and raises typed errors for the API boundary to map.
"""

from typing import Optional, Union

import structlog

from books_api.errors import BookNotFoundError, PayloadValidationError
from books_api.models import Book, BookListResponse, BookPatch, BookPayload
from books_api.store import BookStore, generate_book_id

logger = structlog.get_logger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50


def validate_book_payload(payload: Union[BookPayload, Book]) -> None:
    """
    Ensure a create or replace payload carries the required fields.

    Raises:
        PayloadValidationError: if title or author is missing or empty
    """
    if not payload.title:
        raise PayloadValidationError("title is required")
    if not payload.author:
        raise PayloadValidationError("author is required")


def parse_positive_int(value: Optional[Union[str, int]], default: int) -> int:
    """Parse a query value, falling back to ``default`` when absent, invalid or below 1."""
    if value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


class BookService:
    """Book operations over an injected store."""

    def __init__(self, store: BookStore, default_limit: int = DEFAULT_LIMIT):
        self.store = store
        self.default_limit = default_limit

    def list_books(
        self,
        page: Optional[Union[str, int]] = None,
        limit: Optional[Union[str, int]] = None
    ) -> BookListResponse:
        """
        Get one page of books.

        Invalid ``page`` or ``limit`` values are clamped rather than rejected:
        a page below 1 becomes 1 and a limit below 1 becomes the default.

        Args:
            page: Page number (starts from 1)
            limit: Books per page

        Returns:
            BookListResponse with the requested slice and the total count
        """
        page_number = parse_positive_int(page, DEFAULT_PAGE)
        per_page = parse_positive_int(limit, self.default_limit)

        books = self.store.list()
        total = len(books)

        start = min((page_number - 1) * per_page, total)
        end = min(start + per_page, total)

        return BookListResponse(
            data=books[start:end],
            page=page_number,
            limit=per_page,
            total=total
        )

    def get_book(self, book_id: str) -> Book:
        book = self.store.get(book_id)
        if book is None:
            raise BookNotFoundError()
        return book

    def create_book(self, payload: BookPayload) -> Book:
        """Validate the payload and store it under a freshly generated id."""
        validate_book_payload(payload)

        book = Book(
            id=generate_book_id(),
            title=payload.title,
            author=payload.author,
            year=payload.year
        )
        self.store.put(book.id, book)

        logger.info("Book created", book_id=book.id)
        return book

    def update_book(self, book_id: str, patch: BookPatch) -> Book:
        """Overwrite only the non-empty fields of an existing book."""
        book = self.store.merge(
            book_id,
            title=patch.title,
            author=patch.author,
            year=patch.year
        )
        if book is None:
            raise BookNotFoundError()

        logger.info("Book updated", book_id=book_id)
        return book

    def replace_book(self, book_id: str, payload: BookPayload) -> Book:
        """Validate the payload and replace every field of an existing book except its id."""
        validate_book_payload(payload)

        book = self.store.replace(
            book_id,
            Book(id=book_id, title=payload.title, author=payload.author, year=payload.year)
        )
        if book is None:
            raise BookNotFoundError()

        logger.info("Book replaced", book_id=book_id)
        return book

    def delete_book(self, book_id: str) -> None:
        if not self.store.delete(book_id):
            raise BookNotFoundError()

        logger.info("Book deleted", book_id=book_id)
