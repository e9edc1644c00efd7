"""
Tests for the book request handlers.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from books_api.errors import BookNotFoundError, PayloadValidationError
from books_api.models import Book, BookPatch, BookPayload
from books_api.service import BookService, parse_positive_int, validate_book_payload


class TestValidation:
    """Test cases for payload validation."""

    def test_valid_payload(self, sample_payload):
        validate_book_payload(sample_payload)

    @pytest.mark.parametrize("title", [None, ""])
    def test_title_required(self, title):
        with pytest.raises(PayloadValidationError) as exc_info:
            validate_book_payload(BookPayload(title=title, author="A"))

        assert exc_info.value.message == "title is required"
        assert exc_info.value.status_code == 400

    def test_author_required(self):
        with pytest.raises(PayloadValidationError) as exc_info:
            validate_book_payload(BookPayload(title="T", author=""))

        assert str(exc_info.value) == "author is required"

    def test_title_checked_before_author(self):
        with pytest.raises(PayloadValidationError, match="title is required"):
            validate_book_payload(BookPayload())


class TestParsePositiveInt:
    """Test cases for query value clamping."""

    @pytest.mark.parametrize("value,expected", [
        (None, 7),
        ("3", 3),
        (4, 4),
        ("0", 7),
        ("-2", 7),
        ("abc", 7),
        ("", 7),
    ])
    def test_parse(self, value, expected):
        assert parse_positive_int(value, 7) == expected


class TestBookService:
    """Test cases for BookService."""

    def test_create_assigns_id(self, service, store, sample_payload):
        """Test create/get round trip."""
        book = service.create_book(sample_payload)

        assert book.id
        assert service.get_book(book.id) == Book(id=book.id, title="T", author="A", year=2020)
        assert store.count() == 1

    def test_create_rejects_invalid_payload(self, service, store):
        with pytest.raises(PayloadValidationError, match="title is required"):
            service.create_book(BookPayload(title="", author="A"))

        assert store.count() == 0

    def test_created_ids_are_distinct(self, service, sample_payload):
        """Test id uniqueness across concurrent creates."""
        with ThreadPoolExecutor(max_workers=8) as executor:
            books = list(executor.map(lambda _: service.create_book(sample_payload), range(100)))

        assert len({book.id for book in books}) == 100
        assert service.list_books(limit=1000).total == 100

    def test_get_unknown_book(self, service):
        with pytest.raises(BookNotFoundError) as exc_info:
            service.get_book("missing")

        assert exc_info.value.message == "book not found"
        assert exc_info.value.status_code == 404

    def test_partial_update_preserves_untouched_fields(self, service, store, sample_book):
        store.put(sample_book.id, sample_book)

        updated = service.update_book("book-1", BookPatch(title="X"))

        assert updated == Book(id="book-1", title="X", author="B", year=5)
        assert service.get_book("book-1") == updated

    def test_partial_update_ignores_zero_year(self, service, store, sample_book):
        store.put(sample_book.id, sample_book)

        updated = service.update_book("book-1", BookPatch(year=0, author=""))

        assert updated == sample_book

    def test_partial_update_unknown_book(self, service):
        with pytest.raises(BookNotFoundError):
            service.update_book("missing", BookPatch(title="X"))

    def test_replace_is_idempotent(self, service, store, sample_book):
        store.put(sample_book.id, sample_book)
        payload = BookPayload(title="N", author="M")

        first = service.replace_book("book-1", payload)
        state_after_first = store.list()
        second = service.replace_book("book-1", payload)

        assert first == second == Book(id="book-1", title="N", author="M")
        assert store.list() == state_after_first

    def test_replace_validates_before_lookup(self, service):
        """Test that an invalid payload is rejected even for unknown ids."""
        with pytest.raises(PayloadValidationError, match="author is required"):
            service.replace_book("missing", BookPayload(title="N"))

    def test_replace_unknown_book(self, service, store):
        with pytest.raises(BookNotFoundError):
            service.replace_book("missing", BookPayload(title="N", author="M"))

        assert store.count() == 0

    def test_delete_then_get(self, service, store, sample_book):
        store.put(sample_book.id, sample_book)

        service.delete_book("book-1")

        with pytest.raises(BookNotFoundError):
            service.get_book("book-1")
        with pytest.raises(BookNotFoundError):
            service.delete_book("book-1")


class TestPagination:
    """Test cases for list pagination."""

    @pytest.fixture
    def titles(self, service):
        titles = [f"Book {index}" for index in range(7)]
        for title in titles:
            service.create_book(BookPayload(title=title, author="A"))
        return titles

    def test_defaults(self, service, titles):
        result = service.list_books()

        assert result.page == 1
        assert result.limit == 50
        assert result.total == 7
        assert [book.title for book in result.data] == titles

    def test_second_page(self, service, titles):
        result = service.list_books(page="2", limit="3")

        assert [book.title for book in result.data] == titles[3:6]
        assert result.total == 7

    def test_last_partial_page(self, service, titles):
        result = service.list_books(page=3, limit=3)
        assert [book.title for book in result.data] == titles[6:]

    def test_page_past_end_is_empty(self, service, titles):
        result = service.list_books(page=10, limit=3)

        assert result.data == []
        assert result.page == 10
        assert result.total == 7

    def test_invalid_values_are_clamped(self, service, titles):
        result = service.list_books(page="-1", limit="0")

        assert result.page == 1
        assert result.limit == 50
        assert len(result.data) == 7

    def test_configured_default_limit(self, store, titles):
        result = BookService(store, default_limit=2).list_books(limit="nope")

        assert result.limit == 2
        assert [book.title for book in result.data] == titles[:2]

    @pytest.mark.parametrize("page,limit", [(1, 1), (2, 2), (3, 2), (2, 5), (4, 3)])
    def test_pages_are_contiguous_slices(self, service, titles, page, limit):
        result = service.list_books(page=page, limit=limit)
        start = (page - 1) * limit

        assert len(result.data) <= limit
        assert [book.title for book in result.data] == titles[start:start + limit]
