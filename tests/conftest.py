"""
Pytest configuration and shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from books_api.config import APIConfig
from books_api.main import create_app
from books_api.models import Book, BookPayload
from books_api.service import BookService
from books_api.store import BookStore


@pytest.fixture
def api_settings():
    """Settings for an isolated app without demo data."""
    return APIConfig(seed_demo_data=False, debug=False)


@pytest.fixture
def store():
    """Create an empty book store."""
    return BookStore()


@pytest.fixture
def service(store):
    """Create a book service over the empty store."""
    return BookService(store)


@pytest.fixture
def sample_book():
    """Create a sample stored book."""
    return Book(id="book-1", title="A", author="B", year=5)


@pytest.fixture
def sample_payload():
    """Create a sample create/replace payload."""
    return BookPayload(title="T", author="A", year=2020)


@pytest.fixture
def app(store, api_settings):
    """Create an application bound to the test store."""
    return create_app(store=store, settings=api_settings)


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client
