"""
FastAPI CRUD service for the Books API.

This package provides:
- A thread-safe in-memory book store
- Request handlers with payload validation and pagination
- Structured error responses and OpenAPI documentation
"""

__version__ = "1.0.0"
