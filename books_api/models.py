"""
API models and schemas for the Books API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Book(BaseModel):
    """Book record held by the store."""
    id: str = Field(..., description="Unique book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    year: Optional[int] = Field(None, description="Publication year, omitted when unset")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "0b4f3c9e-6f0a-4c55-9a57-2f7f3c1d9e21",
                "title": "Clean Architecture",
                "author": "Robert C. Martin",
                "year": 2017,
            }
        }
    )

    @field_validator("year")
    @classmethod
    def unset_zero_year(cls, v):
        """A year of 0 cannot be told apart from "not provided"; keep it unset."""
        return v or None

    def to_json(self) -> Dict[str, Any]:
        """Serialize for the wire, dropping an unset year."""
        return self.model_dump(exclude_none=True)


class BookPayload(BaseModel):
    """Request body for creating or fully replacing a book."""
    title: Optional[str] = Field(None, description="Book title (required)")
    author: Optional[str] = Field(None, description="Book author (required)")
    year: Optional[int] = Field(None, description="Publication year")

    model_config = ConfigDict(
        strict=True,
        json_schema_extra={
            "example": {
                "title": "The Go Programming Language",
                "author": "Alan A. A. Donovan",
                "year": 2015,
            }
        }
    )

    @field_validator("year")
    @classmethod
    def unset_zero_year(cls, v):
        return v or None


class BookPatch(BaseModel):
    """Request body for a partial update; empty or zero fields are left untouched."""
    title: Optional[str] = Field(None, description="New title")
    author: Optional[str] = Field(None, description="New author")
    year: Optional[int] = Field(None, description="New publication year")

    model_config = ConfigDict(strict=True)

    @field_validator("year")
    @classmethod
    def unset_zero_year(cls, v):
        return v or None


class BookListResponse(BaseModel):
    """Response model for book list with pagination."""
    data: List[Book] = Field(..., description="Books on the requested page")
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Number of books per page")
    total: int = Field(..., description="Total number of books")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details (debug only)")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
