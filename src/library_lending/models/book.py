"""
Book models for the Library Lending server.

``Book`` is the read model returned by the catalog store. ``BookCreate`` and
``BookUpdate`` are the write payloads; they trim strings and check field
rules so that a bad payload is reported with every violated rule at once.
Availability is absent from both write payloads: only the
lending engine moves ``available_copies``.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from .validation import field_label

MIN_PUBLISH_YEAR = 1000


def _check_publish_year(v: int, info: ValidationInfo) -> int:
    """
    Publish years run from 1000 to the current year.

    The current year comes from the ``today`` entry of the validation context,
    which the catalog fills from its clock; the wall clock is the fallback.
    """
    today = (info.context or {}).get("today") or date.today()
    if v < MIN_PUBLISH_YEAR or v > today.year:
        raise ValueError("Invalid publish year")
    return v


def _check_copies(v: int) -> int:
    if v < 1:
        raise ValueError("Copies must be at least 1")
    return v


class Book(BaseModel):
    """A catalog entry together with its copy-availability counter."""

    id: int = Field(..., description="Catalog id", ge=1)
    title: str = Field(..., description="Title of the book")
    author: str = Field(..., description="Author name")
    isbn: str = Field(..., description="ISBN, unique across the catalog")
    category: str = Field(..., description="Genre or category")
    publish_year: int = Field(..., description="Year of publication")
    copies: int = Field(..., description="Total copies owned", ge=1)
    available_copies: int = Field(..., description="Copies not currently on loan", ge=0)

    @model_validator(mode="after")
    def validate_copies(self) -> "Book":
        """Ensure available copies doesn't exceed total copies."""
        if self.available_copies > self.copies:
            raise ValueError("Available copies cannot exceed total copies")
        return self

    @property
    def is_available(self) -> bool:
        """Check if the book has any available copies."""
        return self.available_copies > 0

    @property
    def on_loan(self) -> int:
        """Number of copies currently borrowed."""
        return self.copies - self.available_copies

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "The Great Gatsby",
                "author": "F. Scott Fitzgerald",
                "isbn": "978-0-7432-7356-5",
                "category": "Fiction",
                "publish_year": 1925,
                "copies": 5,
                "available_copies": 4,
            }
        },
    )


class BookCreate(BaseModel):
    """Payload for adding a book to the catalog."""

    title: str
    author: str
    isbn: str
    category: str
    publish_year: int
    copies: int

    @field_validator("title", "author", "isbn", "category")
    @classmethod
    def require_text(cls, v: str, info) -> str:
        if not v:
            raise ValueError(f"{field_label(info.field_name)} is required")
        return v

    @field_validator("publish_year")
    @classmethod
    def validate_publish_year(cls, v: int, info: ValidationInfo) -> int:
        return _check_publish_year(v, info)

    @field_validator("copies")
    @classmethod
    def validate_copies(cls, v: int) -> int:
        return _check_copies(v)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class BookUpdate(BaseModel):
    """Partial update for a book; unset fields are left alone."""

    title: str | None = None
    author: str | None = None
    isbn: str | None = None
    category: str | None = None
    publish_year: int | None = None
    copies: int | None = None

    @field_validator("title", "author", "isbn", "category")
    @classmethod
    def reject_blank(cls, v: str | None, info) -> str | None:
        if v is not None and not v:
            raise ValueError(f"{field_label(info.field_name)} cannot be empty")
        return v

    @field_validator("publish_year")
    @classmethod
    def validate_publish_year(cls, v: int | None, info: ValidationInfo) -> int | None:
        return v if v is None else _check_publish_year(v, info)

    @field_validator("copies")
    @classmethod
    def validate_copies(cls, v: int | None) -> int | None:
        return v if v is None else _check_copies(v)

    def changes(self) -> dict:
        """Only the fields the caller actually supplied."""
        return self.model_dump(exclude_unset=True, exclude_none=True)

    # extra="forbid" is what rejects an attempt to write available_copies
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")
