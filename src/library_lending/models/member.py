"""
Member models for the Library Lending server.

Members register with a name, an email address and a 10-digit phone
number. Emails are stored lower-cased, which is what makes the uniqueness
check case-insensitive. ``borrowed_books`` is the member's borrowed set: a
book id is in it exactly when the ledger holds an active loan for the pair.
"""

import json
import re
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")


def _check_email(v: str) -> str:
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v.lower()


def _check_phone(v: str) -> str:
    if not PHONE_PATTERN.match(v):
        raise ValueError("Phone must be 10 digits")
    return v


class Member(BaseModel):
    """A registered member and the ids of the books they currently hold."""

    id: int = Field(..., description="Member id", ge=1)
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Lower-cased email address")
    phone: str = Field(..., description="10-digit phone number")
    membership_date: date = Field(..., description="Date the member registered")
    borrowed_books: list[int] = Field(
        default_factory=list,
        description="Ids of books currently on loan to this member",
    )

    @field_validator("borrowed_books", mode="before")
    @classmethod
    def parse_borrowed_books(cls, v):
        """Accept the JSON text stored in the members table."""
        if isinstance(v, str):
            return json.loads(v) if v else []
        return v

    @property
    def has_loans(self) -> bool:
        return bool(self.borrowed_books)

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "John Doe",
                "email": "john.doe@email.com",
                "phone": "1234567890",
                "membership_date": "2024-01-15",
                "borrowed_books": [1],
            }
        },
    )


class MemberCreate(BaseModel):
    """Registration payload; every violated rule is reported together."""

    name: str
    email: str
    phone: str
    membership_date: date | None = None

    @field_validator("name")
    @classmethod
    def require_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not v:
            raise ValueError("Email is required")
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not v:
            raise ValueError("Phone is required")
        return _check_phone(v)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class MemberUpdate(BaseModel):
    """Partial member update; supplied email and phone are re-validated."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None

    @field_validator("name")
    @classmethod
    def reject_blank_name(cls, v: str | None) -> str | None:
        if v is not None and not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        # A blank email leaves the stored one unchanged
        if not v:
            return None
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return v if v is None else _check_phone(v)

    def changes(self) -> dict:
        """Only the fields the caller actually supplied."""
        return self.model_dump(exclude_unset=True, exclude_none=True)

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")
