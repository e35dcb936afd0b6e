"""
Loan models for the Library Lending server.

A ``BorrowRecord`` is created by a successful borrow and moves exactly once,
``active -> returned``, on the matching return. Records are never deleted.

Date arithmetic is on calendar dates only: the due date is the borrow date
plus the loan period, and a return is late only when it happens strictly
after the due date.
"""

from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_LOAN_DAYS = 14
DEFAULT_DAILY_LATE_FEE = 5


class LoanStatus(str, Enum):
    """Status of a borrow record."""

    ACTIVE = "active"
    RETURNED = "returned"


def compute_due_date(borrow_date: date, loan_days: int = DEFAULT_LOAN_DAYS) -> date:
    """Due date for a loan starting on ``borrow_date``."""
    return borrow_date + timedelta(days=loan_days)


def assess_late_return(
    due_date: date, return_date: date, daily_fee: int = DEFAULT_DAILY_LATE_FEE
) -> tuple[bool, int, int]:
    """
    Work out lateness for a return.

    Args:
        due_date: Date the book was due
        return_date: Date the book came back
        daily_fee: Fine per whole day late

    Returns:
        ``(is_late, days_late, fine)``; a return on the due date is on time
    """
    is_late = return_date > due_date
    days_late = (return_date - due_date).days if is_late else 0
    return is_late, days_late, days_late * daily_fee


class BorrowRecord(BaseModel):
    """One entry in the loan ledger."""

    id: int = Field(..., description="Ledger id", ge=1)
    member_id: int = Field(..., description="Borrowing member")
    book_id: int = Field(..., description="Borrowed book")
    borrow_date: date = Field(..., description="Date of the borrow")
    due_date: date = Field(..., description="Date the book is due back")
    return_date: date | None = Field(None, description="Date of return, absent while active")
    status: LoanStatus = Field(default=LoanStatus.ACTIVE, description="Loan status")

    @model_validator(mode="after")
    def validate_dates(self) -> "BorrowRecord":
        """Validate date relationships."""
        if self.due_date <= self.borrow_date:
            raise ValueError("Due date must be after borrow date")
        if self.return_date and self.return_date < self.borrow_date:
            raise ValueError("Return date cannot be before borrow date")
        if (self.status == LoanStatus.RETURNED) != (self.return_date is not None):
            raise ValueError("Return date is set exactly when the record is returned")
        return self

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE

    @property
    def loan_period_days(self) -> int:
        """Length of the loan period in days."""
        return (self.due_date - self.borrow_date).days

    model_config = ConfigDict(
        from_attributes=True,
        # Use string values for enums in JSON serialization
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "member_id": 1,
                "book_id": 1,
                "borrow_date": "2024-10-01",
                "due_date": "2024-10-15",
                "return_date": None,
                "status": "active",
            }
        },
    )


class LoanView(BorrowRecord):
    """A ledger entry with the member name and book title for display.

    Names are looked up when the view is built; "Unknown" stands in for a
    member or book that has since been removed.
    """

    member_name: str = Field(..., description="Member name at listing time")
    book_title: str = Field(..., description="Book title at listing time")


class BookSummary(BaseModel):
    title: str
    author: str


class MemberSummary(BaseModel):
    name: str
    email: str


class BorrowResult(BaseModel):
    """Outcome of a successful borrow."""

    record: BorrowRecord
    book: BookSummary
    member: MemberSummary
    due_date: date


class ReturnResult(BaseModel):
    """Outcome of a successful return, including any late fee."""

    record: BorrowRecord
    book: BookSummary
    member: MemberSummary
    is_late: bool
    days_late: int = Field(..., ge=0)
    fine: int = Field(..., ge=0)
