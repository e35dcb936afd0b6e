"""
Library Lending Models.

Pydantic models for the entities and results of the lending workflow:
- Book: catalog entries with copy availability
- Member: registered members and their borrowed sets
- BorrowRecord: loan ledger entries and the borrow/return results built on them
"""

from .book import Book, BookCreate, BookUpdate
from .loan import (
    BookSummary,
    BorrowRecord,
    BorrowResult,
    LoanStatus,
    LoanView,
    MemberSummary,
    ReturnResult,
    assess_late_return,
    compute_due_date,
)
from .member import Member, MemberCreate, MemberUpdate
from .validation import validation_messages

__all__ = [
    "Book",
    "BookCreate",
    "BookSummary",
    "BookUpdate",
    "BorrowRecord",
    "BorrowResult",
    "LoanStatus",
    "LoanView",
    "Member",
    "MemberCreate",
    "MemberSummary",
    "MemberUpdate",
    "ReturnResult",
    "assess_late_return",
    "compute_due_date",
    "validation_messages",
]
