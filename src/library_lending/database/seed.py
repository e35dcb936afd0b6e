"""
Sample data for a freshly started library.

Three books, two members and one active loan. The counters agree with the
ledger: Gatsby has one copy out to John Doe, every other copy is on the shelf.
"""

import json
import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.loan import LoanStatus
from .schema import Book, BorrowRecord, Member

logger = logging.getLogger(__name__)

SAMPLE_BOOKS = [
    {
        "id": 1,
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "isbn": "978-0-7432-7356-5",
        "category": "Fiction",
        "publish_year": 1925,
        "copies": 5,
        "available_copies": 4,
    },
    {
        "id": 2,
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "isbn": "978-0-06-112008-4",
        "category": "Fiction",
        "publish_year": 1960,
        "copies": 4,
        "available_copies": 4,
    },
    {
        "id": 3,
        "title": "1984",
        "author": "George Orwell",
        "isbn": "978-0-452-28423-4",
        "category": "Science Fiction",
        "publish_year": 1949,
        "copies": 6,
        "available_copies": 6,
    },
]

SAMPLE_MEMBERS = [
    {
        "id": 1,
        "name": "John Doe",
        "email": "john.doe@email.com",
        "phone": "1234567890",
        "membership_date": date(2024, 1, 15),
        "borrowed_books": [1],
    },
    {
        "id": 2,
        "name": "Jane Smith",
        "email": "jane.smith@email.com",
        "phone": "9876543210",
        "membership_date": date(2024, 2, 20),
        "borrowed_books": [],
    },
]

SAMPLE_LOANS = [
    {
        "id": 1,
        "member_id": 1,
        "book_id": 1,
        "borrow_date": date(2024, 10, 1),
        "due_date": date(2024, 10, 15),
        "return_date": None,
        "status": LoanStatus.ACTIVE,
    },
]


def seed_sample_data(session: Session) -> bool:
    """
    Insert the sample library into an empty catalog.

    Returns:
        True if rows were inserted, False if the catalog already had books
    """
    if session.execute(select(func.count()).select_from(Book)).scalar():
        logger.info("Catalog already populated, skipping sample data")
        return False

    session.add_all(Book(**book) for book in SAMPLE_BOOKS)
    session.add_all(
        Member(**{**member, "borrowed_books": json.dumps(member["borrowed_books"])})
        for member in SAMPLE_MEMBERS
    )
    session.add_all(BorrowRecord(**loan) for loan in SAMPLE_LOANS)
    session.flush()

    logger.info(
        "Seeded %d books, %d members, %d loans",
        len(SAMPLE_BOOKS),
        len(SAMPLE_MEMBERS),
        len(SAMPLE_LOANS),
    )
    return True
