"""
SQLAlchemy schema for the Library Lending server.

Three tables back the three stores owned by the lending engine:
- books: the catalog and its copy-availability counters
- members: registered members and their borrowed-book sets
- borrow_records: the loan ledger

Borrow records carry plain integer references rather than foreign keys.
A book or member can be removed once it has no active loans, and the
returned records that point at it must stay in the ledger.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    Enum,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

from ..models.loan import LoanStatus

# Base class for all SQLAlchemy models
Base = declarative_base()


class Book(Base):
    """
    Books table - the catalog store.

    ``available_copies`` is only ever written by the lending engine. The
    check constraints also hold ``0 <= available <= copies`` at the table level.
    """

    __tablename__ = "books"

    # Ids are assigned by the catalog's IdGenerator, never by the database
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(500), nullable=False)
    author = Column(String(200), nullable=False)
    isbn = Column(String(32), nullable=False, unique=True)
    category = Column(String(100), nullable=False)
    publish_year = Column(Integer, nullable=False)
    copies = Column(Integer, nullable=False)
    available_copies = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_book_title", "title"),
        CheckConstraint("available_copies >= 0", name="check_available_copies_non_negative"),
        CheckConstraint("available_copies <= copies", name="check_available_not_exceed_total"),
        CheckConstraint("copies >= 1", name="check_copies_positive"),
    )


class Member(Base):
    """
    Members table - the membership store.

    ``email`` is stored lower-cased so the unique constraint is effectively
    case-insensitive. ``borrowed_books`` holds a JSON array of book ids and
    is replaced as a whole on every borrow or return.
    """

    __tablename__ = "members"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(10), nullable=False)
    membership_date = Column(Date, nullable=False)
    # Using Text + JSON serialization for SQLite compatibility
    borrowed_books = Column(Text, nullable=False, default="[]")

    __table_args__ = (Index("idx_member_name", "name"),)


class BorrowRecord(Base):
    """Borrow records table - the loan ledger."""

    __tablename__ = "borrow_records"

    id = Column(Integer, primary_key=True, autoincrement=False)
    member_id = Column(Integer, nullable=False)
    book_id = Column(Integer, nullable=False)
    borrow_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)
    status = Column(Enum(LoanStatus), nullable=False, default=LoanStatus.ACTIVE)

    __table_args__ = (
        Index("idx_borrow_pair_status", "member_id", "book_id", "status"),
        Index("idx_borrow_book_status", "book_id", "status"),
        CheckConstraint("due_date > borrow_date", name="check_due_after_borrow"),
    )
