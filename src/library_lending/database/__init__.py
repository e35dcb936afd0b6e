"""
Database package for the Library Lending server.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Session management and connection handling (session.py)
- Monotonic id generators (ids.py)
- The three lending stores: catalog, membership and the loan ledger
- Sample data for a fresh library (seed.py)

Stores never commit. The lending engine owns the transaction around each
operation, so the three stores change together or not at all.
"""

from .catalog_repository import CatalogRepository
from .ids import IdGenerator
from .loan_ledger import LoanLedger
from .member_repository import MembershipRepository
from .repository import BaseRepository, coerce_payload
from .schema import Base, Book, BorrowRecord, Member
from .seed import seed_sample_data
from .session import DatabaseManager, safe_query

__all__ = [
    "Base",
    "BaseRepository",
    "Book",
    "BorrowRecord",
    "CatalogRepository",
    "DatabaseManager",
    "IdGenerator",
    "LoanLedger",
    "Member",
    "MembershipRepository",
    "coerce_payload",
    "safe_query",
    "seed_sample_data",
]
