"""
Lending engine for the Library Lending server.

The engine is the only component that moves a book's availability counter,
a member's borrowed set and a borrow record's status. Each operation:

1. Takes the engine lock and opens one database transaction
2. Runs every precondition check before the first write
3. Writes the ledger, the catalog and the membership store together
4. Verifies the touched book is still within ``0..copies``, then commits

Any exception rolls the transaction back, so a failed borrow or return leaves
all three stores exactly as they were.
"""

import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import date
from typing import Any

from .config import LendingConfig, get_config
from .database.catalog_repository import CatalogRepository
from .database.ids import IdGenerator
from .database.loan_ledger import LoanLedger
from .database.member_repository import MembershipRepository
from .database.seed import seed_sample_data
from .database.session import DatabaseManager
from .errors import ConflictError, InvariantViolation, NotFoundError, UnavailableError
from .models.book import Book, BookCreate, BookUpdate
from .models.loan import (
    DEFAULT_DAILY_LATE_FEE,
    DEFAULT_LOAN_DAYS,
    BookSummary,
    BorrowResult,
    LoanView,
    MemberSummary,
    ReturnResult,
    assess_late_return,
)
from .models.member import Member, MemberCreate, MemberUpdate

logger = logging.getLogger(__name__)


def _default_id_generators() -> dict[str, IdGenerator]:
    return {name: IdGenerator(name) for name in ("book", "member", "loan")}


class LendingEngine:
    """
    Orchestrates borrow and return across the three lending stores.

    Args:
        db: Database manager whose schema the engine creates if missing
        clock: Source of today's date
        loan_period_days: Days between borrow date and due date
        daily_late_fee: Fine per whole day a return is late
        id_generators: ``book``, ``member`` and ``loan`` generators; fresh
            ones are created when omitted
    """

    def __init__(
        self,
        db: DatabaseManager,
        *,
        clock: Callable[[], date] = date.today,
        loan_period_days: int = DEFAULT_LOAN_DAYS,
        daily_late_fee: int = DEFAULT_DAILY_LATE_FEE,
        id_generators: Mapping[str, IdGenerator] | None = None,
    ):
        self.db = db
        self.clock = clock
        self.loan_period_days = loan_period_days
        self.daily_late_fee = daily_late_fee
        self.ids = dict(id_generators or _default_id_generators())
        # Reads take the lock too: the in-memory backend shares one connection
        self._lock = threading.RLock()

        self.db.init_database()
        self.sync_ids()

    @classmethod
    def from_config(cls, config: LendingConfig | None = None) -> "LendingEngine":
        """Build an engine on the configured database, seeding it if asked."""
        config = config or get_config()
        db = DatabaseManager(config.database_url)
        db.init_database()

        if config.seed_sample_data:
            with db.session_scope() as session:
                seed_sample_data(session)

        return cls(
            db,
            loan_period_days=config.loan_period_days,
            daily_late_fee=config.daily_late_fee,
        )

    # One lock, one session, three stores
    # WHY: A borrow or return writes to all three stores; the
    # lock keeps another call from seeing or changing them halfway through
    # HOW: session_scope commits when the block exits cleanly and rolls back
    # on any exception, including an InvariantViolation from a store
    @contextmanager
    def _stores(self) -> Iterator[tuple[CatalogRepository, MembershipRepository, LoanLedger]]:
        """One locked transaction with the three stores bound to it."""
        with self._lock:
            try:
                with self.db.session_scope() as session:
                    ledger = LoanLedger(session, self.ids["loan"])
                    catalog = CatalogRepository(session, self.ids["book"], ledger, self.clock)
                    members = MembershipRepository(session, self.ids["member"], self.clock)
                    yield catalog, members, ledger
            except InvariantViolation:
                logger.exception("Lending invariant violated, transaction rolled back")
                raise

    def sync_ids(self) -> None:
        """Advance each id generator past the largest id already stored."""
        with self._stores() as (catalog, members, ledger):
            self.ids["book"].seed(catalog.max_id())
            self.ids["member"].seed(members.max_id())
            self.ids["loan"].seed(ledger.max_id())
        logger.debug("Id generators synced: %s", list(self.ids.values()))

    @staticmethod
    def _resolve(
        catalog: CatalogRepository,
        members: MembershipRepository,
        member_id: int,
        book_id: int,
    ) -> tuple[Member, Book]:
        member = members.get(member_id)
        if member is None:
            raise NotFoundError("Member not found", member_id=member_id)
        book = catalog.get(book_id)
        if book is None:
            raise NotFoundError("Book not found", book_id=book_id)
        return member, book

    # Circulation

    def borrow(self, member_id: int, book_id: int) -> BorrowResult:
        """
        Lend one copy of a book to a member.

        Raises:
            NotFoundError: If the member or the book does not exist
            UnavailableError: If no copies are on the shelf
            ConflictError: If the member already holds this book
        """
        with self._stores() as (catalog, members, ledger):
            member, book = self._resolve(catalog, members, member_id, book_id)

            if book.available_copies <= 0:
                raise UnavailableError(
                    "No copies available for this book",
                    book_id=book_id,
                    copies=book.copies,
                )
            if book_id in member.borrowed_books:
                raise ConflictError(
                    "Member has already borrowed this book",
                    member_id=member_id,
                    book_id=book_id,
                )
            if ledger.find_active(member_id, book_id) is not None:
                raise InvariantViolation(
                    f"Active record for member {member_id}, book {book_id} "
                    "missing from the borrowed set"
                )

            # Every check has passed; from here on only writes
            record = ledger.record_borrow(member_id, book_id, self.clock(), self.loan_period_days)
            book = catalog.set_available(book_id, book.available_copies - 1)
            members.set_borrowed(member_id, [*member.borrowed_books, book_id])

        logger.info(
            "Book %d borrowed by member %d, record %d due %s",
            book_id,
            member_id,
            record.id,
            record.due_date,
        )
        return BorrowResult(
            record=record,
            book=BookSummary(title=book.title, author=book.author),
            member=MemberSummary(name=member.name, email=member.email),
            due_date=record.due_date,
        )

    def return_book(self, member_id: int, book_id: int) -> ReturnResult:
        """
        Close a member's loan of a book and work out any late fee.

        A return on the due date is on time; each calendar day after it
        adds ``daily_late_fee`` to the fine.

        Raises:
            NotFoundError: If the member or the book does not exist
            ConflictError: If the pair has no active borrow record
        """
        with self._stores() as (catalog, members, ledger):
            member, book = self._resolve(catalog, members, member_id, book_id)

            if ledger.find_active(member_id, book_id) is None:
                raise ConflictError(
                    "No active borrow record found for this member and book",
                    member_id=member_id,
                    book_id=book_id,
                )
            if book_id not in member.borrowed_books:
                raise InvariantViolation(
                    f"Book {book_id} has an active record but is not in "
                    f"member {member_id}'s borrowed set"
                )

            record = ledger.record_return(member_id, book_id, self.clock())
            book = catalog.set_available(book_id, book.available_copies + 1)
            members.set_borrowed(member_id, [b for b in member.borrowed_books if b != book_id])

        is_late, days_late, fine = assess_late_return(
            record.due_date, record.return_date, self.daily_late_fee
        )
        logger.info(
            "Book %d returned by member %d, record %d%s",
            book_id,
            member_id,
            record.id,
            f", {days_late} day(s) late, fine {fine}" if is_late else "",
        )
        return ReturnResult(
            record=record,
            book=BookSummary(title=book.title, author=book.author),
            member=MemberSummary(name=member.name, email=member.email),
            is_late=is_late,
            days_late=days_late,
            fine=fine,
        )

    def list_loans(self) -> list[LoanView]:
        """Every borrow record with member name and book title as of now."""
        with self._stores() as (_, _, ledger):
            return ledger.list_enriched()

    # Catalog

    def add_book(self, data: BookCreate | Mapping[str, Any]) -> Book:
        with self._stores() as (catalog, _, _):
            book = catalog.add(data)
        logger.info("Book %d added: %s", book.id, book.title)
        return book

    def update_book(self, book_id: int, changes: BookUpdate | Mapping[str, Any]) -> Book:
        with self._stores() as (catalog, _, _):
            return catalog.update(book_id, changes)

    def remove_book(self, book_id: int) -> Book:
        with self._stores() as (catalog, _, _):
            book = catalog.remove(book_id)
        logger.info("Book %d removed", book_id)
        return book

    def get_book(self, book_id: int) -> Book | None:
        with self._stores() as (catalog, _, _):
            return catalog.get(book_id)

    def list_books(self) -> list[Book]:
        with self._stores() as (catalog, _, _):
            return catalog.list_all()

    # Membership

    def register_member(self, data: MemberCreate | Mapping[str, Any]) -> Member:
        with self._stores() as (_, members, _):
            member = members.add(data)
        logger.info("Member %d registered", member.id)
        return member

    def update_member(self, member_id: int, changes: MemberUpdate | Mapping[str, Any]) -> Member:
        with self._stores() as (_, members, _):
            return members.update(member_id, changes)

    def remove_member(self, member_id: int) -> Member:
        with self._stores() as (_, members, _):
            member = members.remove(member_id)
        logger.info("Member %d removed", member_id)
        return member

    def get_member(self, member_id: int) -> Member | None:
        with self._stores() as (_, members, _):
            return members.get(member_id)

    def list_members(self) -> list[Member]:
        with self._stores() as (_, members, _):
            return members.list_all()

    def check_invariants(self) -> None:
        """
        Cross-check every book and member against the ledger.

        Raises:
            InvariantViolation: On the first inconsistency found
        """
        with self._stores() as (catalog, members, ledger):
            active = ledger.active_records()

            for book in catalog.list_all():
                out = sum(1 for r in active if r.book_id == book.id)
                if not 0 <= book.available_copies <= book.copies:
                    raise InvariantViolation(
                        f"Book {book.id}: available {book.available_copies} outside 0..{book.copies}"
                    )
                if book.on_loan != out:
                    raise InvariantViolation(
                        f"Book {book.id}: {book.on_loan} copies on loan "
                        f"but {out} active records"
                    )

            for member in members.list_all():
                held = sorted(r.book_id for r in active if r.member_id == member.id)
                if sorted(member.borrowed_books) != held:
                    raise InvariantViolation(
                        f"Member {member.id}: borrowed set {member.borrowed_books} "
                        f"does not match active records {held}"
                    )


class _EngineStore:
    instance: LendingEngine | None = None


def get_engine() -> LendingEngine:
    """Get the process-wide engine, building it from config on first use."""
    if _EngineStore.instance is None:
        _EngineStore.instance = LendingEngine.from_config()
    return _EngineStore.instance


def reset_engine() -> None:
    """Drop the process-wide engine (and its in-memory data)."""
    if _EngineStore.instance is not None:
        _EngineStore.instance.db.close()
    _EngineStore.instance = None
