"""
Loan ledger for the Library Lending server.

The ledger owns the borrow records. It only ever appends records and moves
them once from ``active`` to ``returned``; for any (member, book) pair at
most one record is active at a time.
"""

from datetime import date

from sqlalchemy import and_, func, select

from ..errors import InvariantViolation, NotFoundError
from ..models.loan import BorrowRecord as BorrowRecordModel
from ..models.loan import LoanStatus, LoanView, compute_due_date
from .repository import BaseRepository
from .schema import Book as BookDB
from .schema import BorrowRecord as BorrowRecordDB
from .schema import Member as MemberDB
from .session import safe_query

UNKNOWN = "Unknown"


class LoanLedger(BaseRepository[BorrowRecordDB, BorrowRecordModel]):
    """Repository for borrow records."""

    entity_name = "Borrow record"

    @property
    def model_class(self):
        return BorrowRecordDB

    @property
    def response_schema(self):
        return BorrowRecordModel

    def _active_rows(self, member_id: int, book_id: int) -> list[BorrowRecordDB]:
        return safe_query(
            self.session,
            lambda s: s.execute(
                select(BorrowRecordDB).where(
                    and_(
                        BorrowRecordDB.member_id == member_id,
                        BorrowRecordDB.book_id == book_id,
                        BorrowRecordDB.status == LoanStatus.ACTIVE,
                    )
                )
            ).scalars().all(),
            "Failed to look up active borrow record",
        )

    def _active_row(self, member_id: int, book_id: int) -> BorrowRecordDB | None:
        rows = self._active_rows(member_id, book_id)
        if len(rows) > 1:
            raise InvariantViolation(
                f"{len(rows)} active borrow records for member {member_id}, book {book_id}"
            )
        return rows[0] if rows else None

    def record_borrow(
        self, member_id: int, book_id: int, borrow_date: date, loan_days: int = 14
    ) -> BorrowRecordModel:
        """Append an active record due ``loan_days`` after ``borrow_date``."""
        record = BorrowRecordDB(
            id=self._next_id(),
            member_id=member_id,
            book_id=book_id,
            borrow_date=borrow_date,
            due_date=compute_due_date(borrow_date, loan_days),
            return_date=None,
            status=LoanStatus.ACTIVE,
        )
        self.session.add(record)
        self._flush("record borrow")
        return self._to_response_model(record)

    def record_return(self, member_id: int, book_id: int, return_date: date) -> BorrowRecordModel:
        """
        Close the active record for the pair.

        Raises:
            NotFoundError: If the pair has no active record
        """
        record = self._active_row(member_id, book_id)
        if record is None:
            raise NotFoundError(
                "No active borrow record found for this member and book",
                member_id=member_id,
                book_id=book_id,
            )

        record.status = LoanStatus.RETURNED
        record.return_date = return_date
        self._flush("record return")
        return self._to_response_model(record)

    def find_active(self, member_id: int, book_id: int) -> BorrowRecordModel | None:
        row = self._active_row(member_id, book_id)
        return None if row is None else self._to_response_model(row)

    def has_active_for_book(self, book_id: int) -> bool:
        count = safe_query(
            self.session,
            lambda s: s.execute(
                select(func.count())
                .select_from(BorrowRecordDB)
                .where(
                    and_(
                        BorrowRecordDB.book_id == book_id,
                        BorrowRecordDB.status == LoanStatus.ACTIVE,
                    )
                )
            ).scalar(),
            "Failed to count active loans for book",
        )
        return bool(count)

    def active_records(self) -> list[BorrowRecordModel]:
        """Every active record, in id order."""
        rows = safe_query(
            self.session,
            lambda s: s.execute(
                select(BorrowRecordDB)
                .where(BorrowRecordDB.status == LoanStatus.ACTIVE)
                .order_by(BorrowRecordDB.id)
            ).scalars().all(),
            "Failed to list active loans",
        )
        return [self._to_response_model(row) for row in rows]

    def active_for_member(self, member_id: int) -> list[BorrowRecordModel]:
        return [r for r in self.active_records() if r.member_id == member_id]

    def list_enriched(self) -> list[LoanView]:
        """
        Every record with the member name and book title attached.

        Dangling references are shown as "Unknown" rather than failing.
        """
        rows = safe_query(
            self.session,
            lambda s: s.execute(
                select(BorrowRecordDB, MemberDB.name, BookDB.title)
                .outerjoin(MemberDB, MemberDB.id == BorrowRecordDB.member_id)
                .outerjoin(BookDB, BookDB.id == BorrowRecordDB.book_id)
                .order_by(BorrowRecordDB.id)
            ).all(),
            "Failed to list borrow records",
        )
        return [
            LoanView(
                **self._to_response_model(record).model_dump(),
                member_name=member_name or UNKNOWN,
                book_title=book_title or UNKNOWN,
            )
            for record, member_name, book_title in rows
        ]
