"""
Catalog repository for the Library Lending server.

The catalog store owns the Book records and their copy-availability
counters:

1. **Add**: assigns the next id, rejects duplicate ISBNs, starts with every copy available
2. **Update**: partial merge of supplied fields; availability follows a change in copies
3. **Remove**: refused while any active loan references the book
4. **Availability**: a single write path, used only by the lending engine
"""

from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import ConflictError, DuplicateKeyError, InvariantViolation
from ..models.book import Book as BookModel
from ..models.book import BookCreate, BookUpdate
from .ids import IdGenerator
from .loan_ledger import LoanLedger
from .repository import BaseRepository, coerce_payload
from .schema import Book as BookDB
from .session import safe_query


class CatalogRepository(BaseRepository[BookDB, BookModel]):
    """
    Repository for the book catalog.

    Removing a book consults the loan ledger, so the catalog is built with
    the ledger bound to the same session. ``clock`` supplies the current
    year for the publish-year rule.
    """

    entity_name = "Book"

    def __init__(
        self,
        session: Session,
        ids: IdGenerator | None = None,
        ledger: LoanLedger | None = None,
        clock: Callable[[], date] = date.today,
    ):
        super().__init__(session, ids)
        self.ledger = ledger or LoanLedger(session)
        self.clock = clock

    @property
    def model_class(self):
        return BookDB

    @property
    def response_schema(self):
        return BookModel

    def _row_by_isbn(self, isbn: str) -> BookDB | None:
        return safe_query(
            self.session,
            lambda s: s.execute(select(BookDB).where(BookDB.isbn == isbn)).scalar_one_or_none(),
            "Failed to look up book by ISBN",
        )

    def add(self, data: BookCreate | Mapping[str, Any]) -> BookModel:
        """
        Add a book to the catalog.

        Args:
            data: Book fields; raw mappings are validated and trimmed

        Returns:
            The stored book with every copy available

        Raises:
            ValidationFailedError: If any field rule is violated
            DuplicateKeyError: If the ISBN is already in the catalog
        """
        data = coerce_payload(data, BookCreate, {"today": self.clock()})

        if self._row_by_isbn(data.isbn) is not None:
            raise DuplicateKeyError("A book with this ISBN already exists", isbn=data.isbn)

        book = BookDB(
            id=self._next_id(),
            **data.model_dump(),
            available_copies=data.copies,
        )
        self.session.add(book)
        self._flush("add book")
        return self._to_response_model(book)

    def update(self, book_id: int, changes: BookUpdate | Mapping[str, Any]) -> BookModel:
        """
        Apply the supplied fields to a book.

        A change in ``copies`` moves ``available_copies`` by the same amount,
        so the number of copies on loan is unchanged.

        Raises:
            ValidationFailedError: If any supplied field is invalid
            NotFoundError: If the book does not exist
            DuplicateKeyError: If the new ISBN belongs to another book
            ConflictError: If fewer copies would remain than are on loan
        """
        fields = coerce_payload(changes, BookUpdate, {"today": self.clock()}).changes()
        book = self._require_row(book_id)

        if "isbn" in fields and fields["isbn"] != book.isbn:
            other = self._row_by_isbn(fields["isbn"])
            if other is not None and other.id != book.id:
                raise DuplicateKeyError(
                    "A book with this ISBN already exists", isbn=fields["isbn"], book_id=other.id
                )

        if "copies" in fields:
            on_loan = book.copies - book.available_copies
            if fields["copies"] < on_loan:
                raise ConflictError(
                    f"Cannot reduce copies below the {on_loan} currently on loan",
                    book_id=book.id,
                    on_loan=on_loan,
                )
            book.available_copies = fields["copies"] - on_loan

        for field, value in fields.items():
            setattr(book, field, value)

        self._flush("update book")
        return self._to_response_model(book)

    def remove(self, book_id: int) -> BookModel:
        """
        Remove a book that nobody has on loan.

        Raises:
            NotFoundError: If the book does not exist
            ConflictError: If an active borrow record references the book
        """
        book = self._require_row(book_id)

        if self.ledger.has_active_for_book(book_id):
            raise ConflictError(
                "Cannot delete book as it is currently borrowed",
                book_id=book_id,
            )

        removed = self._to_response_model(book)
        self.session.delete(book)
        self._flush("delete book")
        return removed

    def set_available(self, book_id: int, available: int) -> BookModel:
        """
        Replace a book's availability counter.

        Only the lending engine calls this, once per borrow or return.

        Raises:
            InvariantViolation: If the value falls outside ``0..copies``
        """
        book = self._require_row(book_id)
        if not 0 <= available <= book.copies:
            raise InvariantViolation(
                f"Book {book_id}: available copies {available} outside 0..{book.copies}"
            )
        book.available_copies = available
        self._flush("update availability")
        return self._to_response_model(book)
