"""
Tests for the store backend: schema constraints, sessions and seeding.
"""

import json
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from library_lending.database.schema import Book, BorrowRecord, Member
from library_lending.database.seed import SAMPLE_BOOKS, seed_sample_data
from library_lending.database.session import DatabaseManager, safe_query
from library_lending.errors import StoreError
from library_lending.models.loan import LoanStatus


def make_book(**overrides) -> Book:
    fields = {
        "id": 1,
        "title": "Dune",
        "author": "Frank Herbert",
        "isbn": "978-0-441-17271-9",
        "category": "Science Fiction",
        "publish_year": 1965,
        "copies": 2,
        "available_copies": 2,
    }
    fields.update(overrides)
    return Book(**fields)


class TestSchemaConstraints:
    """The check constraints behind 0 <= available_copies <= copies."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"available_copies": -1},
            {"available_copies": 3},
            {"copies": 0, "available_copies": 0},
        ],
    )
    def test_availability_constraints(self, db_session, overrides):
        db_session.add(make_book(**overrides))
        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_isbn_is_unique(self, db_session):
        db_session.add(make_book())
        db_session.add(make_book(id=2))
        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_due_date_after_borrow_date(self, db_session):
        db_session.add(
            BorrowRecord(
                id=1,
                member_id=1,
                book_id=1,
                borrow_date=date(2024, 10, 15),
                due_date=date(2024, 10, 1),
                status=LoanStatus.ACTIVE,
            )
        )
        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_borrow_record_may_outlive_its_book(self, db_session):
        db_session.add(
            BorrowRecord(
                id=1,
                member_id=7,
                book_id=7,
                borrow_date=date(2024, 10, 1),
                due_date=date(2024, 10, 15),
                return_date=date(2024, 10, 2),
                status=LoanStatus.RETURNED,
            )
        )
        db_session.flush()
        assert db_session.get(BorrowRecord, 1).status == LoanStatus.RETURNED


class TestDatabaseManager:
    def test_in_memory_databases_are_private(self):
        first = DatabaseManager("sqlite://")
        second = DatabaseManager("sqlite://")
        try:
            first.init_database()
            second.init_database()
            with first.session_scope() as session:
                session.add(make_book())

            with second.session_scope() as session:
                assert session.execute(select(Book)).first() is None
        finally:
            first.close()
            second.close()

    def test_session_scope_commits(self, db_manager):
        with db_manager.session_scope() as session:
            session.add(make_book())

        with db_manager.session_scope() as session:
            assert session.get(Book, 1).title == "Dune"

    def test_session_scope_rolls_back_on_error(self, db_manager):
        with pytest.raises(RuntimeError):
            with db_manager.session_scope() as session:
                session.add(make_book())
                session.flush()
                raise RuntimeError("abort")

        with db_manager.session_scope() as session:
            assert session.get(Book, 1) is None

    def test_verify_connection(self, db_manager):
        assert db_manager.verify_connection() is True

    def test_init_database_drop_existing(self, db_manager):
        with db_manager.session_scope() as session:
            session.add(make_book())

        db_manager.init_database(drop_existing=True)

        with db_manager.session_scope() as session:
            assert session.execute(select(Book)).first() is None

    def test_default_url_comes_from_config(self, clean_env, monkeypatch):
        monkeypatch.setenv("LIBRARY_LENDING_DATABASE_URL", "sqlite:///:memory:")
        assert DatabaseManager().database_url == "sqlite:///:memory:"

    def test_safe_query_wraps_failures(self, db_session):
        def failing(_session):
            raise ValueError("bad query")

        with pytest.raises(StoreError, match="Lookup failed: bad query"):
            safe_query(db_session, failing, "Lookup failed")


class TestSeedData:
    def test_seed_sample_data(self, db_session):
        assert seed_sample_data(db_session) is True

        books = db_session.execute(select(Book).order_by(Book.id)).scalars().all()
        assert [b.isbn for b in books] == [b["isbn"] for b in SAMPLE_BOOKS]

        john = db_session.get(Member, 1)
        assert json.loads(john.borrowed_books) == [1]

        [loan] = db_session.execute(select(BorrowRecord)).scalars().all()
        assert (loan.member_id, loan.book_id, loan.status) == (1, 1, LoanStatus.ACTIVE)
        assert loan.due_date == date(2024, 10, 15)

    def test_seed_skips_populated_catalog(self, db_session):
        db_session.add(make_book(id=9, isbn="x"))
        db_session.flush()

        assert seed_sample_data(db_session) is False
        assert db_session.get(Member, 1) is None
