"""Test configuration and fixtures for the Library Lending server.

1. Isolated stores - every test gets its own in-memory database
2. A controllable clock - borrow and return dates are set by the test
3. Configuration isolation - no LIBRARY_LENDING_* variables leak in
4. Tool and resource handlers bound to the test engine
"""

import os
from collections.abc import Generator
from datetime import date, timedelta

import pytest
from sqlalchemy.orm import Session

from library_lending.config import LendingConfig, reset_config
from library_lending.database.catalog_repository import CatalogRepository
from library_lending.database.ids import IdGenerator
from library_lending.database.loan_ledger import LoanLedger
from library_lending.database.member_repository import MembershipRepository
from library_lending.database.seed import seed_sample_data
from library_lending.database.session import DatabaseManager
from library_lending.lending import LendingEngine, reset_engine

ENGINE_CONSUMERS = [
    "library_lending.tools.circulation",
    "library_lending.tools.catalog",
    "library_lending.tools.members",
    "library_lending.resources.books",
    "library_lending.resources.members",
    "library_lending.resources.loans",
]


class FakeClock:
    """A date source tests can move forward by hand."""

    def __init__(self, today: date = date(2024, 11, 1)):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int) -> date:
        self.today += timedelta(days=days)
        return self.today


# === Store Fixtures ===


@pytest.fixture
def db_manager() -> Generator[DatabaseManager, None, None]:
    """A private in-memory database with the schema created."""
    manager = DatabaseManager("sqlite://")
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def db_session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    """A session for store-level tests; rolled back afterwards."""
    session = db_manager.create_session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def ids() -> dict[str, IdGenerator]:
    return {name: IdGenerator(name) for name in ("book", "member", "loan")}


@pytest.fixture
def ledger(db_session: Session, ids) -> LoanLedger:
    return LoanLedger(db_session, ids["loan"])


@pytest.fixture
def catalog(db_session: Session, ids, ledger, clock) -> CatalogRepository:
    return CatalogRepository(db_session, ids["book"], ledger, clock)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def membership(db_session: Session, ids, clock) -> MembershipRepository:
    return MembershipRepository(db_session, ids["member"], clock)


# === Engine Fixtures ===


@pytest.fixture
def engine(db_manager: DatabaseManager, clock: FakeClock) -> LendingEngine:
    """An engine over an empty library."""
    return LendingEngine(db_manager, clock=clock)


@pytest.fixture
def seeded_engine(db_manager: DatabaseManager, clock: FakeClock) -> LendingEngine:
    """An engine over the sample library (3 books, 2 members, 1 active loan)."""
    with db_manager.session_scope() as session:
        seed_sample_data(session)
    return LendingEngine(db_manager, clock=clock)


@pytest.fixture
def book_data() -> dict:
    return {
        "title": "Dune",
        "author": "Frank Herbert",
        "isbn": "978-0-441-17271-9",
        "category": "Science Fiction",
        "publish_year": 1965,
        "copies": 2,
    }


@pytest.fixture
def member_data() -> dict:
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "5551234567",
    }


@pytest.fixture
def use_engine(monkeypatch):
    """Point every tool and resource module at the given engine."""

    def _use(engine: LendingEngine) -> LendingEngine:
        for module in ENGINE_CONSUMERS:
            monkeypatch.setattr(f"{module}.get_engine", lambda: engine)
        return engine

    return _use


@pytest.fixture
def tool_engine(seeded_engine, use_engine) -> LendingEngine:
    """The seeded engine, wired into the tool and resource handlers."""
    return use_engine(seeded_engine)


# === Configuration Fixtures ===


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Provide a clean environment without LIBRARY_LENDING_* variables."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("LIBRARY_LENDING_"):
            del os.environ[key]

    reset_config()
    reset_engine()
    yield

    os.environ.clear()
    os.environ.update(original_env)
    reset_config()
    reset_engine()


@pytest.fixture
def test_config(clean_env) -> LendingConfig:
    return LendingConfig(
        _env_file=None,
        server_name="test-library-lending",
        server_version="0.0.1-test",
        database_url="sqlite://",
        seed_sample_data=True,
        debug=True,
        log_level="DEBUG",
    )
