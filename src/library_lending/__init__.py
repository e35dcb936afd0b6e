"""
Library Lending MCP Server Package.

An MCP server for a small library's catalog and lending workflow.

Key Components:
- models: Pydantic models for books, members, borrow records and results
- database: SQLAlchemy schema, sessions, id generators and the three stores
- lending: the lending engine, sole writer of availability and borrowed sets
- errors: the error kinds surfaced to clients
- config: Configuration management with Pydantic v2
- resources: MCP resources (read-only endpoints)
- tools: MCP tools (operations with side effects)
"""

__version__ = "1.0.0"

from .errors import (
    ConflictError,
    DuplicateKeyError,
    InvariantViolation,
    LendingError,
    NotFoundError,
    UnavailableError,
    ValidationFailedError,
)
from .lending import LendingEngine, get_engine, reset_engine

__all__ = [
    "ConflictError",
    "DuplicateKeyError",
    "InvariantViolation",
    "LendingEngine",
    "LendingError",
    "NotFoundError",
    "UnavailableError",
    "ValidationFailedError",
    "__version__",
    "get_engine",
    "reset_engine",
]
