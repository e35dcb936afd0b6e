"""
Repository base for the lending stores.

Each store (catalog, membership, ledger) is a repository bound to one
SQLAlchemy session and, for stores that create entities, one IdGenerator.
Repositories never commit: the lending engine opens the session, runs every
check, performs the writes and commits once, so a failure anywhere leaves
all three stores as they were.

Methods return Pydantic models, which serialize cleanly into tool and
resource responses.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import (
    DuplicateKeyError,
    InvariantViolation,
    NotFoundError,
    StoreError,
    ValidationFailedError,
)
from ..models.validation import validation_messages
from .ids import IdGenerator
from .schema import Base
from .session import safe_query

ModelType = TypeVar("ModelType", bound=Base)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)
PayloadType = TypeVar("PayloadType", bound=BaseModel)


def coerce_payload(
    payload: PayloadType | Mapping[str, Any],
    schema: type[PayloadType],
    context: dict[str, Any] | None = None,
) -> PayloadType:
    """
    Accept either a ready payload model or raw field values.

    A ready model is validated again when ``context`` is given.

    Raises:
        ValidationFailedError: listing every violated field rule
    """
    if isinstance(payload, schema):
        if context is None:
            return payload
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload, context=context)
    except ValidationError as e:
        raise ValidationFailedError(validation_messages(e)) from e


class BaseRepository(ABC, Generic[ModelType, ResponseSchemaType]):
    """
    Common read operations and id handling for the lending stores.

    Subclasses name their table, their response schema and the entity name
    used in error messages.
    """

    entity_name = "Entity"

    def __init__(self, session: Session, ids: IdGenerator | None = None):
        self.session = session
        self.ids = ids

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the SQLAlchemy model class."""

    @property
    @abstractmethod
    def response_schema(self) -> type[ResponseSchemaType]:
        """Return the Pydantic response schema."""

    def _to_response_model(self, db_obj: ModelType) -> ResponseSchemaType:
        """Convert database model to Pydantic response model."""
        return self.response_schema.model_validate(db_obj, from_attributes=True)

    def _get_row(self, id: int) -> ModelType | None:
        return safe_query(
            self.session,
            lambda s: s.get(self.model_class, id),
            f"Failed to get {self.entity_name} by ID",
        )

    def _require_row(self, id: int) -> ModelType:
        row = self._get_row(id)
        if row is None:
            raise NotFoundError(f"{self.entity_name} not found", id=id)
        return row

    def _next_id(self) -> int:
        if self.ids is None:
            raise StoreError(f"{type(self).__name__} was created without an id generator")
        return self.ids.next_id()

    def _flush(self, operation: str) -> None:
        """Push pending writes so constraint failures surface inside the transaction."""
        try:
            self.session.flush()
        except IntegrityError as e:
            if "UNIQUE" in str(e.orig).upper():
                raise DuplicateKeyError(
                    f"{operation} failed: {self.entity_name} already exists"
                ) from e
            # CHECK constraints guard the availability invariant
            raise InvariantViolation(f"{operation} violated a store constraint: {e.orig}") from e

    def get(self, id: int) -> ResponseSchemaType | None:
        """Get entity by ID, or None."""
        row = self._get_row(id)
        return None if row is None else self._to_response_model(row)

    def list_all(self) -> list[ResponseSchemaType]:
        """All entities in id order."""
        rows = safe_query(
            self.session,
            lambda s: s.execute(
                select(self.model_class).order_by(self.model_class.id)
            ).scalars().all(),
            f"Failed to list {self.entity_name} records",
        )
        return [self._to_response_model(row) for row in rows]

    def max_id(self) -> int | None:
        """Largest stored id, used to seed the id generator."""
        return safe_query(
            self.session,
            lambda s: s.execute(select(func.max(self.model_class.id))).scalar(),
            f"Failed to get max {self.entity_name} ID",
        )
