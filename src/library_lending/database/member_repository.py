"""
Membership repository for the Library Lending server.

This repository manages registered members and provides:

1. **Registration**: validated add with case-insensitive email uniqueness
2. **Profile Updates**: partial merge that re-validates email and phone
3. **Removal**: refused while the member still holds books
4. **Borrowed Set**: replaced as a whole by the lending engine only
"""

import json
from collections.abc import Callable, Iterable, Mapping
from datetime import date
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..errors import ConflictError, DuplicateKeyError, InvariantViolation
from ..models.member import Member as MemberModel
from ..models.member import MemberCreate, MemberUpdate
from .ids import IdGenerator
from .repository import BaseRepository, coerce_payload
from .schema import Member as MemberDB
from .session import safe_query


class MembershipRepository(BaseRepository[MemberDB, MemberModel]):
    """Repository for library members."""

    entity_name = "Member"

    def __init__(
        self,
        session: Session,
        ids: IdGenerator | None = None,
        clock: Callable[[], date] = date.today,
    ):
        super().__init__(session, ids)
        self.clock = clock

    @property
    def model_class(self):
        return MemberDB

    @property
    def response_schema(self):
        return MemberModel

    def _row_by_email(self, email: str) -> MemberDB | None:
        email = email.lower()
        return safe_query(
            self.session,
            lambda s: s.execute(
                select(MemberDB).where(func.lower(MemberDB.email) == email)
            ).scalar_one_or_none(),
            "Failed to look up member by email",
        )

    def add(self, data: MemberCreate | Mapping[str, Any]) -> MemberModel:
        """
        Register a new member with an empty borrowed set.

        Raises:
            ValidationFailedError: With every violated field rule
            DuplicateKeyError: If the email is taken, ignoring case
        """
        data = coerce_payload(data, MemberCreate)

        if self._row_by_email(data.email) is not None:
            raise DuplicateKeyError("A member with this email already exists", email=data.email)

        member = MemberDB(
            id=self._next_id(),
            name=data.name,
            email=data.email,
            phone=data.phone,
            membership_date=data.membership_date or self.clock(),
            borrowed_books="[]",
        )
        self.session.add(member)
        self._flush("register member")
        return self._to_response_model(member)

    def update(self, member_id: int, changes: MemberUpdate | Mapping[str, Any]) -> MemberModel:
        """
        Apply the supplied profile fields.

        Raises:
            ValidationFailedError: If a supplied email or phone is malformed
            NotFoundError: If the member does not exist
            DuplicateKeyError: If the new email belongs to another member
        """
        fields = coerce_payload(changes, MemberUpdate).changes()
        member = self._require_row(member_id)

        if "email" in fields:
            other = self._row_by_email(fields["email"])
            if other is not None and other.id != member.id:
                raise DuplicateKeyError(
                    "A member with this email already exists",
                    email=fields["email"],
                    member_id=other.id,
                )

        for field, value in fields.items():
            setattr(member, field, value)

        self._flush("update member")
        return self._to_response_model(member)

    def remove(self, member_id: int) -> MemberModel:
        """
        Remove a member with no books on loan.

        Raises:
            NotFoundError: If the member does not exist
            ConflictError: If the borrowed set is not empty; ``borrowed_books``
                in the details lists the held book ids
        """
        member = self._require_row(member_id)
        held = json.loads(member.borrowed_books or "[]")
        if held:
            raise ConflictError(
                "Cannot delete member with borrowed books",
                member_id=member_id,
                borrowed_books=held,
            )

        removed = self._to_response_model(member)
        self.session.delete(member)
        self._flush("delete member")
        return removed

    def set_borrowed(self, member_id: int, book_ids: Iterable[int]) -> MemberModel:
        """
        Replace a member's borrowed set. Only the lending engine calls this.

        Raises:
            InvariantViolation: If the new set contains a book id twice
        """
        member = self._require_row(member_id)
        book_ids = list(book_ids)
        if len(set(book_ids)) != len(book_ids):
            raise InvariantViolation(f"Member {member_id}: duplicate ids in borrowed set {book_ids}")
        member.borrowed_books = json.dumps(book_ids)
        self._flush("update borrowed set")
        return self._to_response_model(member)
