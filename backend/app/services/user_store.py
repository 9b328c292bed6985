from __future__ import annotations

import logging
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = ("id", "email")

# users.id is a 32-bit INTEGER column
ID_MIN, ID_MAX = -(2**31), 2**31 - 1


class RecordNotFound(Exception):
    """Raised by update/delete when the targeted row does not exist."""

    def __init__(self, user_id: int):
        super().__init__(f"user {user_id} not found")
        self.user_id = user_id


class UniqueViolation(Exception):
    """Raised when a write collides with a unique constraint."""

    def __init__(self, field: str):
        super().__init__(f"unique constraint violated on {field}")
        self.field = field


class UserStore(Protocol):
    def find_many(self, order_by: str = "id") -> list[User]: ...

    def find_unique(self, field: str, value: Any) -> User | None: ...

    def create(self, data: dict[str, Any]) -> User: ...

    def update(self, user_id: int, data: dict[str, Any]) -> User: ...

    def delete(self, user_id: int) -> None: ...


def _id_in_range(value: Any) -> bool:
    return isinstance(value, int) and ID_MIN <= value <= ID_MAX


def _unique_field(e: IntegrityError) -> str | None:
    msg = str(e.orig).lower()
    if "unique" not in msg and "duplicate" not in msg:
        return None
    if "email" in msg:
        return "email"
    return "id"


class SqlAlchemyUserStore:
    def __init__(self, s: Session):
        self.s = s

    def find_many(self, order_by: str = "id") -> list[User]:
        col = getattr(User, order_by)
        return list(self.s.execute(select(User).order_by(col.asc())).scalars().all())

    def find_unique(self, field: str, value: Any) -> User | None:
        if field not in UNIQUE_FIELDS:
            raise ValueError(f"{field} is not a unique field")
        if field == "id" and not _id_in_range(value):
            return None
        col = getattr(User, field)
        return self.s.execute(select(User).where(col == value)).scalar_one_or_none()

    def create(self, data: dict[str, Any]) -> User:
        user = User(**data)
        self.s.add(user)
        self._commit()
        self.s.refresh(user)
        return user

    def update(self, user_id: int, data: dict[str, Any]) -> User:
        user = self._get(user_id)
        if user is None:
            raise RecordNotFound(user_id)
        for k, v in data.items():
            setattr(user, k, v)
        self.s.add(user)
        self._commit()
        self.s.refresh(user)
        return user

    def delete(self, user_id: int) -> None:
        user = self._get(user_id)
        if user is None:
            raise RecordNotFound(user_id)
        self.s.delete(user)
        self._commit()

    def _get(self, user_id: int) -> User | None:
        if not _id_in_range(user_id):
            return None
        return self.s.get(User, user_id)

    def _commit(self) -> None:
        try:
            self.s.commit()
        except IntegrityError as e:
            self.s.rollback()
            field = _unique_field(e)
            if field is None:
                raise
            logger.warning("unique constraint violated on users.%s", field)
            raise UniqueViolation(field) from e
