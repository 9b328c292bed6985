from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from typing import Any, Protocol

from app.models.user import User
from app.schemas.user import UserOut
from app.services.errors import Conflict, InvalidArgument, NotFound
from app.services.user_store import RecordNotFound, UniqueViolation, UserStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LEN = 6

_INT_RE = re.compile(r"^[+-]?\d+$")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class UserChanges:
    """Partial update. A field left as UNSET or None is not touched."""

    name: Any = UNSET
    email: Any = UNSET
    password: Any = UNSET
    role: Any = UNSET

    def present(self) -> dict[str, Any]:
        out = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if v is not UNSET and v is not None:
                out[f.name] = v
        return out


class CredentialHasher(Protocol):
    def hash(self, plaintext: str) -> str: ...


def parse_user_id(raw: Any) -> int:
    if isinstance(raw, bool):
        raise InvalidArgument("Invalid user id")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and _INT_RE.match(raw.strip()):
        return int(raw.strip())
    raise InvalidArgument("Invalid user id")


def _check_email(email: Any) -> None:
    if "@" not in str(email):
        raise InvalidArgument("Invalid email format")


def to_public(u: User) -> UserOut:
    return UserOut.model_validate(u)


class UserAccountService:
    def __init__(self, store: UserStore, hasher: CredentialHasher):
        self.store = store
        self.hasher = hasher

    def list(self) -> list[UserOut]:
        return [to_public(u) for u in self.store.find_many(order_by="id")]

    def get_by_id(self, raw_id: Any) -> UserOut:
        user_id = parse_user_id(raw_id)
        user = self.store.find_unique("id", user_id)
        if user is None:
            raise NotFound("User not found")
        return to_public(user)

    def create(self, name: Any, email: Any, password: Any, role: Any = None) -> UserOut:
        if not name or not email or not password:
            raise InvalidArgument("Name, email, and password are required")
        _check_email(email)

        if self.store.find_unique("email", email) is not None:
            raise Conflict("Email already in use")

        data = {"name": name, "email": email, "password_hash": self.hasher.hash(password)}
        if role is not None:
            data["role"] = role

        try:
            user = self.store.create(data)
        except UniqueViolation as e:
            if e.field != "email":
                raise
            raise Conflict("Email already in use") from e

        logger.info("user created id=%s", user.id)
        return to_public(user)

    def update(self, raw_id: Any, changes: UserChanges) -> UserOut:
        user_id = parse_user_id(raw_id)
        present = changes.present()

        if "name" in present and not present["name"]:
            raise InvalidArgument("Name cannot be empty")
        if "email" in present:
            _check_email(present["email"])
        if "password" in present and len(str(present["password"])) < MIN_PASSWORD_LEN:
            raise InvalidArgument("Password must be at least 6 characters")

        if "email" in present:
            existing = self.store.find_unique("email", present["email"])
            if existing is not None and existing.id != user_id:
                raise Conflict("Email already in use")

        data: dict[str, Any] = {}
        for k in ("name", "email", "role"):
            if k in present:
                data[k] = present[k]
        if "password" in present:
            data["password_hash"] = self.hasher.hash(present["password"])

        try:
            user = self.store.update(user_id, data)
        except RecordNotFound as e:
            raise NotFound("User not found") from e
        except UniqueViolation as e:
            if e.field != "email":
                raise
            raise Conflict("Email already in use") from e

        logger.info("user updated id=%s fields=%s", user_id, sorted(data))
        return to_public(user)

    def delete(self, raw_id: Any) -> None:
        user_id = parse_user_id(raw_id)
        try:
            self.store.delete(user_id)
        except RecordNotFound as e:
            raise NotFound("User not found") from e
        logger.info("user deleted id=%s", user_id)
