"""User service interface and an in-memory implementation."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Protocol
from uuid import uuid4

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .errors import ApiError, UserAlreadyRegisteredError
from .models import RegistrationInput, UserSummary

logger = logging.getLogger(__name__)


class UserService(Protocol):
    """
    Collaborator that owns persistence and password handling.

    Implementations may be sync or async; handlers await results that are
    awaitable. Duplicate registrations raise UserAlreadyRegisteredError (or
    any error carrying the message "User already registered").
    """

    def register_user(self, user: RegistrationInput) -> UserSummary | Awaitable[UserSummary]:
        ...

    def get_user_profile(self, user_id: str) -> dict[str, Any] | Awaitable[dict[str, Any]]:
        ...

    def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> None | Awaitable[None]:
        ...


@dataclass
class _StoredUser:
    id: str
    email: str
    password_hash: str
    status: str
    created_at: datetime
    profile: dict[str, Any] = field(default_factory=dict)


def _profile_fields(user: RegistrationInput) -> dict[str, Any]:
    """Registration data worth keeping on the profile; credentials never are."""
    data = user.model_dump(by_alias=True, exclude={"email", "password"}, exclude_none=True)
    return {key: value for key, value in data.items() if "password" not in key.lower()}


class InMemoryUserService:
    """
    Process-local user store.

    Suitable for local runs and tests; nothing survives a restart.
    """

    def __init__(self, default_status: str = "active", hasher: PasswordHasher | None = None):
        self.default_status = default_status
        self._hasher = hasher or PasswordHasher()
        self._users: dict[str, _StoredUser] = {}
        self._ids_by_email: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def _verify(self, password_hash: str, password: str) -> bool:
        try:
            return await asyncio.to_thread(self._hasher.verify, password_hash, password)
        except (VerifyMismatchError, InvalidHashError, VerificationError):
            return False

    async def register_user(self, user: RegistrationInput) -> UserSummary:
        email = user.email.lower()
        if email in self._ids_by_email:
            raise UserAlreadyRegisteredError()

        password_hash = await asyncio.to_thread(self._hasher.hash, user.password)

        async with self._lock:
            # re-checked: another registration may have finished while hashing
            if email in self._ids_by_email:
                raise UserAlreadyRegisteredError()

            stored = _StoredUser(
                id=uuid4().hex,
                email=email,
                password_hash=password_hash,
                status=self.default_status,
                created_at=datetime.now(timezone.utc),
                profile=_profile_fields(user),
            )
            self._users[stored.id] = stored
            self._ids_by_email[email] = stored.id

        logger.debug("Stored user %s", stored.id)
        return UserSummary(id=stored.id, status=stored.status)

    async def get_user_profile(self, user_id: str) -> dict[str, Any]:
        stored = self._users.get(user_id)
        if stored is None:
            raise ApiError(404, "User not found")

        return {
            **stored.profile,
            "id": stored.id,
            "email": stored.email,
            "status": stored.status,
            "createdAt": stored.created_at.isoformat(),
        }

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        stored = self._users.get(user_id)
        if stored is None:
            raise ApiError(404, "User not found")

        if not await self._verify(stored.password_hash, current_password):
            raise ApiError(401, "Current password is incorrect")
        if current_password == new_password:
            raise ApiError(400, "New password must differ from the current password")

        stored.password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
