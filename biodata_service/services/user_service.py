from __future__ import annotations

import logging
from typing import Optional

from pymongo import ASCENDING

from ..db import get_db
from ..models.pagination import Page
from ..models.user import Role, UserCreateRequest, UserDocument, UserListItem
from ..repositories.exceptions import DuplicateKeyRepositoryError
from ..repositories.profile import ProfileRepository
from ..repositories.user import UserRepository
from .common import retype_page, to_object_id
from .exceptions import ConflictError, NotFoundError
from .pagination import PaginatedQueryEngine, premium_flag_enricher, search_filter

LOGGER = logging.getLogger("uvicorn.error")

USER_SEARCH_FIELDS = ("name", "email")


class UserService:
    """Registration, lookups, the admin listing and explicit admin promotion."""

    def __init__(
        self,
        users: UserRepository,
        profiles: ProfileRepository,
        engine: Optional[PaginatedQueryEngine] = None,
    ) -> None:
        self._users = users
        self._profiles = profiles
        self._engine = engine or PaginatedQueryEngine()

    async def register(self, payload: UserCreateRequest) -> UserDocument:
        if await self._users.email_exists(payload.email):
            raise ConflictError("User already exists")

        # Clients never choose their own role.
        extra = payload.model_dump(by_alias=True, exclude_none=True, exclude={"email", "name"})
        extra.pop("role", None)
        try:
            created = await self._users.create_user(email=payload.email, name=payload.name, extra=extra)
        except DuplicateKeyRepositoryError:
            raise ConflictError("User already exists") from None
        LOGGER.info("User registered: %s", created.email)
        return created

    async def get_by_email(self, email: str) -> UserDocument:
        user = await self._users.get_by_email((email or "").strip())
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_role(self, email: str) -> Optional[Role]:
        user = await self._users.get_by_email((email or "").strip())
        return user.role if user else None

    async def list_users(self, *, page: int = 1, limit: int = 10, search: Optional[str] = None) -> Page[UserListItem]:
        result = await self._engine.paginate(
            self._users,
            page=page,
            limit=limit,
            query=search_filter(search, USER_SEARCH_FIELDS),
            sort=[("email", ASCENDING)],
            enrich=premium_flag_enricher(self._profiles),
        )
        return retype_page(result, UserListItem)

    async def make_admin(self, user_id: str) -> UserDocument:
        oid = to_object_id(user_id, "user id")
        updated = await self._users.set_role(oid, Role.ADMIN)
        if not updated:
            raise NotFoundError("User not found")
        LOGGER.info("User %s promoted to admin", updated.email)
        return updated


def get_user_service() -> UserService:
    db = get_db()
    return UserService(UserRepository(db), ProfileRepository(db))


__all__ = ["USER_SEARCH_FIELDS", "UserService", "get_user_service"]
