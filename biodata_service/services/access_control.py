"""Role checks for privileged operations, driven by the configured access policy."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from ..config import get_settings
from ..db import get_db
from ..integrations.identity import VerifiedIdentity
from ..models.user import Role, UserDocument
from ..repositories.user import UserRepository
from .exceptions import ForbiddenError

LOGGER = logging.getLogger("uvicorn.error")


def _parse_roles(roles: Iterable[str]) -> frozenset[Role]:
    parsed = set()
    for role in roles:
        try:
            parsed.add(Role(str(role).strip().lower()))
        except ValueError:
            LOGGER.warning("Ignoring unknown role %r in access policy", role)
    return frozenset(parsed)


class AccessControlGate:
    """Loads the caller's user record and requires its role to be allowed for ``operation``.

    Operations missing from the policy are denied.
    """

    def __init__(self, users: UserRepository, policy: Mapping[str, Iterable[str]]) -> None:
        self._users = users
        self._policy = {operation: _parse_roles(roles) for operation, roles in policy.items()}

    def allowed_roles(self, operation: str) -> frozenset[Role]:
        return self._policy.get(operation, frozenset())

    async def require_role(self, identity: VerifiedIdentity, operation: str) -> UserDocument:
        allowed = self.allowed_roles(operation)
        if not allowed:
            LOGGER.warning("Denied %s: operation has no allowed roles", operation)
            raise ForbiddenError()

        user: Optional[UserDocument] = await self._users.get_by_email(identity.email)
        if user is None or user.role not in allowed:
            LOGGER.warning(
                "Denied %s for %s (role=%s)",
                operation,
                identity.email,
                user.role.value if user else None,
            )
            raise ForbiddenError()
        return user


def get_access_control_gate() -> AccessControlGate:
    return AccessControlGate(UserRepository(get_db()), get_settings().access_policy)


__all__ = ["AccessControlGate", "get_access_control_gate"]
