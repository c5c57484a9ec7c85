"""Premium tier upgrade: NotRequested -> Requested -> Approved."""

from __future__ import annotations

import logging
from typing import Any, Optional

from bson import ObjectId
from pymongo import ASCENDING

from ..db import get_db
from ..models.pagination import Page
from ..models.profile import (
    PremiumApprovalResponse,
    PremiumRequestItem,
    PremiumRequestResponse,
    PremiumState,
)
from ..models.user import Role, UserDocument, normalize_email
from ..repositories.exceptions import RepositoryError
from ..repositories.profile import ProfileRepository
from ..repositories.user import UserRepository
from .common import retype_page, to_object_id
from .exceptions import (
    ConflictError,
    ForbiddenError,
    InternalServiceError,
    InvalidStateError,
    NotFoundError,
)
from .pagination import PaginatedQueryEngine

LOGGER = logging.getLogger("uvicorn.error")

COMPENSATION_ATTEMPTS = 3


class PremiumWorkflow:
    """Owns the premium request flag on profiles and the premium role on users.

    Approval touches two collections. It is written as a short saga: the
    user write is conditional on the user not being premium yet, the profile
    write is conditional on the profile having requested premium. When the
    profile write errors, the profile is re-read: an approval that landed
    anyway completes the transition, otherwise the user's previous role is
    restored. Each compensating step is retried a bounded number of times.
    Any non-premium role, admin included, is replaced by premium.
    """

    def __init__(
        self,
        users: UserRepository,
        profiles: ProfileRepository,
        engine: PaginatedQueryEngine | None = None,
    ) -> None:
        self._users = users
        self._profiles = profiles
        self._engine = engine or PaginatedQueryEngine()

    async def request_premium(self, profile_id: str, *, requester_email: str) -> PremiumRequestResponse:
        oid = to_object_id(profile_id, "biodata id")
        profile = await self._profiles.get_by_id(oid)
        if not profile:
            raise NotFoundError("Biodata not found")
        if (profile.contact_email or "").lower() != normalize_email(requester_email):
            raise ForbiddenError("only the owner can request premium for this biodata")

        state = profile.premium_state
        if state is not PremiumState.NOT_REQUESTED:
            return PremiumRequestResponse(profileId=oid, premiumRequested=True, state=state, modified=False)

        matched, modified = await self._profiles.set_premium_requested(oid)
        if not matched:
            raise NotFoundError("Biodata not found")
        LOGGER.info("Premium requested for biodataId=%s", profile.biodata_id)
        return PremiumRequestResponse(
            profileId=oid,
            premiumRequested=True,
            state=PremiumState.REQUESTED,
            modified=bool(modified),
        )

    async def approve_premium(self, user_id: str) -> PremiumApprovalResponse:
        oid = to_object_id(user_id, "user id")
        user = await self._users.get_by_id(oid)
        if not user:
            raise NotFoundError("User not found")
        if user.role is Role.PREMIUM:
            raise ConflictError("User is already premium")

        profile = await self._profiles.get_by_contact_email(user.email)
        if not profile or not profile.premium_requested:
            LOGGER.warning("Premium not requested or profile missing for user %s", user.email)
            raise InvalidStateError("User's profile has not requested premium")

        before = await self._users.promote_unless(oid, Role.PREMIUM)
        if before is None:
            # Lost a race: someone approved (or removed) this user since the read above.
            raise ConflictError("User is already premium")

        try:
            approved = await self._profiles.approve_premium(profile.id)
        except RepositoryError as exc:
            LOGGER.warning("Premium approval for %s: profile write failed: %s", user.email, exc)
            # A failed or timed out write may still have been applied.
            applied = await self._profile_approved(profile.id)
            if not applied:
                if applied is None:
                    await self._withdraw_approval(profile.id)
                await self._compensate(before)
                LOGGER.error("Premium approval for %s rolled back", user.email)
                raise InternalServiceError() from exc
            approved = True

        if not approved:
            await self._compensate(before)
            raise InvalidStateError("User's profile has not requested premium")

        LOGGER.info("User %s made premium (biodataId=%s)", user.email, profile.biodata_id)
        return PremiumApprovalResponse(
            message="User has been made premium successfully",
            userId=oid,
            biodataId=profile.biodata_id,
        )

    async def _profile_approved(self, profile_id: ObjectId) -> Optional[bool]:
        """Re-read the approval flag; None when the store cannot answer."""

        for attempt in range(1, COMPENSATION_ATTEMPTS + 1):
            try:
                current = await self._profiles.get_by_id(profile_id)
            except RepositoryError as exc:
                LOGGER.warning("Re-reading profile %s failed (attempt %d): %s", profile_id, attempt, exc)
                continue
            return bool(current and current.premium_approved)
        return None

    async def _withdraw_approval(self, profile_id: ObjectId) -> None:
        for attempt in range(1, COMPENSATION_ATTEMPTS + 1):
            try:
                await self._profiles.revoke_premium(profile_id)
                return
            except RepositoryError as exc:
                LOGGER.warning("Withdrawing approval on profile %s failed (attempt %d): %s", profile_id, attempt, exc)
        LOGGER.error("Could not withdraw premium approval on profile %s", profile_id)

    async def _compensate(self, before: UserDocument) -> bool:
        for attempt in range(1, COMPENSATION_ATTEMPTS + 1):
            try:
                restored = await self._users.restore_role(before.id, expected=Role.PREMIUM, previous=before.role)
            except RepositoryError as exc:
                LOGGER.warning("Restoring role for user %s failed (attempt %d): %s", before.email, attempt, exc)
                continue
            if not restored:
                LOGGER.error("Role for user %s changed during approval rollback; left as is", before.email)
            return restored
        LOGGER.error("Could not restore role for user %s after failed approval", before.email)
        return False

    async def list_premium_requests(self, *, page: int = 1, limit: int = 10) -> Page[PremiumRequestItem]:
        """Profiles that requested premium, joined to their owning user by contactEmail."""

        users = self._users

        async def _join_users(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
            by_email = await users.find_by_emails(row.get("contactEmail") for row in rows)
            joined = []
            for row in rows:
                owner = by_email.get((row.get("contactEmail") or "").lower()) or {}
                joined.append(
                    {
                        "_id": owner.get("_id"),
                        "profileId": row["_id"],
                        "biodataId": row.get("biodataId"),
                        "name": owner.get("name"),
                        "email": owner.get("email") or row.get("contactEmail"),
                        "premiumApproved": row.get("premiumApproved") is True,
                    }
                )
            return joined

        result = await self._engine.paginate(
            self._profiles,
            page=page,
            limit=limit,
            query={"premiumRequested": True},
            sort=[("biodataId", ASCENDING)],
            enrich=_join_users,
        )
        return retype_page(result, PremiumRequestItem)


def get_premium_workflow() -> PremiumWorkflow:
    db = get_db()
    return PremiumWorkflow(UserRepository(db), ProfileRepository(db))


__all__ = ["PremiumWorkflow", "get_premium_workflow"]
