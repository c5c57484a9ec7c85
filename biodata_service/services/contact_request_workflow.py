"""Paid contact disclosure: pending -> approved; rejection is deletion."""

from __future__ import annotations

import logging
from typing import Any, Optional

from pymongo import DESCENDING

from ..config import get_settings
from ..db import get_db
from ..integrations.payments import PaymentGateway, get_payment_gateway
from ..models.contact_request import (
    ContactRequestCreate,
    ContactRequestDocument,
    ContactRequestStatus,
    ContactRequestView,
    ContactSnapshot,
)
from ..models.pagination import Page
from ..models.user import normalize_email
from ..repositories.contact_request import ContactRequestRepository
from ..repositories.profile import ProfileRepository
from .common import retype_page, to_object_id, utcnow
from .exceptions import ForbiddenError, InvalidInputError, InvalidStateError, NotFoundError
from .pagination import PaginatedQueryEngine

LOGGER = logging.getLogger("uvicorn.error")


class ContactRequestWorkflow:
    """Creates, approves, lists and removes contact requests.

    The contact details a requester paid for are copied into the request
    when it is created and never refreshed afterwards. Listings also show
    the profile's current details next to that snapshot.
    """

    def __init__(
        self,
        requests: ContactRequestRepository,
        profiles: ProfileRepository,
        *,
        payments: Optional[PaymentGateway] = None,
        verify_payments: bool = False,
        engine: Optional[PaginatedQueryEngine] = None,
    ) -> None:
        self._requests = requests
        self._profiles = profiles
        self._payments = payments
        self._verify_payments = verify_payments
        self._engine = engine or PaginatedQueryEngine()

    async def create_request(self, payload: ContactRequestCreate, *, requester_email: str) -> ContactRequestDocument:
        requester = normalize_email(requester_email)
        if payload.user_email:
            try:
                user_email = normalize_email(payload.user_email)
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
            if user_email != requester:
                raise ForbiddenError("contact requests can only be made for your own account")
        else:
            user_email = requester

        profile_oid = to_object_id(payload.profile_id, "biodata id")
        profile = await self._profiles.get_raw({"_id": profile_oid})
        if not profile:
            LOGGER.info("Biodata not found for contact request, id=%s", profile_oid)
            raise NotFoundError("Biodata not found")
        biodata_id = profile.get("biodataId")
        if biodata_id is None:
            raise InvalidStateError("biodata has no public id")

        if self._verify_payments:
            if self._payments is None:
                raise InvalidStateError("payment verification is enabled but no gateway is wired")
            await self._payments.confirm_payment(payload.transaction_id, payload.amount_paid)

        snapshot = ContactSnapshot.from_profile(profile)
        created = await self._requests.insert_request(
            {
                "userEmail": user_email,
                "biodataId": biodata_id,
                "transactionId": payload.transaction_id,
                "amountPaid": payload.amount_paid or 0,
                "status": ContactRequestStatus.PENDING.value,
                "requestedAt": utcnow(),
                "snapshot": snapshot.model_dump(by_alias=True),
            }
        )
        LOGGER.info("Contact request created: id=%s biodataId=%s by %s", created.id, biodata_id, user_email)
        return created

    async def approve_request(self, request_id: str) -> None:
        oid = to_object_id(request_id, "request id")
        moved = await self._requests.transition(
            oid,
            source=ContactRequestStatus.PENDING,
            target=ContactRequestStatus.APPROVED,
        )
        if not moved:
            raise NotFoundError("Request not found or already approved")
        LOGGER.info("Contact request approved: id=%s", oid)

    async def list_for_user(self, user_email: str, *, page: int = 1, limit: int = 10) -> Page[ContactRequestView]:
        profiles = self._profiles

        async def _attach_current(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
            by_biodata = await profiles.find_by_biodata_ids(row.get("biodataId") for row in rows)
            out = []
            for row in rows:
                profile = by_biodata.get(row.get("biodataId"))
                current = ContactSnapshot.from_profile(profile).model_dump(by_alias=True) if profile else None
                out.append({**row, "current": current})
            return out

        result = await self._engine.paginate(
            self._requests,
            page=page,
            limit=limit,
            query={"userEmail": (user_email or "").strip().lower()},
            sort=[("requestedAt", DESCENDING)],
            enrich=_attach_current,
        )
        return retype_page(result, ContactRequestView)

    async def list_all(self, *, page: int = 1, limit: int = 10) -> Page[ContactRequestDocument]:
        result = await self._engine.paginate(
            self._requests,
            page=page,
            limit=limit,
            sort=[("requestedAt", DESCENDING)],
        )
        return retype_page(result, ContactRequestDocument)

    async def delete_request(self, request_id: str) -> int:
        oid = to_object_id(request_id, "request id")
        deleted = await self._requests.delete(oid)
        LOGGER.info("Contact request %s deleted count: %s", oid, deleted)
        return deleted


def get_contact_request_workflow() -> ContactRequestWorkflow:
    db = get_db()
    settings = get_settings()
    return ContactRequestWorkflow(
        ContactRequestRepository(db),
        ProfileRepository(db),
        payments=get_payment_gateway(),
        verify_payments=settings.verify_contact_payments,
    )


__all__ = ["ContactRequestWorkflow", "get_contact_request_workflow"]
