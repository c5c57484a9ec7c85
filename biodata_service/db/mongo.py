import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from .collections import (
    CONTACT_REQUESTS_COLLECTION,
    FAVOURITES_COLLECTION,
    PROFILES_COLLECTION,
    USERS_COLLECTION,
)

LOGGER = logging.getLogger("uvicorn.error")


async def ensure_user_indexes(db: AsyncIOMotorDatabase) -> None:
    await db[USERS_COLLECTION].create_index("email", name="users_email_unique", unique=True)


async def ensure_profile_indexes(db: AsyncIOMotorDatabase) -> None:
    collection = db[PROFILES_COLLECTION]
    await collection.create_index("biodataId", name="profile_biodata_id_unique", unique=True)
    await collection.create_index("contactEmail", name="profile_contact_email_idx")
    await collection.create_index("premiumRequested", name="profile_premium_requested_idx")


async def ensure_favourite_indexes(db: AsyncIOMotorDatabase) -> None:
    await db[FAVOURITES_COLLECTION].create_index(
        [("userEmail", ASCENDING), ("biodataUniqueId", ASCENDING)],
        name="favourites_user_biodata_unique",
        unique=True,
    )


async def ensure_contact_request_indexes(db: AsyncIOMotorDatabase) -> None:
    collection = db[CONTACT_REQUESTS_COLLECTION]
    await collection.create_index(
        [("userEmail", ASCENDING), ("requestedAt", DESCENDING)],
        name="contact_requests_user_requested_idx",
    )
    await collection.create_index("status", name="contact_requests_status_idx")


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create every index the workflows rely on. Idempotent, failures are logged."""

    for ensure in (
        ensure_user_indexes,
        ensure_profile_indexes,
        ensure_favourite_indexes,
        ensure_contact_request_indexes,
    ):
        try:
            await ensure(db)
        except Exception as exc:  # pragma: no cover - best-effort logging
            LOGGER.error("Failed to ensure indexes (%s): %s", ensure.__name__, exc)


__all__ = [
    "ensure_contact_request_indexes",
    "ensure_favourite_indexes",
    "ensure_indexes",
    "ensure_profile_indexes",
    "ensure_user_indexes",
]
