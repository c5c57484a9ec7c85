"""MongoDB collection names used by the biodata service."""

from __future__ import annotations

USERS_COLLECTION = "users"
PROFILES_COLLECTION = "profile"
CONTACT_REQUESTS_COLLECTION = "contactRequests"
FAVOURITES_COLLECTION = "favourites"
COUNTERS_COLLECTION = "counters"
SUCCESS_STORIES_COLLECTION = "SuccessStories"

__all__ = [
    "USERS_COLLECTION",
    "PROFILES_COLLECTION",
    "CONTACT_REQUESTS_COLLECTION",
    "FAVOURITES_COLLECTION",
    "COUNTERS_COLLECTION",
    "SUCCESS_STORIES_COLLECTION",
]
