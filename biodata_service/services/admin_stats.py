from __future__ import annotations

import asyncio

from ..db import get_db
from ..models.contact_request import ContactRequestStatus
from ..models.profile import BiodataType
from ..models.stats import AdminStats, SuccessCounter
from ..repositories.contact_request import ContactRequestRepository
from ..repositories.profile import ProfileRepository
from ..repositories.success_story import SuccessStoryRepository


def _type_ignoring_case(biodata_type: BiodataType) -> dict:
    return {"biodataType": {"$regex": f"^{biodata_type.value}$", "$options": "i"}}


class AdminStatsAggregator:
    """Reporting counts, recomputed on every call."""

    def __init__(
        self,
        profiles: ProfileRepository,
        requests: ContactRequestRepository,
        stories: SuccessStoryRepository,
    ) -> None:
        self._profiles = profiles
        self._requests = requests
        self._stories = stories

    async def stats(self) -> AdminStats:
        total, male, female, premium, revenue = await asyncio.gather(
            self._profiles.count(),
            self._profiles.count({"biodataType": BiodataType.MALE.value}),
            self._profiles.count({"biodataType": BiodataType.FEMALE.value}),
            self._profiles.count({"premiumRequested": True}),
            self._requests.sum_amount_paid(ContactRequestStatus.APPROVED),
        )
        return AdminStats(
            totalBiodata=total,
            maleCount=male,
            femaleCount=female,
            premiumCount=premium,
            totalRevenue=revenue,
        )

    async def success_counter(self) -> SuccessCounter:
        total, boys, girls, marriages = await asyncio.gather(
            self._profiles.count(),
            self._profiles.count(_type_ignoring_case(BiodataType.MALE)),
            self._profiles.count(_type_ignoring_case(BiodataType.FEMALE)),
            self._stories.count(),
        )
        return SuccessCounter(
            totalProfiles=total,
            boysCount=boys,
            girlsCount=girls,
            marriagesCount=marriages,
        )


def get_admin_stats_aggregator() -> AdminStatsAggregator:
    db = get_db()
    return AdminStatsAggregator(
        ProfileRepository(db),
        ContactRequestRepository(db),
        SuccessStoryRepository(db),
    )


__all__ = ["AdminStatsAggregator", "get_admin_stats_aggregator"]
