from fastapi import APIRouter, Depends, Query

from ..integrations.identity import VerifiedIdentity
from ..models.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, Page
from ..models.profile import PremiumRequestItem
from ..models.stats import AdminStats, SuccessCounter
from ..services.admin_stats import AdminStatsAggregator, get_admin_stats_aggregator
from ..services.premium_workflow import PremiumWorkflow, get_premium_workflow
from .deps import require_identity

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/approvedPremium", response_model=Page[PremiumRequestItem])
async def premium_requests(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    _identity: VerifiedIdentity = Depends(require_identity),
    workflow: PremiumWorkflow = Depends(get_premium_workflow),
):
    return await workflow.list_premium_requests(page=page, limit=limit)


@router.get("/admin-dashboard/stats", response_model=AdminStats)
async def admin_stats(
    _identity: VerifiedIdentity = Depends(require_identity),
    aggregator: AdminStatsAggregator = Depends(get_admin_stats_aggregator),
):
    return await aggregator.stats()


@router.get("/api/success-counter", response_model=SuccessCounter)
async def success_counter(aggregator: AdminStatsAggregator = Depends(get_admin_stats_aggregator)):
    return await aggregator.success_counter()


__all__ = ["router"]
