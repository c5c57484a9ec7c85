"""Shared page/limit/search contract for every multi-record listing."""

from __future__ import annotations

import re
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional

from ..models.pagination import Page, total_pages
from ..repositories.base import MongoRepository, SortSpec
from ..repositories.profile import ProfileRepository
from .exceptions import InvalidInputError

Rows = list[dict[str, Any]]
Enricher = Callable[[Rows], Awaitable[Rows]]


def search_filter(search: Optional[str], fields: Iterable[str]) -> dict[str, Any]:
    """Case-insensitive substring match over ``fields``; blank search matches everything."""

    text = (search or "").strip()
    if not text:
        return {}
    pattern = re.escape(text)
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}


class PaginatedQueryEngine:
    """Counts and slices a collection under one filter.

    The count and the slice are two separate store reads, so under
    concurrent writes ``total`` may drift from ``data`` by the records
    written in between.
    """

    async def paginate(
        self,
        repository: MongoRepository,
        *,
        page: int = 1,
        limit: int = 10,
        query: Optional[Mapping[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        enrich: Optional[Enricher] = None,
    ) -> Page[dict[str, Any]]:
        if page < 1:
            raise InvalidInputError("page must be >= 1")
        if limit < 1:
            raise InvalidInputError("limit must be >= 1")

        skip = (page - 1) * limit
        total = await repository.count(query)
        rows: Rows = []
        if skip < total:
            rows = await repository.find_slice(query, skip=skip, limit=limit, sort=sort)
        if enrich is not None and rows:
            rows = await enrich(rows)

        return Page[dict[str, Any]](
            data=rows,
            total=total,
            page=page,
            limit=limit,
            totalPages=total_pages(total, limit),
        )


def premium_flag_enricher(profiles: ProfileRepository) -> Enricher:
    """Attach ``premiumRequested`` to user rows from the profile owned by each email.

    A user without a profile gets ``False``; the reference is soft and may dangle.
    """

    async def _enrich(rows: Rows) -> Rows:
        by_email = await profiles.find_by_contact_emails(row.get("email") for row in rows)
        enriched: Rows = []
        for row in rows:
            profile = by_email.get(row.get("email")) or {}
            enriched.append({**row, "premiumRequested": profile.get("premiumRequested") is True})
        return enriched

    return _enrich


__all__ = [
    "PaginatedQueryEngine",
    "premium_flag_enricher",
    "search_filter",
]
