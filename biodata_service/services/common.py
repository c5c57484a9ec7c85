from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Type, TypeVar

from bson import ObjectId
from pydantic import BaseModel

from ..models.identifiers import parse_object_id
from ..models.pagination import Page
from .exceptions import InvalidInputError

M = TypeVar("M", bound=BaseModel)


def to_object_id(value: Any, label: str = "id") -> ObjectId:
    try:
        return parse_object_id(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"invalid {label}") from exc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def retype_page(page: Page[dict[str, Any]], model: Type[M]) -> Page[M]:
    return Page[model](  # type: ignore[valid-type]
        data=[model(**row) for row in page.data],
        total=page.total,
        page=page.page,
        limit=page.limit,
        totalPages=page.total_pages,
    )


__all__ = ["retype_page", "to_object_id", "utcnow"]
