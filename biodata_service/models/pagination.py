import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100


class Page(BaseModel, Generic[T]):
    """One slice of a filtered listing together with its totals."""

    model_config = ConfigDict(populate_by_name=True)

    data: List[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT
    total_pages: int = Field(default=0, alias="totalPages")


def total_pages(total: int, limit: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / limit)


__all__ = ["DEFAULT_PAGE_LIMIT", "MAX_PAGE_LIMIT", "Page", "total_pages"]
