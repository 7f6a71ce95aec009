"""List response envelope used by record listing endpoints."""


import math
from typing import Generic, TypeVar

from pydantic import BaseModel

from contractdesk.core.pagination import PageMeta, PaginationParams

T = TypeVar("T")


class ListResponse(BaseModel, Generic[T]):
    """Paginated list envelope: `{ data: [...], meta: {...} }`"""

    data: list[T]
    meta: PageMeta


def paginated(items: list, total: int, paging: PaginationParams) -> dict:
    """Build the dict a ListResponse route returns."""
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": paging.page,
            "limit": paging.limit,
            "pages": math.ceil(total / paging.limit) if total else 0,
        },
    }
