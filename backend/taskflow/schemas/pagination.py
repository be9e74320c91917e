"""Page-number pagination in the ``{notifications, pagination}`` envelope.

``NotificationListPage`` plugs into fastapi-pagination: routes that declare
it as their ``response_model`` get ``page``/``limit`` query parameters
through ``add_pagination`` and build the envelope with
``taskflow.db.pagination.paginate``.
"""

from __future__ import annotations

from collections.abc import Sequence
from math import ceil
from typing import Any, Generic, TypeVar

from fastapi import Query
from fastapi_pagination.bases import AbstractPage, AbstractParams, RawParams
from pydantic import BaseModel
from sqlmodel import SQLModel

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PageNumberParams(BaseModel, AbstractParams):
    page: int = Query(1, ge=1, description="Page number")
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size")

    def to_raw_params(self) -> RawParams:
        return RawParams(limit=self.limit, offset=(self.page - 1) * self.limit)


class PaginationMeta(SQLModel):
    page: int
    limit: int
    total: int
    pages: int


class NotificationListPage(AbstractPage[T], Generic[T]):
    notifications: Sequence[T]
    pagination: PaginationMeta

    __params_type__ = PageNumberParams

    @classmethod
    def create(
        cls,
        items: Sequence[T],
        params: AbstractParams,
        **kwargs: Any,
    ) -> NotificationListPage[T]:
        raw = params.to_raw_params().as_limit_offset()
        limit = raw.limit or DEFAULT_PAGE_SIZE
        total = kwargs.get("total") or 0
        return cls(
            notifications=items,
            pagination=PaginationMeta(
                page=(raw.offset or 0) // limit + 1,
                limit=limit,
                total=total,
                pages=ceil(total / limit) if total else 0,
            ),
        )
