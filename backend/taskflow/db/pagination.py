from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from fastapi_pagination.ext.sqlmodel import paginate as _paginate
from sqlmodel import Session
from sqlmodel.sql.expression import SelectOfScalar


def paginate(
    session: Session,
    statement: SelectOfScalar[Any],
    *,
    transformer: Callable[[Sequence[Any]], Sequence[Any]] | None = None,
) -> Any:
    """Run ``statement`` for the current page; page type and params come from the route."""
    return _paginate(session, statement, transformer=transformer)
