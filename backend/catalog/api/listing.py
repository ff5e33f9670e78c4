from __future__ import annotations

from typing import Any, Type

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy import Select
from sqlalchemy.orm import Session

from catalog.core.config import settings
from catalog.core.schemas import PageOut
from catalog.services.pagination import OutOfRangePageError, Pager


def paginate(db: Session, stmt: Select[Any], page: int, out_cls: Type[BaseModel]) -> PageOut:
    try:
        pager = Pager.for_current_page(db, stmt, page, max_per_page=settings.page_size)
    except OutOfRangePageError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return PageOut[out_cls](
        items=[out_cls.model_validate(row) for row in pager.items],
        page=pager.page,
        pages=pager.pages,
        per_page=pager.max_per_page,
        total=pager.total,
        has_previous=pager.has_previous,
        has_next=pager.has_next,
    )
