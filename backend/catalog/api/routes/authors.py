from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from catalog.api.forms import blank_form, handle_form, redirect_to
from catalog.api.listing import paginate
from catalog.core.auth import get_current_user
from catalog.core.database import get_db, transaction
from catalog.core.schemas import AuthorForm, AuthorOut, FormView, PageOut
from catalog.models import Author, User
from catalog.repositories import AuthorRepository
from catalog.security import AccessDecisionManager, deny_access_unless_granted, get_access_manager
from catalog.security.roles import IS_AUTHENTICATED, ROLE_BOOK_EDIT


logger = logging.getLogger(__name__)

router = APIRouter()


def _get_author_or_404(db: Session, author_id: int) -> Author:
    author = AuthorRepository(db).find(author_id)
    if not author:
        raise HTTPException(status_code=404, detail="Author not found.")
    return author


def _initial(author: Author) -> Dict[str, Any]:
    return {
        "name": author.name,
        "date_of_birth": author.date_of_birth,
        "date_of_death": author.date_of_death,
        "nationality": author.nationality,
    }


# 作者列表：按出生日期排序，可选 start / end 过滤
@router.get("", response_model=PageOut[AuthorOut], name="admin_author_index")
def list_authors(
    page: int = Query(1, ge=1),
    start: date | None = Query(None),
    end: date | None = Query(None),
    db: Session = Depends(get_db),
) -> PageOut[AuthorOut]:
    stmt = AuthorRepository(db).find_by_date_of_birth(start=start, end=end)
    return paginate(db, stmt, page, AuthorOut)


@router.get("/new", response_model=FormView)
def new_author_form(
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
) -> FormView:
    deny_access_unless_granted(access, user, IS_AUTHENTICATED)
    return blank_form(AuthorForm)


@router.post("/new", response_model=FormView)
def create_author(
    request: Request,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
):
    deny_access_unless_granted(access, user, IS_AUTHENTICATED)
    form, view = handle_form(AuthorForm, payload)
    if form is None:
        return view
    author = Author(**form.model_dump())
    with transaction(db):
        AuthorRepository(db).add(author)
    logger.info("Author %s created by user %s", author.id, user.id)
    return redirect_to(request, "admin_author_show", author_id=author.id)


@router.get("/{author_id}/edit", response_model=FormView)
def edit_author_form(
    author_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
) -> FormView:
    deny_access_unless_granted(access, user, IS_AUTHENTICATED)
    author = _get_author_or_404(db, author_id)
    deny_access_unless_granted(access, user, ROLE_BOOK_EDIT)
    return blank_form(AuthorForm, _initial(author))


@router.post("/{author_id}/edit", response_model=FormView)
def update_author(
    request: Request,
    author_id: int,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
):
    deny_access_unless_granted(access, user, IS_AUTHENTICATED)
    author = _get_author_or_404(db, author_id)
    deny_access_unless_granted(access, user, ROLE_BOOK_EDIT)
    form, view = handle_form(AuthorForm, payload)
    if form is None:
        return view
    with transaction(db):
        for key, value in form.model_dump().items():
            setattr(author, key, value)
    logger.info("Author %s edited by user %s", author.id, user.id)
    return redirect_to(request, "admin_author_show", author_id=author.id)


@router.get("/{author_id}", response_model=AuthorOut, name="admin_author_show")
def show_author(author_id: int, db: Session = Depends(get_db)) -> AuthorOut:
    return AuthorOut.model_validate(_get_author_or_404(db, author_id))
