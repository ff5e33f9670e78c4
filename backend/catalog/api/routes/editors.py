from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from catalog.api.forms import blank_form, handle_form, redirect_to
from catalog.api.listing import paginate
from catalog.core.auth import get_current_user
from catalog.core.database import get_db, transaction
from catalog.core.schemas import EditorForm, EditorOut, FormView, PageOut
from catalog.models import Editor, User
from catalog.repositories import EditorRepository
from catalog.security import AccessDecisionManager, deny_access_unless_granted, get_access_manager
from catalog.security.roles import ROLE_BOOK_CREATE, ROLE_BOOK_EDIT


logger = logging.getLogger(__name__)

router = APIRouter()


def _get_editor_or_404(db: Session, editor_id: int) -> Editor:
    editor = EditorRepository(db).find(editor_id)
    if not editor:
        raise HTTPException(status_code=404, detail="Editor not found.")
    return editor


@router.get("", response_model=PageOut[EditorOut], name="admin_editor_index")
def list_editors(
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
) -> PageOut[EditorOut]:
    return paginate(db, EditorRepository(db).ordered_by_name(), page, EditorOut)


@router.get("/new", response_model=FormView)
def new_editor_form(
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
) -> FormView:
    deny_access_unless_granted(access, user, ROLE_BOOK_CREATE)
    return blank_form(EditorForm)


@router.post("/new", response_model=FormView)
def create_editor(
    request: Request,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
):
    deny_access_unless_granted(access, user, ROLE_BOOK_CREATE)
    form, view = handle_form(EditorForm, payload)
    if form is None:
        return view
    editor = Editor(name=form.name)
    with transaction(db):
        EditorRepository(db).add(editor)
    logger.info("Editor %s created by user %s", editor.id, user.id)
    return redirect_to(request, "admin_editor_index")


@router.get("/{editor_id}/edit", response_model=FormView)
def edit_editor_form(
    editor_id: int,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
) -> FormView:
    deny_access_unless_granted(access, user, ROLE_BOOK_EDIT)
    editor = _get_editor_or_404(db, editor_id)
    return blank_form(EditorForm, {"name": editor.name})


@router.post("/{editor_id}/edit", response_model=FormView)
def update_editor(
    request: Request,
    editor_id: int,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
):
    deny_access_unless_granted(access, user, ROLE_BOOK_EDIT)
    editor = _get_editor_or_404(db, editor_id)
    form, view = handle_form(EditorForm, payload)
    if form is None:
        return view
    with transaction(db):
        editor.name = form.name
    logger.info("Editor %s edited by user %s", editor.id, user.id)
    return redirect_to(request, "admin_editor_index")


@router.get("/{editor_id}", response_model=EditorOut, name="admin_editor_show")
def show_editor(editor_id: int, db: Session = Depends(get_db)) -> EditorOut:
    return EditorOut.model_validate(_get_editor_or_404(db, editor_id))
