from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from catalog.api.forms import add_error, blank_form, handle_form, redirect_to
from catalog.core.auth import get_current_user, hash_password
from catalog.core.database import get_db, transaction
from catalog.core.schemas import FormView, RegistrationForm
from catalog.models import User
from catalog.repositories import UserRepository
from catalog.security import AccessDecisionManager, deny_access_unless_granted, get_access_manager
from catalog.security.roles import ROLE_ADMIN


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/new", response_model=FormView, name="admin_user_new")
def new_user_form(
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
) -> FormView:
    deny_access_unless_granted(access, user, ROLE_ADMIN)
    return blank_form(RegistrationForm)


@router.post("/new", response_model=FormView)
def register_user(
    request: Request,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_current_user),
    access: AccessDecisionManager = Depends(get_access_manager),
):
    deny_access_unless_granted(access, user, ROLE_ADMIN)
    form, view = handle_form(RegistrationForm, payload)
    if form is None:
        return view
    repository = UserRepository(db)
    if repository.find_by_email(form.email) is not None:
        return add_error(view, "email", "There is already an account with this email.")

    account = User(
        email=form.email.lower(),
        roles=form.roles,
        password=hash_password(form.plain_password),
    )
    with transaction(db):
        repository.add(account)
    logger.info("User %s registered by admin %s", account.id, user.id)
    return redirect_to(request, "admin_user_new")
