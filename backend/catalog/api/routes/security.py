from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from starlette.responses import JSONResponse

from catalog.core.auth import create_access_token, hash_password, needs_rehash, verify_password
from catalog.core.config import settings
from catalog.core.database import get_db
from catalog.core.schemas import LoginForm, LoginResponse, LoginView, UserOut
from catalog.models import User
from catalog.repositories import UserRepository
from catalog.security.events import InteractiveLoginEvent, dispatch_interactive_login
from catalog.security.exceptions import LogoutNotInterceptedError


logger = logging.getLogger(__name__)

router = APIRouter()

_INVALID_CREDENTIALS = "Invalid credentials."


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        roles=user.get_roles(),
        last_connected_at=user.last_connected_at,
    )


@router.get("/login", response_model=LoginView, name="app_login")
def login_form(request: Request) -> LoginView:
    return LoginView(last_username=request.cookies.get(settings.last_username_cookie_name))


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginForm, db: Session = Depends(get_db)):
    repository = UserRepository(db)
    user = repository.find_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password):
        logger.info("Failed login for %s", payload.email)
        response = JSONResponse(
            status_code=401,
            content=LoginView(last_username=payload.email, error=_INVALID_CREDENTIALS).model_dump(),
        )
        response.set_cookie(settings.last_username_cookie_name, payload.email, httponly=True, samesite="lax")
        return response

    if needs_rehash(user.password):
        repository.upgrade_password(user, hash_password(payload.password))

    dispatch_interactive_login(db, InteractiveLoginEvent(user=user))

    token = create_access_token(user)
    body = LoginResponse(
        access_token=token,
        expires_in=settings.jwt_ttl_seconds,
        user=to_user_out(user),
    )
    response = JSONResponse(content=body.model_dump(mode="json"))
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.jwt_ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    response.delete_cookie(settings.last_username_cookie_name)
    logger.info("User %s logged in", user.id)
    return response


# 实际由 LogoutMiddleware 拦截，执行到这里说明中间件未安装
@router.get("/logout", name="app_logout")
def logout() -> None:
    raise LogoutNotInterceptedError(
        "This route is intercepted by LogoutMiddleware; it must never run."
    )
