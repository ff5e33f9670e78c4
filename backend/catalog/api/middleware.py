from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from catalog.core.config import settings


logger = logging.getLogger(__name__)


class LogoutMiddleware(BaseHTTPMiddleware):
    """Ends the session on ``logout_path`` before any route runs.

    The auth cookie is cleared and the client is sent to ``target_path``.
    Bearer tokens are stateless and simply expire.
    """

    def __init__(self, app: ASGIApp, logout_path: str = "/logout", target_path: str = "/login") -> None:
        super().__init__(app)
        self.logout_path = logout_path
        self.target_path = target_path

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path != self.logout_path or request.method not in ("GET", "POST"):
            return await call_next(request)
        response = RedirectResponse(url=self.target_path, status_code=303)
        response.delete_cookie(settings.auth_cookie_name)
        logger.info("Session terminated")
        return response
