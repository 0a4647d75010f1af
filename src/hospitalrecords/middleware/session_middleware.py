"""
Session identity middleware - attaches the logged-in identity to the request.

Runs inside Starlette's ``SessionMiddleware``. It never rejects a request;
mutating routes enforce the identity through the ``get_current_user``
dependency, read routes ignore it.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from ..core.auth import AuthService
import logging

logger = logging.getLogger(__name__)


class SessionIdentityMiddleware(BaseHTTPMiddleware):
    """Copy the session's user id (or None) to ``request.state.user_id``."""

    async def dispatch(self, request: Request, call_next):
        session = request.scope.get("session") or {}
        user_id = AuthService.identity_from_session(session)
        request.state.user_id = user_id

        if user_id:
            logger.debug(f"Session user {user_id} accessing {request.method} {request.url.path}")

        return await call_next(request)
