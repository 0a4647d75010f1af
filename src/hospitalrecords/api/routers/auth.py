"""
Session endpoints: open, inspect and close a login session.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from ..deps import AuthServiceDep, CurrentUserDep
from ..errors import UnauthorizedError
from ..schemas.common import ErrorResponse, LoginRequest, SessionResponse

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/login",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Open a session with an API key",
)
async def login(request: Request, payload: LoginRequest, auth_service: AuthServiceDep):
    try:
        user_id = auth_service.open_session(request.session, payload.apiKey)
    except HTTPException as e:
        raise UnauthorizedError(str(e.detail))

    logger.info(f"Session opened for user {user_id}")
    return SessionResponse(message="Logged in", user=user_id)


@router.post("/logout", response_model=SessionResponse, summary="Close the current session")
async def logout(request: Request, auth_service: AuthServiceDep):
    user_id = getattr(request.state, "user_id", None)
    auth_service.close_session(request.session)
    if user_id:
        logger.info(f"Session closed for user {user_id}")
    return SessionResponse(message="Logged out")


@router.get(
    "/me",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Return the logged-in user",
)
async def me(user_id: CurrentUserDep):
    return SessionResponse(message="OK", user=user_id)
