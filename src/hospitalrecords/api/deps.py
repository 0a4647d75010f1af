"""FastAPI dependency providers."""

import json
from typing import Annotated, Any, Dict

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError

from ..adapters.db.mongo.store import DocumentStore, get_document_store
from ..core.auth import AuthService, get_auth_service
from .errors import UnauthorizedError


def get_current_user(request: Request) -> str:
    """
    Admit the request only when a previous login left an identity in the session.

    ``SessionIdentityMiddleware`` copies the session's user id to
    ``request.state``; a missing identity short-circuits with 401 before any
    store access.
    """
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise UnauthorizedError(
            "Authentication required for this endpoint",
            details={"path": request.url.path, "method": request.method},
        )
    return user_id


async def get_json_payload(request: Request) -> Dict[str, Any]:
    """
    The request body as a JSON object; an empty body reads as ``{}``.

    Routes list this after the session gate, so an anonymous write is refused
    before its body is parsed.
    """
    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": {}, "ctx": {"error": str(e)}}]
        )
    if not isinstance(payload, dict):
        raise RequestValidationError(
            [{"type": "dict_type", "loc": ("body",), "msg": "Input should be a valid dictionary", "input": payload}]
        )
    return payload


# Dependency annotations for FastAPI
DocumentStoreDep = Annotated[DocumentStore, Depends(get_document_store)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentUserDep = Annotated[str, Depends(get_current_user)]
JSONPayloadDep = Annotated[Dict[str, Any], Depends(get_json_payload)]
