from typing import Any, Optional

from bson import ObjectId
from fastapi import Request
from fastapi.encoders import jsonable_encoder

from ..schemas.common import ErrorResponse


def to_json(document: Any) -> Any:
    """Make a stored document JSON-safe: ObjectId as hex, datetimes as ISO-8601."""
    return jsonable_encoder(document, custom_encoder={ObjectId: str})


def fail(request: Request, error: str, message: str, details: Optional[dict] = None) -> ErrorResponse:
    req_id = getattr(request.state, "request_id", None)
    return ErrorResponse(error=error, message=message, request_id=req_id or "", details=details or {})
