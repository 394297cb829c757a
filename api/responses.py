"""
Response envelope.

Every endpoint answers with {"status", "message", "data"}.
"""

from http import HTTPStatus
from typing import Any, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ecom.services import AuthResult, AuthStatus

HTTP_422 = HTTPStatus.UNPROCESSABLE_ENTITY.value

# RECORD_NOT_FOUND is answered with 200.
STATUS_CODES = {
    AuthStatus.SUCCESS: status.HTTP_200_OK,
    AuthStatus.VALIDATION_ERROR: HTTP_422,
    AuthStatus.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    AuthStatus.CONFLICT: status.HTTP_409_CONFLICT,
    AuthStatus.RECORD_NOT_FOUND: status.HTTP_200_OK,
    AuthStatus.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    AuthStatus.INTERNAL_SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiResponse(BaseModel):
    """Envelope shared by all endpoints."""
    status: str
    message: str = ""
    data: Optional[Any] = None


def envelope(
    status_code: int,
    status_name: str,
    message: str = "",
    data: Any = None,
    headers: Optional[dict] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status_name, "message": message, "data": data},
        headers=headers
    )


def result_response(result: AuthResult) -> JSONResponse:
    """Convert a service result to its HTTP response."""
    return envelope(
        status_code=STATUS_CODES[result.status],
        status_name=result.status.value,
        message=result.message,
        data=result.data
    )


def status_name_for(status_code: int) -> str:
    """Envelope status for a bare HTTP code, e.g. 401 -> "UNAUTHORIZED"."""
    if status_code == HTTP_422:
        return AuthStatus.VALIDATION_ERROR.value
    try:
        return HTTPStatus(status_code).name
    except ValueError:
        return "FAILURE"
