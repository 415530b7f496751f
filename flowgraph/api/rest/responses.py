"""
Response envelopes for the REST API.

Successful responses are wrapped as ``{success, message, data, timestamp}``;
errors as ``{success: false, error: {code, message, statusCode, details?},
timestamp, path, method}``.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class ApiResponse(BaseModel):
    """Success response envelope."""

    success: bool = True
    message: str = "Success"
    data: Optional[Any] = None
    timestamp: str = Field(default_factory=utc_timestamp)

    @classmethod
    def ok(cls, data: Any = None, message: str = "Success") -> "ApiResponse":
        """
        Build a success envelope.

        ``data`` is left unset when None so it is omitted from the
        serialized response.
        """
        fields = {"success": True, "message": message, "timestamp": utc_timestamp()}
        if data is not None:
            fields["data"] = data
        return cls(**fields)


class ErrorDetail(BaseModel):
    code: str
    message: str
    statusCode: int
    details: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Error response envelope."""

    success: bool = False
    error: ErrorDetail
    timestamp: str = Field(default_factory=utc_timestamp)
    path: str
    method: str


def error_response(request: Request, status_code: int, code: str, message: str,
                   details: Optional[dict[str, Any]] = None) -> JSONResponse:
    """Render an error envelope for a request."""
    envelope = ErrorResponse(
        error=ErrorDetail(code=code, message=message, statusCode=status_code, details=details or None),
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(exclude_none=True),
    )
