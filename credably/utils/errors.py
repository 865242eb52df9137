"""
Error types shared by routes and services.

Routes raise APIError (or plain HTTPException) and the handlers registered in
main.py render both as {"error": ..., "details": ...} JSON bodies.
"""
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse


class APIError(Exception):
    def __init__(
        self,
        status_code: int,
        error: str,
        details: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


class RecordValidationError(ValueError):
    """Education or certification input failed validation."""

    def __init__(self, message: str, issues=None):
        super().__init__(message)
        self.issues = issues or []


class ProviderAPIError(Exception):
    """Non-2xx response from a social/developer platform API."""

    def __init__(self, platform: str, status_code: int, message: str):
        super().__init__(f"{platform} API error ({status_code}): {message}")
        self.platform = platform
        self.status_code = status_code


class AccountNotConnectedError(Exception):
    def __init__(self, platform: str):
        super().__init__(f"{platform} account not connected")
        self.platform = platform


class AIConfigurationError(RuntimeError):
    pass


class AIAnalysisError(RuntimeError):
    pass


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def record_validation_error_handler(request: Request, exc: RecordValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc), "details": exc.issues})
