"""Error taxonomy and the JSON envelope every failure is rendered with."""
from typing import List, Optional

from fastapi import HTTPException


def error_body(message: str, errors: Optional[list] = None, error: Optional[str] = None) -> dict:
    body = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    if error is not None:
        body["error"] = error
    return body


class ApiError(HTTPException):
    status_code = 500
    message = "Something went wrong on the server"

    def __init__(self, message: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=message or self.message)


class ValidationFailed(ApiError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: List[dict], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors


class BadRequest(ApiError):
    status_code = 400
    message = "Bad request"


class InjectionDetected(ApiError):
    status_code = 400
    message = "Potentially dangerous request"


class Unauthenticated(ApiError):
    status_code = 401
    message = "Invalid token"


class Forbidden(ApiError):
    status_code = 403
    message = "Insufficient permissions"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class Conflict(ApiError):
    status_code = 409
    message = "Resource already exists"


class UnsupportedContentType(ApiError):
    status_code = 415
    message = "Unsupported content type"
