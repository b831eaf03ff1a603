from fastapi import HTTPException, status
from typing import Any, Dict, Optional

from grading_backend.errors import CoreError, ErrorKind

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthorized"

class InternalServerException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        self.detail = detail or "Internal server error"

ERROR_KIND_TO_EXCEPTION = {
    ErrorKind.SESSION_NOT_FOUND: UnauthorizedException,
    ErrorKind.SESSION_EXPIRED: UnauthorizedException,
    ErrorKind.SESSION_USER_NOT_FOUND: UnauthorizedException,
    ErrorKind.FORBIDDEN: ForbiddenException,
    ErrorKind.NOT_FOUND: NotFoundException,
    ErrorKind.INVALID_REQUEST: BadRequestException,
    ErrorKind.STORAGE: InternalServerException,
}

if set(ERROR_KIND_TO_EXCEPTION) != set(ErrorKind):
    raise RuntimeError("Every error kind needs an HTTP exception")

def error_body(error: CoreError) -> Dict[str, str]:
    return {"code": error.code, "message": error.message}

def to_http_exception(error: CoreError) -> HTTPException:
    return ERROR_KIND_TO_EXCEPTION[error.kind](detail=error_body(error))
