"""
Error taxonomy of the session and authorization core.

Every failure the core reports belongs to exactly one ``ErrorKind``. The HTTP
boundary (``grading_backend.api.exceptions``) maps each kind to a status code;
nothing inside the core knows about HTTP.

Authorization denials inside the evaluator are plain return values
(``Decision.DENY``). ``ForbiddenError`` is only raised by gated facade calls.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_EXPIRED = "session_expired"
    SESSION_USER_NOT_FOUND = "session_user_not_found"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_REQUEST = "invalid_request"
    STORAGE = "storage"


class CoreError(Exception):
    """Base class for all errors raised by the core."""

    kind: ErrorKind
    code: str = "ERR_INTERNAL_ERROR"
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None, *, detail: Any = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class SessionNotFoundError(CoreError):
    kind = ErrorKind.SESSION_NOT_FOUND
    code = "ERR_SESSION_NOT_FOUND"
    default_message = "Session not found"


class SessionExpiredError(CoreError):
    kind = ErrorKind.SESSION_EXPIRED
    code = "ERR_SESSION_EXPIRED"
    default_message = "Session expired"


class SessionUserNotFoundError(CoreError):
    kind = ErrorKind.SESSION_USER_NOT_FOUND
    code = "ERR_SESSION_USER_NOT_FOUND"
    default_message = "Session user not found"


class ForbiddenError(CoreError):
    kind = ErrorKind.FORBIDDEN
    code = "ERR_FORBIDDEN"
    default_message = "Not authorized to perform this action"


class NotFoundError(CoreError):
    kind = ErrorKind.NOT_FOUND
    code = "ERR_NOT_FOUND"
    default_message = "Requested resource not found"


class InvalidRequestError(CoreError):
    kind = ErrorKind.INVALID_REQUEST
    code = "ERR_INVALID_DATA"
    default_message = "Invalid data"


class StorageError(CoreError):
    kind = ErrorKind.STORAGE
    code = "ERR_DATABASE_CONNECTION"
    default_message = "Database error"


AUTHENTICATION_ERRORS = (SessionNotFoundError, SessionExpiredError, SessionUserNotFoundError)
