"""
Failure taxonomy shared by every service function.

Services raise a ``ServiceError`` subclass for expected failures and let
anything else (driver errors, integrity errors) bubble up to their own
``except`` block, where ``failure`` turns either kind into the fields of
the uniform result envelope.
"""
import enum
import logging


class ErrorCode(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation"
    PERSISTENCE = "persistence"


# HTTP status the routers answer with for each failure kind.
STATUS_FOR_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.VALIDATION: 422,
    ErrorCode.PERSISTENCE: 500,
}


class ServiceError(Exception):
    code: ErrorCode = ErrorCode.PERSISTENCE
    message: str = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotAuthenticated(ServiceError):
    code = ErrorCode.UNAUTHENTICATED
    message = "Not authenticated"


class PostNotFound(ServiceError):
    code = ErrorCode.NOT_FOUND
    message = "Post not found"


class UserNotFound(ServiceError):
    code = ErrorCode.NOT_FOUND
    message = "User not found"


class NotPostAuthor(ServiceError):
    code = ErrorCode.FORBIDDEN
    message = "Unauthorized - no delete permission"


class InvalidContent(ServiceError):
    code = ErrorCode.VALIDATION
    message = "Content is required"


def failure(exc: Exception, fallback: str, logger: logging.Logger) -> dict:
    """
    Log *exc* and return the failure fields of a result envelope.

    Expected domain failures keep their own message; anything else is a
    persistence fault and is reported with *fallback* so driver details
    never reach the caller.
    """
    if isinstance(exc, ServiceError):
        logger.info("%s: %s", fallback, exc.message)
        return {"success": False, "error": exc.message, "code": exc.code}
    logger.exception("%s", fallback)
    return {"success": False, "error": fallback, "code": ErrorCode.PERSISTENCE}


def status_for(result, ok: int = 200) -> int:
    """HTTP status for a result envelope: *ok* on success, else by error code."""
    if result.success:
        return ok
    return STATUS_FOR_CODE.get(result.code, 500)
