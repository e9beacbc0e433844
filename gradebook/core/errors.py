import enum

from fastapi import status


class ErrorCode(str, enum.Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FILE_REQUIRED = "FILE_REQUIRED"
    LATE_SUBMISSION = "LATE_SUBMISSION"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    DUPLICATE_SUBMISSION = "DUPLICATE_SUBMISSION"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"


class AppError(Exception):
    """Base for errors that map onto an HTTP response with a structured code."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = ErrorCode.SERVER_ERROR

    def __init__(self, detail: str, code: ErrorCode = None):
        super().__init__(detail)
        self.detail = detail
        self.code = code or self.default_code


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = ErrorCode.VALIDATION_ERROR


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = ErrorCode.UNAUTHENTICATED


class InvalidToken(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.INVALID_TOKEN


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.FORBIDDEN


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = ErrorCode.NOT_FOUND


class Conflict(AppError):
    """A uniqueness rule was broken; the code names which one."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, code: ErrorCode):
        super().__init__(detail, code)


# Codes used for HTTPExceptions raised by the framework itself
STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_ERROR,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHENTICATED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    422: ErrorCode.VALIDATION_ERROR,
}


def code_for_status(status_code: int) -> ErrorCode:
    if status_code in STATUS_CODES:
        return STATUS_CODES[status_code]
    if status_code >= 500:
        return ErrorCode.SERVER_ERROR
    return ErrorCode.VALIDATION_ERROR
