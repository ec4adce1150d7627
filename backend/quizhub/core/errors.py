"""Error taxonomy, handlers and consistent error response format."""

import uuid
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from quizhub.core.logging import get_logger

logger = get_logger(__name__)

BAD_REQUEST = "BadRequestError"
AUTHORIZATION_REQUIRED = "AuthorizationRequiredError"
FORBIDDEN = "ForbiddenError"
NOT_FOUND = "NotFoundError"
CONFLICT = "ConflictError"
INTERNAL_SERVER_ERROR = "InternalServerError"

KIND_STATUS: dict[str, int] = {
    BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    AUTHORIZATION_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    FORBIDDEN: status.HTTP_403_FORBIDDEN,
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CONFLICT: status.HTTP_409_CONFLICT,
    INTERNAL_SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Error type name -> taxonomy kind. Anything not listed is an internal error.
ERROR_KINDS: dict[str, str] = {
    "ValidatorError": BAD_REQUEST,
    "ValidationError": BAD_REQUEST,
    "RequestValidationError": BAD_REQUEST,
    "ExamQuestionAnswerTypeError": BAD_REQUEST,
    "AuthorizationRequiredError": AUTHORIZATION_REQUIRED,
    "AuthorizationFailedError": FORBIDDEN,
    "UserWrongCredentialsError": FORBIDDEN,
    "CategoryNotFoundError": NOT_FOUND,
    "QuestionNotFoundError": NOT_FOUND,
    "ExamNotFoundError": NOT_FOUND,
    "UserNotFoundError": NOT_FOUND,
    "UserEmailNotFoundError": NOT_FOUND,
    "ExamQuestionNumberNotFoundError": NOT_FOUND,
    "CategoryNameTakenError": CONFLICT,
    "QuestionTitleTakenError": CONFLICT,
    "UserEmailTakenError": CONFLICT,
    "ExamTakenError": CONFLICT,
    "ExamCompletedError": CONFLICT,
    "CategoryNotApprovedError": CONFLICT,
    "CategoryWithoutApprovedQuestionsError": CONFLICT,
    "CategoryRatedAlreadyError": CONFLICT,
    "QuestionRatedAlreadyError": CONFLICT,
}


def error_kind(error_name: str) -> str:
    """Map an error type name to its taxonomy kind."""
    return ERROR_KINDS.get(error_name, INTERNAL_SERVER_ERROR)


def status_for_error(error_name: str) -> int:
    """HTTP status code for an error type name."""
    return KIND_STATUS[error_kind(error_name)]


class ErrorResponse(BaseModel):
    """Error response envelope.

    Format: {error_code, message, details, request_id}
    """

    error_code: str
    message: str
    details: Any | None = None
    request_id: str | None = None


def get_request_id(request: Request) -> str:
    """Get request ID from request state or generate new one."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return str(uuid.uuid4())


def _validation_details(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "issue": error.get("msg", "Validation error"),
            "type": error.get("type", "validation_error"),
        }
        for error in errors
    ]


async def validation_exception_handler(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """Handle request and schema validation errors (400)."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error_code="ValidatorError",
            message="Invalid request data",
            details=_validation_details(exc.errors()),
            request_id=get_request_id(request),
        ).model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions, including application errors."""
    from quizhub.core.app_exceptions import AppError

    request_id = get_request_id(request)

    if isinstance(exc, AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=exc.code,
                message=exc.message,
                details=exc.details,
                request_id=request_id,
            ).model_dump(),
        )

    details = None
    code = "HTTP_ERROR"
    if isinstance(exc.detail, dict):
        details = exc.detail.copy()
        message = details.pop("message", "An error occurred")
    elif isinstance(exc.detail, str):
        message = exc.detail
    else:
        message = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error_code=code,
            message=message,
            details=details,
            request_id=request_id,
        ).model_dump(),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions (500)."""
    from quizhub.core.config import settings

    request_id = get_request_id(request)
    logger.error(
        "Unhandled exception",
        extra={"request_id": request_id, "path": request.url.path},
        exc_info=exc,
    )

    # In production, don't expose internal error details
    if settings.ENV == "prod":
        message = "An internal server error occurred"
        details = None
    else:
        message = str(exc)
        details = {"type": type(exc).__name__}

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error_code=INTERNAL_SERVER_ERROR,
            message=message,
            details=details,
            request_id=request_id,
        ).model_dump(),
    )
