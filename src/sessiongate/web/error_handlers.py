import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from sessiongate.errors import AuthenticationError

logger = logging.getLogger(__name__)


def create_json_error_response(
    status_code: int, message: str, error_type: str | None = None, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        # Same body for every rejection reason
        return create_json_error_response(
            status_code=401,
            message="Not authenticated",
            error_type="authentication_error",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return create_json_error_response(status_code=400, message=str(exc), error_type="bad_request")


async def service_unavailable_handler(_: Request, exc: Exception) -> Response:
    """Handle infrastructure failures (503, retryable)."""
    logger.error("Service unavailable: %s", exc, exc_info=exc)
    return create_json_error_response(
        status_code=503,
        message="Service temporarily unavailable, retry later.",
        error_type="service_unavailable",
        headers={"Retry-After": "1"},
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
