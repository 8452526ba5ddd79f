"""Exception handlers rendering JSON error bodies."""

import logging

from litestar import Request, Response
from litestar.exceptions import HTTPException
from litestar.status_codes import HTTP_500_INTERNAL_SERVER_ERROR

logger = logging.getLogger(__name__)


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Render HTTP exceptions as ``{"success": false, "error": ...}``."""
    status_code = exc.status_code
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    return Response(
        content={"success": False, "status_code": status_code, "error": detail},
        status_code=status_code,
        media_type="application/json",
    )


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Log unexpected exceptions and hide their details from the client."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    status_code = HTTP_500_INTERNAL_SERVER_ERROR

    return Response(
        content={"success": False, "status_code": status_code, "error": "Internal Server Error"},
        status_code=status_code,
        media_type="application/json",
    )
