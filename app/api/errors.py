"""Error envelope shared by the API routers"""
import logging

from fastapi import HTTPException

from service.errors import DependencyError, DomainValidationError

logger = logging.getLogger(__name__)


def http_error(status_code: int, code: str, message: str, trace_id: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "code": code,
                "message": message,
                "trace_id": trace_id
            }
        }
    )


def to_http_error(e: Exception, trace_id: str) -> HTTPException:
    """Map a service exception to an HTTP error with the standard envelope"""
    if isinstance(e, DomainValidationError):
        logger.warning("Domain validation error", extra={
            "trace_id": trace_id,
            "error_code": e.code,
            "error_message": e.message
        })
        return http_error(422, e.code, e.message, trace_id)

    if isinstance(e, DependencyError):
        logger.error("Dependency error", extra={
            "trace_id": trace_id,
            "error_code": e.code,
            "error_message": e.message
        })
        return http_error(503, e.code, e.message, trace_id)

    logger.error("Unexpected error", extra={
        "trace_id": trace_id,
        "error_type": type(e).__name__,
        "error_message": str(e)
    })
    return http_error(500, "INTERNAL_ERROR", "Internal server error", trace_id)
