"""
Domain error handling for routers.

A decorator that turns domain exceptions into HTTPExceptions so every
endpoint answers with the same error body:
`{"detail": {"error": ..., "code": ..., "details": {...}}}`.

Dependencies: fastapi, pydantic, astar_backend.core.exceptions, astar_backend.observability
System role: Exception to HTTP status mapping
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from astar_backend.core.exceptions import AstarException, AuthenticationError
from astar_backend.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def error_body(message: str, code: str, details: dict | None = None) -> dict:
    return {"error": message, "code": code, "details": details or {}}


def to_http_exception(exc: AstarException) -> HTTPException:
    """Map a domain exception to an HTTPException carrying its error body."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return HTTPException(status_code=exc.status_code, detail=exc.to_dict(), headers=headers)


def handle_domain_errors(func: F) -> F:
    """
    Decorator to map service exceptions onto HTTP responses.

    - AstarException subclasses use their own status code and body
    - ValueError becomes 404 when it reports a missing resource, else 400
    - Pydantic validation errors become 422
    - Anything else is logged with its traceback and becomes 500
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except AstarException as e:
            level = logging.ERROR if e.status_code >= 500 else logging.WARNING
            log_with_context(
                logger,
                level,
                f"{func.__name__} - {e.code}",
                error=e.message,
                details=e.details,
            )
            raise to_http_exception(e)

        except PydanticValidationError as e:
            logger.warning("Pydantic validation error", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=error_body("Request validation failed", "VALIDATION_ERROR", {"errors": e.errors(include_url=False, include_context=False)}),
            )

        except ValueError as e:
            msg = str(e).lower()
            if "not found" in msg or "does not exist" in msg:
                logger.warning("Resource not found (ValueError)", extra={"error": str(e)})
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=error_body(str(e), "NOT_FOUND"),
                )
            logger.warning("Invalid request (ValueError)", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_body(str(e), "VALIDATION_ERROR"),
            )

        except Exception as e:
            log_exception_with_context(
                logger, f"Unexpected failure in {func.__name__}", e, endpoint=func.__name__
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=error_body("An internal error occurred", "INTERNAL_ERROR"),
            )

    return wrapper  # type: ignore
