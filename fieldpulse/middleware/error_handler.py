"""
Global error handling middleware.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from fieldpulse.domain.errors import ErrorKind, FieldPulseError
from fieldpulse.infrastructure.observation_store_client import StoreClientError


logger = logging.getLogger(__name__)


ERROR_STATUS_CODES = {
    ErrorKind.INSUFFICIENT_DATA: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorKind.INVARIANT_VIOLATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.OUT_OF_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches unhandled exceptions and returns consistent error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        """
        Process the request and handle any exceptions.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response object
        """
        try:
            response = await call_next(request)
            return response

        except FieldPulseError as e:
            # Typed core errors carry kind and offending field
            logger.warning(
                f"{e.kind.value}: {e.message}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error_kind": e.kind.value,
                }
            )
            return JSONResponse(
                status_code=ERROR_STATUS_CODES.get(e.kind, status.HTTP_400_BAD_REQUEST),
                content=e.to_dict(),
            )

        except StoreClientError as e:
            logger.error(
                f"Store error: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": e.status_code,
                }
            )
            # Pass through the original status code from the store
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "error": "store_error",
                    "field": None,
                    "detail": e.message,
                }
            )

        except ValueError as e:
            # Log validation errors
            logger.warning(
                f"Validation error: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "error": "invalid_request",
                    "field": None,
                    "detail": str(e),
                }
            )

        except Exception as e:
            # Log unexpected errors
            logger.exception(
                f"Unhandled exception: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "internal_error",
                    "field": None,
                    "detail": "An unexpected error occurred",
                }
            )
