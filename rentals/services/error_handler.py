"""
Error handling service for consistent error response formatting and logging.
Every error body carries a string message, an error code and the request id.
"""

from typing import Dict, Any, Optional, List
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from rentals.utils.exceptions import APIException, StorageError
from datetime import datetime, timezone
import logging
import uuid

logger = logging.getLogger(__name__)


class ErrorHandlerService:
    """
    Service for handling and formatting errors consistently across the application.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Format error response in a consistent structure.

        Args:
            error_code: Error code identifier
            message: Human-readable error message
            details: Optional list of detailed error information
            request_id: Optional request identifier for tracking

        Returns:
            Formatted error response dictionary
        """
        response = {
            "error": message,
            "code": error_code,
            "timestamp": ErrorHandlerService._get_current_timestamp(),
        }

        if details:
            response["details"] = details

        if request_id:
            response["request_id"] = request_id

        return response

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle custom API exceptions with structured response."""
        request_id = ErrorHandlerService._get_request_id(request)

        log = logger.error if exception.status_code >= 500 else logger.warning
        log(
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code=exception.error_code or "API_ERROR",
            message=exception.detail,
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: PydanticValidationError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request validation errors as 400 with field details.

        Args:
            exception: Pydantic or FastAPI request validation error
            request: Optional FastAPI request object

        Returns:
            JSON response with validation error details
        """
        request_id = ErrorHandlerService._get_request_id(request)

        validation_details = []
        for error in exception.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            validation_details.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning(
            f"Validation Error [{request_id}]: {len(validation_details)} field errors",
            extra={
                "error_count": len(validation_details),
                "request_id": request_id,
                "path": request.url.path if request else None,
                "validation_errors": validation_details
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="VALIDATION_ERROR",
            message="Request validation failed",
            details=validation_details,
            request_id=request_id
        )

        return JSONResponse(status_code=400, content=error_response)

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle database errors as an opaque storage failure.
        The driver message is logged, never returned.
        """
        request_id = ErrorHandlerService._get_request_id(request)
        storage_error = StorageError()

        logger.error(
            f"Database Error [{request_id}]: {storage_error.error_code} - {str(exception)}",
            extra={
                "error_code": storage_error.error_code,
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__
            },
            exc_info=exception
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code=storage_error.error_code,
            message=storage_error.detail,
            request_id=request_id
        )

        return JSONResponse(status_code=storage_error.status_code, content=error_response)

    @staticmethod
    def handle_http_exception(
        exception: HTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle framework HTTP exceptions such as unknown routes."""
        request_id = ErrorHandlerService._get_request_id(request)

        logger.warning(
            f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}",
            extra={
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code=f"HTTP_{exception.status_code}",
            message=str(exception.detail),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle unexpected errors with an opaque 500 response."""
        request_id = ErrorHandlerService._get_request_id(request)

        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {str(exception)}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__,
            },
            exc_info=exception
        )

        error_response = ErrorHandlerService.format_error_response(
            error_code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred. Please try again later.",
            request_id=request_id
        )

        return JSONResponse(status_code=500, content=error_response)

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Reuse the id assigned by the request context middleware when present."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return ErrorHandlerService._generate_request_id()

    @staticmethod
    def _generate_request_id() -> str:
        return str(uuid.uuid4())[:8]

    @staticmethod
    def _get_current_timestamp() -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _example(code: str, message: str) -> Dict[str, Any]:
    return {
        "content": {
            "application/json": {
                "example": {
                    "error": message,
                    "code": code,
                    "timestamp": "2024-01-01T00:00:00Z",
                    "request_id": "abc12345"
                }
            }
        }
    }


# Error response schemas for OpenAPI documentation
ERROR_RESPONSES = {
    400: {"description": "Validation Error", **_example("VALIDATION_ERROR", "Request validation failed")},
    401: {"description": "Unauthenticated", **_example("UNAUTHENTICATED", "Authentication required")},
    403: {"description": "Unauthorized", **_example("UNAUTHORIZED", "Access forbidden")},
    404: {"description": "Not Found", **_example("NOT_FOUND", "Resource not found")},
    409: {"description": "Conflict", **_example("CONFLICT", "Resource already exists")},
    500: {"description": "Internal Server Error", **_example("INTERNAL_SERVER_ERROR", "An unexpected error occurred")},
}


def error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """Subset of ERROR_RESPONSES for a route's `responses=` argument."""
    return {code: ERROR_RESPONSES[code] for code in status_codes}
