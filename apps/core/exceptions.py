"""
Standardized error handling for PublishDesk.

Provides consistent error codes, exception classes, and response formatting.
Every workflow failure is one of the exception classes below; the API layer
turns them into structured responses through ``editorial_exception_handler``.
"""

import logging
import traceback
import uuid
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Authentication/Authorization
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"

    # Workflow errors
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    DUPLICATE_ASSIGNMENT = "DUPLICATE_ASSIGNMENT"
    NO_PRIOR_ASSIGNMENT = "NO_PRIOR_ASSIGNMENT"
    NOT_PENDING = "NOT_PENDING"
    DUPLICATE_PENDING_REQUEST = "DUPLICATE_PENDING_REQUEST"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Error Response Schema
# =============================================================================

@dataclass
class ErrorDetail:
    """Detailed error information."""
    code: ErrorCode
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "code": self.code.value if isinstance(self.code, ErrorCode) else self.code,
            "message": self.message,
        }
        if self.field:
            result["field"] = self.field
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ErrorResponse:
    """Standardized error response."""
    error: ErrorDetail
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error.to_dict(),
            "request_id": self.request_id,
        }

    def to_response(self, status_code: int = 400) -> Response:
        return Response(self.to_dict(), status=status_code)


# =============================================================================
# Custom Exceptions
# =============================================================================

class EditorialException(APIException):
    """Base exception for PublishDesk errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.INTERNAL_ERROR
    default_detail = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_detail
        self.error_code = code or self.error_code
        self.field = field
        self.error_details = details or {}

        if status_code:
            self.status_code = status_code

        super().__init__(detail=self.message)

    def __str__(self):
        return self.message

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                code=self.error_code,
                message=self.message,
                field=self.field,
                details=self.error_details if self.error_details else None,
            ),
            request_id=request_id or str(uuid.uuid4()),
        )


class UnauthorizedError(EditorialException):
    """Actor lacks the required role or ownership."""
    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.PERMISSION_DENIED
    default_detail = "Permission denied"


class InvalidStateTransition(EditorialException):
    """Current article status does not permit the requested action."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.INVALID_STATE_TRANSITION
    default_detail = "Invalid state transition"


class NotFoundError(EditorialException):
    """Resource not found, or not owned by the stated parent."""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.NOT_FOUND
    default_detail = "Resource not found"


class ValidationFailed(EditorialException):
    """Missing or malformed required field."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = ErrorCode.VALIDATION_ERROR
    default_detail = "Validation failed"


class DuplicateAssignment(EditorialException):
    """Reviewer is already assigned to the article."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.DUPLICATE_ASSIGNMENT
    default_detail = "Reviewer already assigned to this article"


class NoPriorAssignment(EditorialException):
    """Reassignment requested without a completed review assignment."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.NO_PRIOR_ASSIGNMENT
    default_detail = "No previous review assignment found"


class NotPending(EditorialException):
    """Change record or revision request was already resolved."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.NOT_PENDING
    default_detail = "Record is not pending"


class DuplicatePendingRequest(EditorialException):
    """A pending revision request already exists for the article."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.DUPLICATE_PENDING_REQUEST
    default_detail = "A pending revision request already exists for this article"


# =============================================================================
# Exception Handler
# =============================================================================

def get_request_id(request) -> str:
    """Get or generate request ID from request."""
    if hasattr(request, 'request_id'):
        return request.request_id
    return str(uuid.uuid4())


def editorial_exception_handler(exc, context):
    """
    Custom exception handler for the PublishDesk API.

    Converts all exceptions to standardized error response format.
    """
    request = context.get('request')
    request_id = get_request_id(request) if request else str(uuid.uuid4())

    if isinstance(exc, EditorialException):
        error_response = exc.get_error_response(request_id)
        logger.warning(
            f"API Error: {exc.error_code.value}",
            extra={
                "request_id": request_id,
                "error_code": exc.error_code.value,
                "error_message": exc.message,
                "field": exc.field,
                "status_code": exc.status_code,
            }
        )
        return error_response.to_response(exc.status_code)

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            details = exc.message_dict
            message = "Validation failed"
        else:
            details = {"errors": exc.messages}
            message = exc.messages[0] if exc.messages else "Validation failed"

        error_response = ErrorResponse(
            error=ErrorDetail(
                code=ErrorCode.VALIDATION_ERROR,
                message=message,
                details=details,
            ),
            request_id=request_id,
        )
        return error_response.to_response(status.HTTP_422_UNPROCESSABLE_ENTITY)

    if isinstance(exc, (Http404, ObjectDoesNotExist)):
        error_response = ErrorResponse(
            error=ErrorDetail(
                code=ErrorCode.NOT_FOUND,
                message=str(exc) if str(exc) else "Resource not found",
            ),
            request_id=request_id,
        )
        return error_response.to_response(status.HTTP_404_NOT_FOUND)

    response = drf_exception_handler(exc, context)

    if response is not None:
        error_code = ErrorCode.VALIDATION_ERROR
        if response.status_code == 401:
            error_code = ErrorCode.AUTHENTICATION_REQUIRED
        elif response.status_code == 403:
            error_code = ErrorCode.PERMISSION_DENIED
        elif response.status_code == 404:
            error_code = ErrorCode.NOT_FOUND
        elif response.status_code >= 500:
            error_code = ErrorCode.INTERNAL_ERROR

        if isinstance(response.data, dict):
            if 'detail' in response.data:
                message = str(response.data['detail'])
                details = None
            else:
                message = "Validation failed"
                details = response.data
        elif isinstance(response.data, list):
            message = response.data[0] if response.data else "Error"
            details = {"errors": response.data}
        else:
            message = str(response.data)
            details = None

        error_response = ErrorResponse(
            error=ErrorDetail(
                code=error_code,
                message=message,
                details=details,
            ),
            request_id=request_id,
        )
        return error_response.to_response(response.status_code)

    logger.exception(
        f"Unhandled exception: {type(exc).__name__}",
        extra={
            "request_id": request_id,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            "traceback": traceback.format_exc(),
        }
    )

    error_response = ErrorResponse(
        error=ErrorDetail(
            code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred",
        ),
        request_id=request_id,
    )
    return error_response.to_response(status.HTTP_500_INTERNAL_SERVER_ERROR)


# =============================================================================
# Response Helpers
# =============================================================================

def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = 200,
) -> Response:
    """Create a standardized success response."""
    response_data = {'data': data}

    if message:
        response_data['message'] = message

    return Response(response_data, status=status_code)


def created_response(
    data: Any = None,
    message: str = "Created successfully",
) -> Response:
    """Create a 201 Created response."""
    return success_response(data=data, message=message, status_code=201)
