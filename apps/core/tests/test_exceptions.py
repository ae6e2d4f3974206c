"""
Tests for standardized error handling.

Tests cover:
- Status codes and error codes per exception class
- Error body shape from the exception handler
- Mapping of Django and DRF exceptions
"""

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework.exceptions import NotAuthenticated, ValidationError
from rest_framework.test import APIRequestFactory

from apps.core.exceptions import (
    DuplicateAssignment,
    DuplicatePendingRequest,
    ErrorCode,
    InvalidStateTransition,
    NoPriorAssignment,
    NotFoundError,
    NotPending,
    UnauthorizedError,
    ValidationFailed,
    created_response,
    editorial_exception_handler,
    success_response,
)


@pytest.fixture
def context():
    request = APIRequestFactory().get('/api/articles/')
    request.request_id = 'req-123'
    return {'request': request}


# ============================================================================
# Exception Class Tests
# ============================================================================

class TestExceptionClasses:
    """Test HTTP status and error code per workflow error."""

    @pytest.mark.parametrize('exc_class, status_code, code', [
        (UnauthorizedError, 403, ErrorCode.PERMISSION_DENIED),
        (InvalidStateTransition, 409, ErrorCode.INVALID_STATE_TRANSITION),
        (NotFoundError, 404, ErrorCode.NOT_FOUND),
        (ValidationFailed, 422, ErrorCode.VALIDATION_ERROR),
        (DuplicateAssignment, 409, ErrorCode.DUPLICATE_ASSIGNMENT),
        (NoPriorAssignment, 409, ErrorCode.NO_PRIOR_ASSIGNMENT),
        (NotPending, 409, ErrorCode.NOT_PENDING),
        (DuplicatePendingRequest, 409, ErrorCode.DUPLICATE_PENDING_REQUEST),
    ])
    def test_mapping(self, exc_class, status_code, code):
        exc = exc_class()
        assert exc.status_code == status_code
        assert exc.error_code is code
        assert str(exc) == exc_class.default_detail

    def test_message_field_and_details(self):
        exc = ValidationFailed("Too short", field='feedback', details={'min_length': 10})

        body = exc.get_error_response('req-1').to_dict()

        assert body == {
            'error': {
                'code': 'VALIDATION_ERROR',
                'message': 'Too short',
                'field': 'feedback',
                'details': {'min_length': 10},
            },
            'request_id': 'req-1',
        }


# ============================================================================
# Handler Tests
# ============================================================================

class TestExceptionHandler:
    """Test editorial_exception_handler."""

    def test_editorial_exception(self, context):
        response = editorial_exception_handler(InvalidStateTransition("Cannot publish"), context)

        assert response.status_code == 409
        assert response.data['error']['message'] == 'Cannot publish'
        assert response.data['request_id'] == 'req-123'

    def test_django_validation_error(self, context):
        response = editorial_exception_handler(DjangoValidationError("Bad value"), context)

        assert response.status_code == 422
        assert response.data['error']['message'] == 'Bad value'

    def test_http404(self, context):
        response = editorial_exception_handler(Http404(), context)

        assert response.status_code == 404
        assert response.data['error']['code'] == 'NOT_FOUND'

    def test_drf_validation_error(self, context):
        response = editorial_exception_handler(ValidationError({'title': ['Required']}), context)

        assert response.status_code == 400
        assert response.data['error']['details'] == {'title': ['Required']}

    def test_not_authenticated(self, context):
        response = editorial_exception_handler(NotAuthenticated(), context)

        assert response.status_code == 401
        assert response.data['error']['code'] == 'AUTHENTICATION_REQUIRED'

    def test_unexpected_exception(self, context):
        response = editorial_exception_handler(RuntimeError("boom"), context)

        assert response.status_code == 500
        assert response.data['error']['code'] == 'INTERNAL_ERROR'
        assert 'boom' not in response.data['error']['message']


# ============================================================================
# Response Helper Tests
# ============================================================================

class TestResponseHelpers:
    """Test success envelopes."""

    def test_success_response(self):
        response = success_response({'id': 1}, "Done")
        assert response.status_code == 200
        assert response.data == {'data': {'id': 1}, 'message': 'Done'}

    def test_success_without_message(self):
        assert success_response([]).data == {'data': []}

    def test_created_response(self):
        response = created_response({'id': 1})
        assert response.status_code == 201
        assert response.data['message'] == 'Created successfully'
