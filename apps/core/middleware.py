"""
Request correlation for PublishDesk.

Every request gets an ``X-Request-ID`` (the caller's, when it is a valid UUID)
that is echoed on the response, used in error bodies, and stamped on log
records together with the acting user's id.
"""

import uuid
import threading
import logging
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

_local = threading.local()


def current_request_id():
    """Request id of the request being served on this thread, or None."""
    return getattr(_local, 'request_id', None)


def current_user_id():
    """Id of the session-authenticated user on this thread, or None."""
    return getattr(_local, 'user_id', None)


def _accept_or_mint(header_value):
    if header_value:
        try:
            return str(uuid.UUID(header_value))
        except (ValueError, TypeError):
            logger.debug("Discarding malformed X-Request-ID %r", header_value)
    return str(uuid.uuid4())


class RequestIDMiddleware(MiddlewareMixin):
    """
    Attach ``request.request_id`` and publish it to log records.

    Must sit after AuthenticationMiddleware so the session user is known.
    Token-authenticated API users are resolved later by DRF and are not
    visible here.
    """

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'
    RESPONSE_HEADER = 'X-Request-ID'

    def process_request(self, request):
        request.request_id = _accept_or_mint(request.META.get(self.REQUEST_ID_HEADER))
        _local.request_id = request.request_id

        user = getattr(request, 'user', None)
        _local.user_id = str(user.pk) if user is not None and user.is_authenticated else None

    def process_response(self, request, response):
        request_id = getattr(request, 'request_id', None)
        if request_id:
            response[self.RESPONSE_HEADER] = request_id

        _local.request_id = None
        _local.user_id = None
        return response


class RequestIDFilter(logging.Filter):
    """
    Adds ``request_id`` and ``user_id`` to every record ('-' outside a request).

    Referenced from the LOGGING config as 'apps.core.middleware.RequestIDFilter'.
    """

    def filter(self, record):
        record.request_id = current_request_id() or '-'
        record.user_id = current_user_id() or '-'
        return True
