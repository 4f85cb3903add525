"""
Custom middleware for chitfund-back.
"""
import logging
import time

from django.conf import settings
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


class RequestTimingMiddleware(MiddlewareMixin):
    """
    Log how long each API request took.
    Requests slower than REQUEST_TIMEOUT_SECONDS are reported as overruns; the worker
    timeout of the WSGI server is what actually cuts them off.
    """

    def process_request(self, request):
        request._started_at = time.monotonic()

    def process_response(self, request, response):
        started = getattr(request, '_started_at', None)
        if started is None:
            return response
        elapsed = time.monotonic() - started
        limit = getattr(settings, 'REQUEST_TIMEOUT_SECONDS', 30)
        if elapsed > limit:
            logger.warning(
                'Request overran %ss: %s %s -> %s (%.0f ms)',
                limit, request.method, request.path, response.status_code, elapsed * 1000,
            )
        else:
            logger.debug(
                '%s %s -> %s (%.0f ms)',
                request.method, request.path, response.status_code, elapsed * 1000,
            )
        return response
