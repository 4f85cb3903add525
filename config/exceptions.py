"""
Global exception handler for consistent API error responses.
Every failure leaves the API as the envelope:
{ "success": false, "message": str, "error": str (DEBUG only), "errors": [{field, message}] (validation only) }
"""
import logging
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import ValidationError
from django.http import Http404, JsonResponse
from django.core.exceptions import PermissionDenied, ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.conf import settings

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Map any exception raised inside a DRF view to the response envelope.
    DRF's own handler resolves status codes for APIException, Http404 and PermissionDenied.
    """
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(_django_validation_detail(exc))

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, ValidationError):
            response.data = {
                'success': False,
                'message': 'Validation failed',
                'errors': _flatten_errors(exc.detail),
            }
        else:
            response.data = {
                'success': False,
                'message': _get_detail(exc),
            }
        return response

    request = context.get('request') if context else None
    path = request.path if request else 'unknown'

    if isinstance(exc, DatabaseError):
        logger.exception('Database error on %s: %s', path, exc)
        data = {'success': False, 'message': 'Database Error'}
        data['error'] = str(exc) if settings.DEBUG else 'Invalid request to database'
        return Response(data, status=status.HTTP_400_BAD_REQUEST)

    logger.exception('Unhandled exception on %s: %s', path, exc)
    data = {'success': False, 'message': 'Internal Server Error'}
    # Never expose internals outside DEBUG
    if settings.DEBUG:
        data['error'] = str(exc)
    return Response(data, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def not_found_view(request, exception=None):
    """handler404: unknown routes get the envelope instead of an HTML page."""
    return JsonResponse(
        {'success': False, 'message': 'Route not found'},
        status=status.HTTP_404_NOT_FOUND,
    )


def server_error_view(request):
    """handler500 for errors raised outside DRF views."""
    return JsonResponse(
        {'success': False, 'message': 'Internal Server Error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _get_detail(exc):
    if isinstance(exc, Http404):
        return 'Not found'
    if isinstance(exc, PermissionDenied):
        return str(exc) or 'Permission denied'
    if hasattr(exc, 'detail'):
        d = exc.detail
        if isinstance(d, list):
            return str(d[0]) if d else 'Error'
        if isinstance(d, dict):
            return str(d.get('detail', d))
        return str(d)
    return str(exc)


def _django_validation_detail(exc):
    if hasattr(exc, 'message_dict'):
        return exc.message_dict
    return {'non_field_errors': exc.messages}


def _flatten_errors(detail, prefix=''):
    """
    Turn DRF's nested error detail into [{field, message}, ...].
    Nested serializer paths are joined with dots.
    """
    errors = []
    if isinstance(detail, dict):
        for key, value in detail.items():
            field = f'{prefix}.{key}' if prefix else str(key)
            errors.extend(_flatten_errors(value, field))
    elif isinstance(detail, list):
        for item in detail:
            if isinstance(item, (dict, list)):
                errors.extend(_flatten_errors(item, prefix))
            else:
                errors.append({'field': prefix or 'non_field_errors', 'message': str(item)})
    else:
        errors.append({'field': prefix or 'non_field_errors', 'message': str(detail)})
    return errors
