"""
Success envelope helpers: { "success": true, "message"?: str, "data": ... }
Errors are rendered by config.exceptions.custom_exception_handler.
"""
from rest_framework import status
from rest_framework.response import Response


def ok(data=None, message=None, status_code=status.HTTP_200_OK):
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return Response(body, status=status_code)


def created(data, message=None):
    return ok(data, message=message, status_code=status.HTTP_201_CREATED)
