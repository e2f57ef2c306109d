"""
API exception handling.

DRF already maps validation errors to 400 and Http404 to 404; anything it does
not recognise (database errors, bugs) is turned into a generic 500 here so the
client never sees a traceback.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('sitetrack.api')


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    request = context.get('request')
    logger.error(
        f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'} "
        f"({request.method if request else '-'} {request.path if request else '-'}): {exc}",
        exc_info=exc,
    )
    return Response({'detail': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
