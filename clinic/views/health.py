import logging

from django.conf import settings
from django.db import DatabaseError, connections
from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny

from clinic.responses import error_response, success_response

logger = logging.getLogger(__name__)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([])
def health(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as e:
        logger.error('Health check database ping failed: %s', e)
        return error_response('Database unavailable', status=503)
    return success_response(
        {'status': 'OK', 'environment': settings.ENV, 'database': bool(row and row[0] == 1)},
        'MediCore API is running',
    )
