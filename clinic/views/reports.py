from rest_framework.decorators import api_view, permission_classes

from clinic.permissions import IsAdmin, IsAdminOrDoctor
from clinic.responses import success_response
from clinic.services.reports import activity_logs, report_stats


@api_view(['GET'])
@permission_classes([IsAdminOrDoctor])
def reports_stats(request):
    return success_response(report_stats(), 'Reports statistics retrieved successfully')


@api_view(['GET'])
@permission_classes([IsAdmin])
def system_logs(request):
    try:
        limit = max(1, min(int(request.query_params.get('limit', 20)), 200))
    except (TypeError, ValueError):
        limit = 20
    return success_response(activity_logs(limit, request.query_params.get('timezone') or None),
                            'System logs retrieved successfully')
