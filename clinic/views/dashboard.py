"""
Dashboard counters and the recent activity feed shown on the landing page.
"""
from __future__ import annotations

from rest_framework.decorators import api_view

from clinic.responses import success_response
from clinic.services.dashboard import dashboard_stats, recent_activity
from clinic.timestamps import get_zone


@api_view(['GET'])
def stats(request):
    zone = get_zone(request.query_params.get('timezone') or None)
    return success_response(dashboard_stats(zone), 'Dashboard statistics retrieved successfully')


@api_view(['GET'])
def recent(request):
    try:
        limit = max(1, min(int(request.query_params.get('limit', 10)), 50))
    except (TypeError, ValueError):
        limit = 10
    zone = get_zone(request.query_params.get('timezone') or None)
    return success_response(recent_activity(limit, zone), 'Recent activity retrieved successfully')
