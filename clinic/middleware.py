import logging
import time

from django.conf import settings
from django.http import JsonResponse
from django.urls import Resolver404, resolve

from .responses import error_body

logger = logging.getLogger(__name__)


class RequestLogMiddleware:
    """Log method, path, status and duration of every API request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        response = self.get_response(request)
        if request.path.startswith(settings.API_BASE_URL):
            logger.info('%s %s %s %.1fms', request.method, request.path, response.status_code,
                        (time.monotonic() - started) * 1000)
        return response


class ApiNotFoundMiddleware:
    """Answer unknown routes under the API prefix with a JSON 404 envelope."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path_info or ''
        if path.startswith(settings.API_BASE_URL):
            try:
                resolve(path)
            except Resolver404:
                return JsonResponse(error_body(f'Route {path} not found'), status=404)
        return self.get_response(request)
