import logging
import time

from django.conf import settings

logger = logging.getLogger("performance")


class ServerTimingMiddleware:
    """Adds Server-Timing header to every response and logs slow requests."""

    def __init__(self, get_response):
        self.get_response = get_response
        self.slow_ms = getattr(settings, 'SLOW_REQUEST_MS', 2000)

    def __call__(self, request):
        start = time.monotonic()
        response = self.get_response(request)
        total_ms = (time.monotonic() - start) * 1000

        response["Server-Timing"] = f"total;dur={total_ms:.1f}"

        if total_ms > self.slow_ms:
            # API views attach the caller; other pages leave it unset
            identity = getattr(request, 'identity', None)
            logger.warning(
                "Slow request: %s %s -> %s took %.0fms (%s)",
                request.method,
                request.get_full_path(),
                response.status_code,
                total_ms,
                identity.role if identity else 'anonymous',
            )

        return response
