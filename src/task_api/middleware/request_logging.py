import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from opentelemetry import metrics
from starlette.middleware.base import BaseHTTPMiddleware


access_logger = logging.getLogger("task_api.access")

_meter: metrics.Meter | None = None
_request_count: metrics.Counter | None = None
_request_duration: metrics.Histogram | None = None


def _init_metrics() -> None:
    global _meter, _request_count, _request_duration
    if _meter is None:
        _meter = metrics.get_meter("http.server")
        _request_count = _meter.create_counter(
            name="http.server.request.count",
            description="Total HTTP requests",
            unit="{request}",
        )
        _request_duration = _meter.create_histogram(
            name="http.server.request.duration",
            description="HTTP request duration",
            unit="s",
        )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and latency of every request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        _init_metrics()
        assert _request_count is not None
        assert _request_duration is not None

        status_code = 500
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time
            attributes: dict[str, Any] = {
                "http.request.method": request.method,
                "http.route": request.url.path,
                "http.response.status_code": status_code,
            }
            _request_count.add(1, attributes)
            _request_duration.record(duration, attributes)
            access_logger.info(
                '"%s %s" %d %.2fms',
                request.method,
                request.url.path,
                status_code,
                duration * 1000,
            )
