import time
import uuid

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.logging import get_logger

logger = get_logger(__name__)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests handled",
    ["method", "route", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route"],
)

_SKIP_PATHS = {"/health", "/metrics"}


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            elapsed = time.perf_counter() - start
            if request.url.path not in _SKIP_PATHS:
                route = _route_template(request)
                REQUEST_COUNT.labels(request.method, route, str(status_code)).inc()
                REQUEST_LATENCY.labels(request.method, route).observe(elapsed)
                logger.info(
                    "request method=%s path=%s status=%s duration_ms=%.1f",
                    request.method,
                    request.url.path,
                    status_code,
                    elapsed * 1000,
                    extra={"request_id": request_id},
                )
