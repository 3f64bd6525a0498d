import time
import uuid
from typing import Sequence

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one structured line per request and tag responses with a request id."""

    def __init__(self, app, logger, service_name: str = "inkwell", add_request_id_header: bool = True):
        super().__init__(app)
        self.logger = logger
        self.service_name = service_name
        self.add_request_id_header = add_request_id_header

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception(
                "request failed",
                service=self.service_name,
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        self.logger.info(
            "request completed",
            service=self.service_name,
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        if self.add_request_id_header:
            response.headers["X-Request-ID"] = request_id
        return response


class PreflightMiddleware(BaseHTTPMiddleware):
    """Answer every ``OPTIONS`` request with 200 and the CORS headers.

    Example:
        app.add_middleware(PreflightMiddleware, allow_methods=["GET", "POST"])
    """

    def __init__(
        self,
        app,
        allow_origin: str = "*",
        allow_methods: Sequence[str] = ("OPTIONS", "GET", "POST", "PUT", "PATCH", "DELETE"),
        allow_headers: Sequence[str] = ("Content-Type", "Authorization"),
    ):
        super().__init__(app)
        self.headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ", ".join(allow_methods),
            "Access-Control-Allow-Headers": ", ".join(allow_headers),
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=self.headers)
        return await call_next(request)
