import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request, tagged with the request id and, once resolved, the caller."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"[{request_id}] {method} {path} - ERROR",
                extra={
                    "request_id": request_id,
                    "identity_id": getattr(request.state, "identity_id", None),
                    "method": method,
                    "path": path,
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                    "error": str(exc),
                },
            )
            raise

        status_code = response.status_code
        # Set by the session resolver; None for anonymous requests
        identity_id = getattr(request.state, "identity_id", None)

        logger.log(
            logging.WARNING if status_code >= 400 else logging.INFO,
            f"[{request_id}] {method} {path} - {status_code} ({identity_id or 'anonymous'})",
            extra={
                "request_id": request_id,
                "identity_id": identity_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response
