"""
X-Correlation-ID handling and request logging.

The id (the client's header or a fresh UUID4) is kept in a contextvar so every
log line of the request carries it, and is echoed back on the response.
"""
import uuid
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from credably.utils import metrics
from credably.utils.logger import correlation_id_var, logger, request_user_id_var


class CorrelationMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get("x-correlation-id") or str(uuid.uuid4())
        correlation_id_var.set(cid)
        request_user_id_var.set("")

        start = time.monotonic()
        method = request.method
        path = request.url.path
        logger.debug("request.started", extra={"method": method, "path": path})

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = round((time.monotonic() - start) * 1000)
            metrics.inc("http.requests.failed")
            logger.error(
                "request.failed",
                extra={
                    "correlation_id": cid,
                    "method": method,
                    "path": path,
                    "duration_ms": duration_ms,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                }
            )
            raise

        duration_ms = round((time.monotonic() - start) * 1000)
        status = response.status_code
        metrics.inc(f"http.responses.{status // 100}xx")
        metrics.observe("http.request", duration_ms)

        log_fn = logger.warning if status >= 500 else logger.info
        log_fn(
            "request.completed",
            extra={
                "correlation_id": cid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else "",
            }
        )

        response.headers["X-Correlation-ID"] = cid
        return response
