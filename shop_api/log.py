"""Logging setup and per-request access logging."""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware

FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger("shop_api")
    logger.setLevel(level)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(FORMAT))
    logger.addHandler(handler)
    return logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        self.logger = logging.getLogger("shop_api.access")

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        self.logger.info(
            "method=%s path=%s status=%s duration_ms=%.1f ip=%s",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            request.client.host if request.client else "unknown",
        )
        return response
