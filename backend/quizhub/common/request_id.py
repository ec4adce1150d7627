"""Request ID middleware: tags every request and logs its outcome."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from quizhub.core.logging import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Generate or propagate a request ID and log start/finish with latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        context = {"method": request.method, "path": request.url.path}

        start_time = time.perf_counter()
        logger.info("Request started", extra=context)
        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.error(
                    "Request failed",
                    extra={**context, "status_code": 500, "latency_ms": _elapsed_ms(start_time)},
                    exc_info=True,
                )
                raise

            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "Request completed",
                extra={**context, "status_code": response.status_code, "latency_ms": _elapsed_ms(start_time)},
            )
            return response
        finally:
            request_id_var.reset(token)


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)
