"""
Request tracking middleware for logging correlation.
"""

import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .context import generate_transaction_id, set_transaction_id, set_user_id

# Paths polled by load balancers; not worth an access log line
QUIET_PATHS = {"/api/health"}


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Sets the transaction id for the request and writes one access log line."""

    def __init__(self, app, logger: logging.Logger | None = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("rentpilot_backend.requests")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        txn_id = request.headers.get("x-transaction-id") or generate_transaction_id()
        set_transaction_id(txn_id)
        set_user_id(None)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = round((time.time() - start_time) * 1000, 2)

        response.headers["x-transaction-id"] = txn_id

        if request.url.path not in QUIET_PATHS:
            self.logger.info(
                "Request completed",
                extra={
                    "transaction_id": txn_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )

        return response
