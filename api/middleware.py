"""
Global middleware: request timing and the access log.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        # Set by ``get_current_identity`` once a bearer token verifies.
        caller_id = getattr(request.state, "caller_id", None)
        logger.debug(
            "%s %s → %d caller=%s (%.3fs)",
            request.method,
            request.url.path,
            response.status_code,
            "-" if caller_id is None else caller_id,
            elapsed,
        )
        return response
