"""Middleware registration."""

from fastapi import FastAPI

from lexistep.config import Settings
from lexistep.middleware.cors import setup_cors
from lexistep.middleware.error_handler import setup_error_handlers
from lexistep.middleware.logging import setup_logging
from lexistep.middleware.rate_limit import RateLimitMiddleware
from lexistep.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, error handlers and the middleware stack.

    Outermost first, the stack is CORS, request id, then rate limiting, so a
    429 still carries CORS headers and a request id.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        exempt_paths=settings.rate_limit_exempt_paths,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
