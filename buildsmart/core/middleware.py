"""CORS, request-id, logging and bearer-token authentication middleware."""

import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from buildsmart.core.config import settings
from buildsmart.core.exceptions import TokenExpiredError, error_response
from buildsmart.core.security import resolve_identity

logger = logging.getLogger("buildsmart")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Add a unique request ID to every request/response."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        response: Response = await call_next(request)

        duration = round((time.time() - start_time) * 1000, 2)
        response.headers["X-Request-Id"] = request_id
        response.headers["X-Response-Time-Ms"] = str(duration)

        logger.info(
            "%s %s %s %sms",
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Attach the bearer-token identity (or anonymous) to every request.

    Expired tokens are rejected here with 401 so clients can prompt a fresh
    login. Garbage tokens are treated as if no credential was sent.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            user = resolve_identity(request.headers.get("authorization"))
        except TokenExpiredError as exc:
            logger.info("Rejected expired token on %s %s", request.method, request.url.path)
            return error_response(exc)

        request.state.user = user
        request.state.authenticated = user is not None
        return await call_next(request)


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application."""
    # Innermost first: authentication runs after CORS and request-id
    app.add_middleware(AuthenticationMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestIdMiddleware)
