"""Response headers for the API and the served entity documents."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from freightdesk.config import settings

BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
}

PRODUCTION_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": (
        "default-src 'self'; img-src 'self' data:; frame-ancestors 'none'; "
        "base-uri 'self'; form-action 'self';"
    ),
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp security headers on every response.

    API responses carry tokens and customer details, so they are never
    cached. Uploaded documents may be cached by the browser but only
    privately, and are always offered as downloads.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        path = request.url.path

        response.headers.update(BASE_HEADERS)
        if settings.environment == "production":
            response.headers.update(PRODUCTION_HEADERS)

        if path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
        elif path.startswith(settings.upload_url_prefix + "/"):
            response.headers["Cache-Control"] = "private, max-age=300"
            response.headers.setdefault("Content-Disposition", "attachment")

        return response
