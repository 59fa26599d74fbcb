"""Session cookie passthrough and security headers."""
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from polly.core.cookies import CookieJar

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https:; connect-src 'self'; frame-ancestors 'none'"
    ),
}


def get_cookie_jar(request: Request) -> CookieJar:
    """The request's CookieJar, created on first use."""
    jar = getattr(request.state, "cookie_jar", None)
    if jar is None:
        jar = CookieJar(request.cookies)
        request.state.cookie_jar = jar
    return jar


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Give every request a CookieJar and forward its queued writes.

    Session refreshes, logins, logouts and CSRF rotations all land on the
    jar during the request; this copies them onto the outgoing response,
    whatever kind of response the endpoint or an exception handler built.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        jar = get_cookie_jar(request)

        response = await call_next(request)

        jar.apply(response)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response
