"""HTTP middleware."""
from polly.middleware.logging import LoggingMiddleware
from polly.middleware.session import SessionMiddleware, get_cookie_jar

__all__ = ["LoggingMiddleware", "SessionMiddleware", "get_cookie_jar"]
