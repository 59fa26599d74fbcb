"""Rate limiting configuration."""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First entry is the original client
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


# Uses Redis if REDIS_URL is set, in-process memory otherwise
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["120/minute"],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window"
)

RATE_LIMITS = {
    # Credential endpoints are the brute-force target
    "login": "10/minute",
    "register": "5/minute",

    # Form submissions
    "create_poll": "30/minute",
    "update_poll": "30/minute",
    "delete_poll": "30/minute",
    "vote": "60/minute",

    # Reads
    "read": "120/minute",
    "admin": "120/minute",
}
