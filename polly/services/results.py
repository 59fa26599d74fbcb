"""Result boundary for public service operations.

Operations return ``{"error": None, ...}`` on success and ``{"error": msg, ...}``
on failure; exceptions never cross this line, except RedirectRequired which
page-level guards use as their failure signal.
"""
import functools
from typing import Any, Callable, Dict, Optional

import structlog

from polly.core.errors import PollyError, RedirectRequired, StoreError

logger = structlog.get_logger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def returns_result(
    failure_message: Optional[str] = None,
    **empty: Any,
) -> Callable:
    """
    Convert exceptions raised by an operation into its result dict.

    Args:
        failure_message: Fixed text replacing store/provider errors. Mutation
            paths set it so internal detail does not leak; read paths leave it
            unset and surface the store's own message.
        **empty: Data keys to include (with these values) on failure, e.g.
            ``polls=[]`` for a list read.
    """
    def decorator(func: Callable[..., Dict[str, Any]]) -> Callable[..., Dict[str, Any]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Dict[str, Any]:
            try:
                return func(*args, **kwargs)
            except RedirectRequired:
                raise
            except StoreError as e:
                logger.error("store_error", operation=func.__name__, error=e.message)
                message = failure_message or e.message
            except PollyError as e:
                message = e.message
            except Exception as e:
                logger.exception("operation_failed", operation=func.__name__, error_type=type(e).__name__)
                message = failure_message or UNEXPECTED_ERROR_MESSAGE
            return {**empty, "error": message}

        return wrapper

    return decorator
