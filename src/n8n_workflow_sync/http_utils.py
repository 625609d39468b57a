"""HTTP utilities: timeouts, retries, and resilience helpers."""

import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)

# Default timeouts: (connect_timeout, read_timeout)
DEFAULT_TIMEOUT = (3, 15)
API_TIMEOUT = (5, 30)

TRANSIENT_STATUS_CODES = (429, 502, 503, 504)


def retry_on_transient(
    func: Callable,
    max_retries: int = 2,
    backoff_factor: float = 1.0,
    *args: Any,
    **kwargs: Any,
) -> Any:
    """Lightweight retry wrapper for transient failures (429, 5xx).

    Only use this for idempotent requests (GET); creating or updating a
    workflow is never retried.

    Args:
        func: Callable to retry (e.g., session.get)
        max_retries: Number of retries on transient error
        backoff_factor: Base wait in seconds, doubled per attempt (1s, 2s, 4s)
        *args: Positional arguments to func
        **kwargs: Keyword arguments to func

    Returns:
        Result of func (the last response if retries are exhausted)

    Raises:
        Last exception if all retries exhausted
    """
    attempt = 0

    while True:
        try:
            response = func(*args, **kwargs)
        except (TimeoutError, ConnectionError, OSError) as e:
            if attempt >= max_retries:
                raise
            wait = backoff_factor * (2 ** attempt)
            logger.debug(
                f"Connection error: {e}. "
                f"Retrying in {wait}s (attempt {attempt + 1}/{max_retries})"
            )
            time.sleep(wait)
            attempt += 1
            continue

        if response.status_code in TRANSIENT_STATUS_CODES and attempt < max_retries:
            wait = backoff_factor * (2 ** attempt)
            logger.debug(
                f"Transient error {response.status_code}, "
                f"retrying in {wait}s (attempt {attempt + 1}/{max_retries})"
            )
            time.sleep(wait)
            attempt += 1
            continue

        return response


__all__ = [
    "DEFAULT_TIMEOUT",
    "API_TIMEOUT",
    "TRANSIENT_STATUS_CODES",
    "retry_on_transient",
]
