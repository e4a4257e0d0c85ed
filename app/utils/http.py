"""HTTP utilities providing retry/backoff semantics."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class RetryConfig:
    def __init__(
        self,
        *,
        attempts: int = 3,
        backoff_seconds: float = 1.0,
        max_backoff_seconds: float = 30.0,
    ) -> None:
        self.attempts = attempts
        self.backoff_seconds = backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    """Send a request, retrying transport errors, rate limits and 5xx responses.

    Any other non-success status is raised immediately as
    ``httpx.HTTPStatusError``.
    """
    config = retry_config or RetryConfig()
    attempt = 0
    last_exception: Exception | None = None

    while attempt < config.attempts:
        delay = config.backoff_seconds * (attempt + 1)
        try:
            response = await func(*args, **kwargs)
            if response.status_code in _RETRYABLE_STATUS:
                delay = _retry_after(response) or delay
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code not in _RETRYABLE_STATUS:
                raise
            last_exception = exc
        except httpx.TransportError as exc:
            last_exception = exc

        attempt += 1
        if attempt >= config.attempts:
            break
        delay = min(delay, config.max_backoff_seconds)
        logger.warning(
            "Request failed (%s); retrying in %.1fs (attempt %d/%d)",
            last_exception,
            delay,
            attempt + 1,
            config.attempts,
        )
        await asyncio.sleep(delay)

    if last_exception is not None:
        raise last_exception
    raise RuntimeError("Request failed without raising an exception")


__all__ = ["RetryConfig", "request_with_retry"]
