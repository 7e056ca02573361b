"""
Voiceover Generator — Rate-limit retry

A single generation request is retried only when the upstream signals a
rate limit (HTTP 429), with the same delay before every retry.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429


@dataclass
class RetryOutcome:
    result: Any
    attempts: int


def _status_code(exc: BaseException) -> int | None:
    # google.genai.errors.APIError exposes .code; HTTP client errors use .status_code
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return True if the exception is an upstream 429."""
    return _status_code(exc) == RATE_LIMIT_STATUS


async def retry_on_rate_limit(
    call: Callable[[], Awaitable[Any]],
    *,
    max_attempts: int,
    retry_delay_ms: int,
    is_rate_limited: Callable[[BaseException], bool] = is_rate_limit_error,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    label: str = "TTS",
) -> RetryOutcome:
    """Await call() up to max_attempts times, sleeping retry_delay_ms after each rate limit.

    Non-rate-limit failures, and the rate-limit failure of the last attempt,
    are re-raised unchanged.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if retry_delay_ms < 0:
        raise ValueError(f"retry_delay_ms must be >= 0, got {retry_delay_ms}")

    for attempt in range(max_attempts):
        try:
            result = await call()
        except Exception as exc:
            if not is_rate_limited(exc):
                logger.error(
                    "%s attempt %d/%d failed (%s), not retrying",
                    label, attempt + 1, max_attempts, type(exc).__name__,
                )
                raise
            if attempt == max_attempts - 1:
                logger.error(
                    "%s attempt %d/%d rate limited, giving up",
                    label, attempt + 1, max_attempts,
                )
                raise
            logger.warning(
                "%s attempt %d/%d rate limited, retrying in %.1fs",
                label, attempt + 1, max_attempts, retry_delay_ms / 1000,
            )
            await sleep(retry_delay_ms / 1000)
            continue

        logger.info("%s attempt %d/%d succeeded", label, attempt + 1, max_attempts)
        return RetryOutcome(result=result, attempts=attempt + 1)

    raise RuntimeError("Unreachable")

