"""Bounded retry with a fixed delay for provider calls.

A returned failure envelope (``ok=False``) and a raised exception are both
counted as a failed attempt. The delay is constant between attempts; there is
no backoff growth.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import List

from app.domain.audit import ProviderResult

logger = logging.getLogger(__name__)


class ProviderRetryExhaustedError(Exception):
    """Raised when every attempt of a provider call failed.

    Attributes:
        attempts: Total number of attempts made (initial + retries).
        last_error: Human-readable cause of the final failed attempt.
        history: Causes of every failed attempt, in order.
    """

    def __init__(self, attempts: int, last_error: str, history: List[str]) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.history = history
        super().__init__(
            f"Provider call failed after {attempts} attempt(s). Last error: {last_error}"
        )


def with_retries(
    call: Callable[[], ProviderResult],
    max_retries: int = 2,
    delay_ms: int = 2000,
    *,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "provider",
) -> ProviderResult:
    """Invoke ``call`` until it succeeds or attempts run out.

    Args:
        call: Zero-argument callable returning a ``ProviderResult``.
        max_retries: Maximum number of *additional* attempts after the
            first failure. Total attempts = 1 + max_retries.
        delay_ms: Fixed wait between attempts, in milliseconds. Only the
            calling thread waits; other provider calls keep running.
        sleep: Wait function, injectable for tests.
        label: Provider name used in log lines.

    Returns:
        The first successful ``ProviderResult``.

    Raises:
        ProviderRetryExhaustedError: If every attempt failed.
    """
    errors: List[str] = []
    total_attempts = 1 + max(0, max_retries)
    delay_seconds = max(0, delay_ms) / 1000.0

    for attempt in range(1, total_attempts + 1):
        try:
            result = call()
        except Exception as exc:  # noqa: BLE001
            error = f"{type(exc).__name__}: {exc}"
        else:
            if result.ok:
                if attempt > 1:
                    logger.info(
                        "Provider %s succeeded on attempt %d/%d",
                        label,
                        attempt,
                        total_attempts,
                    )
                return result
            error = result.error or "provider error"

        errors.append(error)
        logger.warning(
            "Provider %s attempt %d/%d failed: %s",
            label,
            attempt,
            total_attempts,
            error,
        )
        if attempt < total_attempts:
            sleep(delay_seconds)

    raise ProviderRetryExhaustedError(
        attempts=total_attempts,
        last_error=errors[-1],
        history=errors,
    )
