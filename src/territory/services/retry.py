"""Retry with exponential backoff for calls to external services."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def with_retries(
    task: Callable[[], T],
    *,
    attempts: int = 3,
    initial_delay: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "task",
) -> T:
    """Run ``task`` until it succeeds or ``attempts`` runs have failed.

    After failed attempt ``n`` (0-based) the call sleeps ``initial_delay * 2**n``
    seconds, except after the last one. The last exception is re-raised
    unchanged once every attempt has failed.
    """

    attempts = max(1, attempts)
    attempt = 0
    while True:
        try:
            return task()
        except Exception as exc:
            if attempt >= attempts - 1:
                logger.warning(f"{description} failed after {attempts} attempts: {exc}")
                raise
            wait_time = initial_delay * (2 ** attempt)
            logger.debug(
                f"{description} failed, retrying in {wait_time:.2f}s "
                f"(attempt {attempt + 1}/{attempts}): {exc}"
            )
            sleep(wait_time)
            attempt += 1
