# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Retry decorator for executors.

Wraps any Executor and retries timeouts with capped exponential backoff.
Every other failure is deterministic and is returned on the first attempt.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from lazyfocus.bridge.errors import ExecutionCancelledError, ExecutionTimeoutError
from lazyfocus.bridge.executor import DEFAULT_TIMEOUT, Executor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration.

    max_attempts: total attempts including the first (>= 1)
    initial_wait: wait before the first retry, seconds (> 0)
    max_wait: cap on any single wait, seconds (>= initial_wait)
    """

    max_attempts: int = 3
    initial_wait: float = 0.1
    max_wait: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got: {self.max_attempts}")
        if self.initial_wait <= 0:
            raise ValueError(f"initial_wait must be positive, got: {self.initial_wait}")
        if self.max_wait < self.initial_wait:
            raise ValueError(
                f"max_wait ({self.max_wait}) must be >= initial_wait ({self.initial_wait})"
            )

    def waits(self) -> Iterator[float]:
        """Backoff waits between attempts (max_attempts - 1 values)."""
        wait = self.initial_wait
        for _ in range(self.max_attempts - 1):
            yield wait
            wait = min(wait * 2, self.max_wait)


class RetryingExecutor:
    """Executor that retries the wrapped executor on timeout."""

    def __init__(
        self,
        executor: Executor,
        policy: Optional[RetryPolicy] = None,
        timeout: float = DEFAULT_TIMEOUT,
        sleep_func: Optional[Callable[[float], None]] = None,
    ):
        self.executor = executor
        self.policy = policy or RetryPolicy()
        self.timeout = timeout
        self._sleep = sleep_func or time.sleep

    def execute(self, script: str, cancel: Optional[threading.Event] = None) -> str:
        """Run a script with retries and the default per-attempt timeout."""
        return self.execute_with_timeout(script, self.timeout, cancel=cancel)

    def execute_with_timeout(
        self,
        script: str,
        timeout: float,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """
        Run a script, retrying only ExecutionTimeoutError.

        ``timeout`` applies to each attempt; there is no overall deadline.

        Raises:
            ExecutionTimeoutError: If every attempt timed out.
            ExecutionCancelledError: If ``cancel`` fired during a backoff wait.
            BridgeError: Any other failure, unchanged, after one attempt.
        """
        waits = self.policy.waits()
        attempt = 1
        while True:
            try:
                return self.executor.execute_with_timeout(script, timeout, cancel=cancel)
            except ExecutionTimeoutError:
                wait = next(waits, None)
                if wait is None:
                    logger.warning(
                        f"Script timed out on all {self.policy.max_attempts} attempts"
                    )
                    raise

            logger.info(
                f"Attempt {attempt}/{self.policy.max_attempts} timed out, "
                f"retrying in {wait:g}s"
            )
            self._backoff(wait, cancel)
            attempt += 1

    def _backoff(self, wait: float, cancel: Optional[threading.Event]) -> None:
        if cancel is None:
            self._sleep(wait)
        elif cancel.wait(wait):
            raise ExecutionCancelledError("script execution cancelled during retry backoff")
