# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Process executor for rendered automation scripts.

Each call spawns exactly one interpreter process, waits for it under a
deadline and classifies the outcome:

- exit 0 -> stdout is returned
- deadline passed -> process killed, ExecutionTimeoutError
- caller cancelled -> process killed, ExecutionCancelledError
- non-zero exit -> ExecutionFailedError carrying stderr
- binary missing or not executable -> InterpreterNotFoundError
"""

import logging
import subprocess
import threading
import time
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

from lazyfocus.bridge.errors import (
    ExecutionCancelledError,
    ExecutionFailedError,
    ExecutionTimeoutError,
    InterpreterNotFoundError,
)

logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = 30.0
DEFAULT_INTERPRETER = "osascript"
DEFAULT_INTERPRETER_ARGS = ("-l", "JavaScript", "-e")

# How often a waiting call checks its cancel event
POLL_INTERVAL = 0.05


@runtime_checkable
class Executor(Protocol):
    """Anything that can run script text and return its stdout."""

    def execute(self, script: str, cancel: Optional[threading.Event] = None) -> str:
        ...

    def execute_with_timeout(
        self,
        script: str,
        timeout: float,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        ...


def _preview(script: str) -> str:
    """First line of a script, truncated for log output."""
    first = script.strip().splitlines()[0] if script.strip() else ""
    if len(first) > 100:
        return first[:100] + "..."
    return first


class ScriptExecutor:
    """Runs scripts through an external interpreter (osascript by default)."""

    def __init__(
        self,
        interpreter: str = DEFAULT_INTERPRETER,
        interpreter_args: Sequence[str] = DEFAULT_INTERPRETER_ARGS,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
    ):
        """
        Initialize the executor.

        Args:
            interpreter: Interpreter binary name or path
            interpreter_args: Fixed flags placed before the script argument
            timeout: Deadline used by execute(), in seconds
            poll_interval: Wait slice used while a cancel event is attached
        """
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got: {timeout}")
        self.interpreter = interpreter
        self.interpreter_args = tuple(interpreter_args)
        self.timeout = timeout
        self.poll_interval = poll_interval

    def execute(self, script: str, cancel: Optional[threading.Event] = None) -> str:
        """Run a script with the executor's default timeout."""
        return self.execute_with_timeout(script, self.timeout, cancel=cancel)

    def execute_with_timeout(
        self,
        script: str,
        timeout: float,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """
        Run a script, killing the interpreter if it outlives ``timeout``.

        Args:
            script: Rendered script text, passed as a single argument
            timeout: Deadline in seconds
            cancel: Optional event; setting it kills the process

        Returns:
            Captured stdout

        Raises:
            InterpreterNotFoundError: If the interpreter cannot be launched
            ExecutionTimeoutError: If the deadline passed
            ExecutionCancelledError: If ``cancel`` was set
            ExecutionFailedError: On non-zero exit or any other spawn error
        """
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got: {timeout}")

        command = [self.interpreter, *self.interpreter_args, script]
        logger.debug(
            f"Executing {self.interpreter} ({len(script)} chars, timeout {timeout:g}s): "
            f"{_preview(script)}"
        )

        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except (FileNotFoundError, PermissionError) as e:
            raise InterpreterNotFoundError(self.interpreter) from e
        except OSError as e:
            raise ExecutionFailedError(f"failed to execute {self.interpreter}: {e}") from e

        with process:
            try:
                stdout, stderr = self._wait(process, timeout, cancel)
            finally:
                # Timeout, cancel, KeyboardInterrupt: never leave the child running
                if process.poll() is None:
                    process.kill()
                    process.wait()

        if process.returncode != 0:
            logger.warning(f"{self.interpreter} exited with code {process.returncode}")
            raise ExecutionFailedError(
                f"{self.interpreter} execution failed with exit code "
                f"{process.returncode}: {stderr.strip()}",
                returncode=process.returncode,
                stderr=stderr,
            )

        return stdout

    def _wait(
        self,
        process: subprocess.Popen,
        timeout: float,
        cancel: Optional[threading.Event],
    ) -> Tuple[str, str]:
        """Collect output until exit, deadline or cancellation."""
        deadline = time.monotonic() + timeout
        while True:
            if cancel is not None and cancel.is_set():
                logger.info(f"Cancelling {self.interpreter} (pid {process.pid})")
                raise ExecutionCancelledError()

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(f"{self.interpreter} timed out after {timeout:g}s")
                raise ExecutionTimeoutError(timeout)

            wait = remaining if cancel is None else min(remaining, self.poll_interval)
            try:
                return process.communicate(timeout=wait)
            except subprocess.TimeoutExpired:
                continue
