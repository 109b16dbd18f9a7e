# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Classified errors raised by the script bridge.

Every failure in the bridge is raised as exactly one BridgeError subclass.
Callers branch on ``error.kind`` (or the subclass) instead of matching
message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Fixed set of failure classes.

    validation / template_*: caller or asset bugs, never sent to a process
    interpreter_not_found: environment problem (tool missing)
    timeout: possibly transient, the only retried class
    execution_failed: interpreter exited non-zero or could not be spawned
    not_available: host application is not running
    application_error: host application reported an error
    malformed_response: stdout did not match the wire format
    cancelled: caller cancelled the call
    """

    VALIDATION = "validation"
    TEMPLATE_NOT_FOUND = "template_not_found"
    TEMPLATE_MALFORMED = "template_malformed"
    INTERPRETER_NOT_FOUND = "interpreter_not_found"
    TIMEOUT = "timeout"
    EXECUTION_FAILED = "execution_failed"
    NOT_AVAILABLE = "not_available"
    APPLICATION_ERROR = "application_error"
    MALFORMED_RESPONSE = "malformed_response"
    CANCELLED = "cancelled"


class BridgeError(Exception):
    """Base class for all bridge failures."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParameterValidationError(BridgeError):
    """Raised when a parameter value could escape its place in a script."""

    kind = ErrorKind.VALIDATION

    def __init__(self, param: str, rule: str):
        super().__init__(f"invalid parameter {param!r}: {rule}")
        self.param = param
        self.rule = rule


class TemplateNotFoundError(BridgeError):
    """Raised when no script template exists under the requested name."""

    kind = ErrorKind.TEMPLATE_NOT_FOUND

    def __init__(self, name: str):
        super().__init__(f"script not found: {name}")
        self.name = name


class TemplateMalformedError(BridgeError):
    """Raised for bad placeholder syntax, bad metadata or unresolved holes."""

    kind = ErrorKind.TEMPLATE_MALFORMED

    def __init__(self, name: str, detail: str):
        super().__init__(f"malformed script template {name!r}: {detail}")
        self.name = name
        self.detail = detail


class InterpreterNotFoundError(BridgeError):
    """Raised when the scripting interpreter binary cannot be launched."""

    kind = ErrorKind.INTERPRETER_NOT_FOUND

    def __init__(self, interpreter: str):
        super().__init__(f"{interpreter} not found")
        self.interpreter = interpreter


class ExecutionTimeoutError(BridgeError):
    """Raised when the interpreter did not finish before its deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout: float):
        super().__init__(f"script execution timed out after {timeout:g}s")
        self.timeout = timeout


class ExecutionFailedError(BridgeError):
    """Raised when the interpreter exits non-zero or fails to spawn."""

    kind = ErrorKind.EXECUTION_FAILED

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class NotAvailableError(BridgeError):
    """Raised when the host application reports that it is not running."""

    kind = ErrorKind.NOT_AVAILABLE


class ApplicationError(BridgeError):
    """Raised when the host application reports any other error.

    The message is carried verbatim from the response's ``error`` field.
    """

    kind = ErrorKind.APPLICATION_ERROR


class MalformedResponseError(BridgeError):
    """Raised when interpreter output does not match the expected shape."""

    kind = ErrorKind.MALFORMED_RESPONSE


class ExecutionCancelledError(BridgeError):
    """Raised when the caller cancels a running or pending execution."""

    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "script execution cancelled"):
        super().__init__(message)
