# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Shared CLI state and error reporting.

The root callback stores an AppState on the typer context; commands pull
the service from it and run inside handle_errors(), which turns failures
into an "Error: ..." line on stderr and a kind-specific exit code.
"""

import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import typer

from lazyfocus.bridge.errors import BridgeError, ErrorKind
from lazyfocus.config import Config, ConfigError, load_config
from lazyfocus.dateparse import DateParseError
from lazyfocus.models import TaskInputError
from lazyfocus.service import OmniFocusService, build_service
from lazyfocus.taskparse import TaskParseError

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_GENERAL = 1
EXIT_OMNIFOCUS = 2
EXIT_NOT_FOUND = 3
EXIT_VALIDATION = 4

OMNIFOCUS_KINDS = {
    ErrorKind.NOT_AVAILABLE,
    ErrorKind.TIMEOUT,
    ErrorKind.EXECUTION_FAILED,
    ErrorKind.INTERPRETER_NOT_FOUND,
    ErrorKind.APPLICATION_ERROR,
    ErrorKind.MALFORMED_RESPONSE,
}

SUGGESTIONS = {
    ErrorKind.NOT_AVAILABLE: "Start OmniFocus and try again",
    ErrorKind.TIMEOUT: "OmniFocus may be busy; try again or raise --timeout",
    ErrorKind.INTERPRETER_NOT_FOUND: "osascript ships with macOS; check interpreter.path in your config",
    ErrorKind.EXECUTION_FAILED: "Check that automation permission is granted to your terminal",
    ErrorKind.VALIDATION: "IDs may only contain letters, digits, hyphens and underscores",
}

DATE_SUGGESTION = "Use relative (tomorrow), next (next monday), in (in 3 days), or ISO format"


@dataclass
class AppState:
    """Per-invocation CLI state stored on the root typer context."""

    json_output: bool = False
    timeout: Optional[float] = None
    config_path: Optional[str] = None
    config: Optional[Config] = None
    service: Optional[OmniFocusService] = None

    @property
    def format_type(self) -> str:
        if self.json_output:
            return "json"
        return self.get_config().output_format

    def get_config(self) -> Config:
        if self.config is None:
            config = load_config(self.config_path)
            if self.timeout is not None:
                config = dataclasses.replace(config, timeout=self.timeout)
            self.config = config
        return self.config

    def get_service(self) -> OmniFocusService:
        if self.service is None:
            self.service = build_service(self.get_config())
        return self.service


def get_state(ctx: typer.Context) -> AppState:
    """AppState from the typer context (created if the callback did not run)."""
    if not isinstance(ctx.obj, AppState):
        ctx.obj = AppState()
    return ctx.obj


def exit_code_for(error: BridgeError) -> int:
    if error.kind is ErrorKind.VALIDATION:
        return EXIT_VALIDATION
    if error.kind is ErrorKind.APPLICATION_ERROR and "not found" in error.message.lower():
        return EXIT_NOT_FOUND
    if error.kind in OMNIFOCUS_KINDS:
        return EXIT_OMNIFOCUS
    return EXIT_GENERAL


def fail(message: str, code: int, suggestion: Optional[str] = None) -> None:
    """Print an error (and optional suggestion) to stderr and exit."""
    typer.echo(f"Error: {message}", err=True)
    if suggestion:
        typer.echo(suggestion, err=True)
    raise typer.Exit(code)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Map failures raised by a command body to stderr output and exit codes."""
    try:
        yield
    except BridgeError as e:
        logger.debug(f"Bridge error ({e.kind.value}): {e.message}")
        fail(e.message, exit_code_for(e), SUGGESTIONS.get(e.kind))
    except DateParseError as e:
        fail(str(e), EXIT_VALIDATION, DATE_SUGGESTION)
    except (TaskInputError, TaskParseError) as e:
        fail(str(e), EXIT_VALIDATION)
    except (ConfigError, FileNotFoundError) as e:
        fail(str(e), EXIT_GENERAL)
