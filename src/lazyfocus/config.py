# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Configuration loading for LazyFocus.

Reads ~/.lazyfocus.yaml (or an explicit path), applies environment
overrides, and returns a frozen Config that is passed to constructors.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from lazyfocus.bridge.executor import DEFAULT_INTERPRETER, DEFAULT_INTERPRETER_ARGS, DEFAULT_TIMEOUT
from lazyfocus.bridge.parser import NOT_RUNNING_MESSAGE
from lazyfocus.bridge.retry import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".lazyfocus.yaml"
OUTPUT_FORMATS = ("human", "json")

ENV_TIMEOUT = "LAZYFOCUS_TIMEOUT"
ENV_OUTPUT_FORMAT = "LAZYFOCUS_OUTPUT_FORMAT"

DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*$")
DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0}


class ConfigError(Exception):
    """Raised when configuration is invalid."""

    pass


@dataclass(frozen=True)
class Config:
    """Resolved LazyFocus configuration."""

    timeout: float = DEFAULT_TIMEOUT
    output_format: str = "human"
    interpreter: str = DEFAULT_INTERPRETER
    interpreter_args: Tuple[str, ...] = DEFAULT_INTERPRETER_ARGS
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    not_running_message: str = NOT_RUNNING_MESSAGE
    source: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timeout": self.timeout,
            "output": {"format": self.output_format},
            "interpreter": {"path": self.interpreter, "args": list(self.interpreter_args)},
            "retry": {
                "max_attempts": self.retry.max_attempts,
                "initial_wait": self.retry.initial_wait,
                "max_wait": self.retry.max_wait,
            },
            "not_running_message": self.not_running_message,
        }


def parse_duration(value: Union[str, int, float], key: str = "duration") -> float:
    """Parse a duration into seconds.

    Accepts a bare number of seconds or a number with an ms/s/m suffix
    ("100ms", "2s", "1.5m").

    Raises:
        ConfigError: If the value is not a positive duration.
    """
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected a duration, got: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        match = DURATION_PATTERN.match(value)
        if not match:
            raise ConfigError(f"{key}: invalid duration: {value!r}")
        seconds = float(match.group(1)) * DURATION_UNITS[match.group(2) or "s"]
    else:
        raise ConfigError(f"{key}: expected a duration, got: {value!r}")

    if seconds <= 0:
        raise ConfigError(f"{key}: duration must be positive, got: {value!r}")
    return seconds


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{key}: expected a mapping")
    return section


def _output_format(value: Any, key: str) -> str:
    if value not in OUTPUT_FORMATS:
        raise ConfigError(f"{key}: must be one of {', '.join(OUTPUT_FORMATS)}, got: {value!r}")
    return value


def _build_config(data: Mapping[str, Any], env: Mapping[str, str], source: Optional[Path]) -> Config:
    output = _section(data, "output")
    interpreter = _section(data, "interpreter")
    retry = _section(data, "retry")

    timeout = parse_duration(data.get("timeout", DEFAULT_TIMEOUT), "timeout")
    output_format = _output_format(output.get("format", "human"), "output.format")

    if env.get(ENV_TIMEOUT):
        timeout = parse_duration(env[ENV_TIMEOUT], ENV_TIMEOUT)
    if env.get(ENV_OUTPUT_FORMAT):
        output_format = _output_format(env[ENV_OUTPUT_FORMAT], ENV_OUTPUT_FORMAT)

    interpreter_path = interpreter.get("path", DEFAULT_INTERPRETER)
    if not isinstance(interpreter_path, str) or not interpreter_path:
        raise ConfigError("interpreter.path: expected a non-empty string")

    interpreter_args = interpreter.get("args", list(DEFAULT_INTERPRETER_ARGS))
    if not isinstance(interpreter_args, list) or not all(isinstance(a, str) for a in interpreter_args):
        raise ConfigError("interpreter.args: expected a list of strings")

    max_attempts = retry.get("max_attempts", 3)
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int):
        raise ConfigError(f"retry.max_attempts: expected an integer, got: {max_attempts!r}")

    try:
        policy = RetryPolicy(
            max_attempts=max_attempts,
            initial_wait=parse_duration(retry.get("initial_wait", "100ms"), "retry.initial_wait"),
            max_wait=parse_duration(retry.get("max_wait", "2s"), "retry.max_wait"),
        )
    except ValueError as e:
        raise ConfigError(f"retry: {e}") from e

    not_running_message = data.get("not_running_message", NOT_RUNNING_MESSAGE)
    if not isinstance(not_running_message, str) or not not_running_message:
        raise ConfigError("not_running_message: expected a non-empty string")

    return Config(
        timeout=timeout,
        output_format=output_format,
        interpreter=interpreter_path,
        interpreter_args=tuple(interpreter_args),
        retry=policy,
        not_running_message=not_running_message,
        source=source,
    )


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Load configuration from YAML plus environment overrides.

    Args:
        config_path: Explicit config file. When None, ~/.lazyfocus.yaml is
            used if it exists, otherwise defaults apply.
        env: Environment mapping, defaults to os.environ

    Returns:
        Resolved Config

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ConfigError: If the file is not valid YAML or holds invalid values
    """
    env = os.environ if env is None else env

    if config_path is not None:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    elif DEFAULT_CONFIG_PATH.exists():
        path = DEFAULT_CONFIG_PATH
    else:
        path = None

    data: Dict[str, Any] = {}
    if path is not None:
        logger.debug(f"Loading config from {path}")
        try:
            with open(path) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{path}: expected a mapping at top level")
        data = loaded or {}

    return _build_config(data, env, path)
