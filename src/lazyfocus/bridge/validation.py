# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Parameter validation for script templates.

Parameter values are interpolated unescaped into generated script text, so
every value is checked against one of two policies before rendering:

- identifier: 1-100 characters from [A-Za-z0-9_-] only
- text: 1-100 characters, no control characters and none of ; | & $ ` " ' \\

The policy is normally declared in the script's metadata. When it is not,
a placeholder whose name ends in "ID" or "id" is an identifier and anything
else is free text.
"""

import re
import unicodedata
from enum import Enum
from typing import Optional

from lazyfocus.bridge.errors import ParameterValidationError


MAX_PARAM_LENGTH = 100

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

# Characters that could close a string literal or reach a shell
FORBIDDEN_TEXT_CHARS = frozenset(";|&$`\"'\\")


class ParamPolicy(Enum):
    """Validation policy for a single placeholder."""

    IDENTIFIER = "identifier"
    TEXT = "text"


def policy_for(name: str) -> ParamPolicy:
    """Infer the policy for a placeholder from its name."""
    if name.endswith("ID") or name.endswith("id"):
        return ParamPolicy.IDENTIFIER
    return ParamPolicy.TEXT


def _check_length(name: str, value: str) -> None:
    if not value:
        raise ParameterValidationError(name, "value cannot be empty")
    if len(value) > MAX_PARAM_LENGTH:
        raise ParameterValidationError(
            name, f"value too long: max {MAX_PARAM_LENGTH} characters"
        )


def validate_identifier(name: str, value: str) -> None:
    """Validate an identifier value.

    Raises:
        ParameterValidationError: If the value is empty, longer than 100
            characters or contains anything outside [A-Za-z0-9_-].
    """
    _check_length(name, value)
    if not IDENTIFIER_PATTERN.fullmatch(value):
        raise ParameterValidationError(
            name, "invalid ID format: only alphanumeric, hyphen, underscore allowed"
        )


def validate_text(name: str, value: str) -> None:
    """Validate a free-text value such as a task name.

    Spaces and ordinary punctuation are allowed.

    Raises:
        ParameterValidationError: If the value is empty, longer than 100
            characters, contains a control character or a quoting/shell
            metacharacter.
    """
    _check_length(name, value)
    for ch in value:
        if unicodedata.category(ch) == "Cc":
            raise ParameterValidationError(
                name, f"control character {ch!r} not allowed"
            )
        if ch in FORBIDDEN_TEXT_CHARS:
            raise ParameterValidationError(name, f"character {ch!r} not allowed")


def validate_param(name: str, value: str, policy: Optional[ParamPolicy] = None) -> None:
    """Validate a parameter value under its policy.

    Args:
        name: Placeholder name, used for policy inference and error messages.
        value: Caller-supplied value.
        policy: Explicit policy; inferred from the name when None.

    Raises:
        ParameterValidationError: Naming the parameter and the violated rule.
    """
    if not isinstance(value, str):
        raise ParameterValidationError(
            name, f"value must be a string, got {type(value).__name__}"
        )
    if policy is None:
        policy = policy_for(name)
    if policy is ParamPolicy.IDENTIFIER:
        validate_identifier(name, value)
    else:
        validate_text(name, value)
