# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Quick-add syntax for task names.

    Review PR @Work due:tomorrow #urgent !
    Call "Bob" @"Client Work" defer:"next monday"

``#tag`` adds a tag, ``@project`` or ``@"Project Name"`` picks the first
project, ``due:`` and ``defer:`` take a date (quoted when it has spaces)
and ``!`` flags the task. Whatever is left is the task name.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from lazyfocus.dateparse import DateParseError, parse_date

TAG_PATTERN = re.compile(r"#([a-zA-Z0-9_-]+)")
PROJECT_PATTERN = re.compile(r'@"([^"]+)"|@([a-zA-Z0-9_-]+)')
DUE_PATTERN = re.compile(r'due:"([^"]+)"|due:([a-zA-Z0-9_-]+)')
DEFER_PATTERN = re.compile(r'defer:"([^"]+)"|defer:([a-zA-Z0-9_-]+)')
FLAG_PATTERN = re.compile(r"!")
WHITESPACE_PATTERN = re.compile(r"\s+")

MODIFIER_PATTERNS = (TAG_PATTERN, PROJECT_PATTERN, DUE_PATTERN, DEFER_PATTERN, FLAG_PATTERN)


class TaskParseError(ValueError):
    """Raised when quick-add text has no usable task name."""

    pass


@dataclass
class QuickAdd:
    """Fields extracted from quick-add text."""

    name: str
    tag_names: List[str] = field(default_factory=list)
    project_name: str = ""
    due_date: Optional[datetime] = None
    defer_date: Optional[datetime] = None
    flagged: Optional[bool] = None


def _value(match: "re.Match") -> str:
    # Group 1 is the quoted form, group 2 the bare word
    return match.group(1) or match.group(2)


def _date(pattern: re.Pattern, text: str, label: str, now: Optional[datetime]) -> Optional[datetime]:
    match = pattern.search(text)
    if match is None:
        return None
    try:
        return parse_date(_value(match), now=now)
    except DateParseError as e:
        raise DateParseError(f"invalid {label} date: {e}") from e


def parse_task_text(text: str, now: Optional[datetime] = None) -> QuickAdd:
    """
    Split quick-add text into a task name and its modifiers.

    Args:
        text: Raw task text from the command line
        now: Reference time for relative dates (default: current time)

    Returns:
        QuickAdd with the remaining text as the name

    Raises:
        TaskParseError: If the text is empty or only modifiers
        DateParseError: If a due: or defer: value is not a date
    """
    if not text.strip():
        raise TaskParseError("empty task input")

    project = PROJECT_PATTERN.search(text)
    result = QuickAdd(
        name="",
        tag_names=TAG_PATTERN.findall(text),
        project_name=_value(project) if project else "",
        due_date=_date(DUE_PATTERN, text, "due", now),
        defer_date=_date(DEFER_PATTERN, text, "defer", now),
        flagged=True if FLAG_PATTERN.search(text) else None,
    )

    name = text
    for pattern in MODIFIER_PATTERNS:
        name = pattern.sub("", name)
    name = WHITESPACE_PATTERN.sub(" ", name).strip()
    if not name:
        raise TaskParseError("task name is required")

    result.name = name
    return result
