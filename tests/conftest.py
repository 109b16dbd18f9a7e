"""Shared fixtures for LazyFocus tests."""

import json
from typing import Any, List, Optional, Tuple

import pytest


class StubExecutor:
    """Executor double: replays canned outputs or errors and records calls.

    Each entry in ``responses`` is either a string (returned as stdout), a
    dict (JSON-encoded and returned) or an exception instance (raised).
    The last entry repeats once the list is exhausted.
    """

    def __init__(self, *responses: Any):
        self.responses = list(responses) or ["{}"]
        self.calls: List[Tuple[str, float]] = []

    def execute(self, script: str, cancel=None) -> str:
        return self.execute_with_timeout(script, 30.0, cancel=cancel)

    def execute_with_timeout(self, script: str, timeout: float, cancel=None) -> str:
        self.calls.append((script, timeout))
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        response = self.responses[index]
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response

    @property
    def last_script(self) -> Optional[str]:
        return self.calls[-1][0] if self.calls else None


@pytest.fixture
def stub_executor():
    """Factory for StubExecutor instances."""
    return StubExecutor


@pytest.fixture
def task_payload():
    """A task in wire format."""
    return {
        "id": "task-1",
        "name": "Buy milk",
        "note": "2%",
        "projectId": "proj-1",
        "projectName": "Errands",
        "tags": ["errands", "quick"],
        "dueDate": "2027-01-15T17:00:00Z",
        "deferDate": None,
        "flagged": True,
        "completed": False,
        "completedDate": None,
    }
