"""Shared fixtures for resolver tests."""

from typing import List

import pytest


class ScriptedChannel:
    """Interactive channel fed from a list of lines."""

    def __init__(self, lines: List[str]):
        self.lines = list(lines)
        self.output: List[str] = []
        self.closed = False

    def write(self, text: str) -> None:
        self.output.append(text)

    def read_line(self):
        if not self.lines:
            return None
        return self.lines.pop(0) + "\n"

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def scripted_channel():
    """Factory for scripted channels."""
    return ScriptedChannel
