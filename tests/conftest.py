"""Shared fakes for the command/event boundary and the settings store."""

import asyncio
import os
from typing import Any

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from mullvad_status.bridge import CommandBridge


class DictSettings:
    """In-memory stand-in for QSettings."""

    def __init__(self, initial: dict = None):
        self.data = dict(initial or {})

    def value(self, key: str, defaultValue: Any = None) -> Any:
        return self.data.get(key, defaultValue)

    def setValue(self, key: str, value: Any) -> None:
        self.data[key] = value


class RecordingRoot:
    """Theme root that records every marker change."""

    def __init__(self):
        self.calls: list[tuple[str, bool]] = []

    def set_marker(self, name: str, enabled: bool) -> None:
        self.calls.append((name, enabled))


async def drain(rounds: int = 5) -> None:
    """Let callbacks scheduled on the loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def bridge():
    return CommandBridge()


@pytest.fixture
def settings():
    return DictSettings()


@pytest.fixture
def root():
    return RecordingRoot()
