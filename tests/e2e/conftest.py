"""Shared fixtures for end-to-end tests against a real server process."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from deepseek_agent.config import ClientSettings

STUB_SERVER = Path(__file__).with_name("stub_server.py")


def stub_settings(mode: str = "ok") -> ClientSettings:
    return ClientSettings(server_command=shlex.join([sys.executable, str(STUB_SERVER), mode]))


@pytest.fixture
def ok_settings() -> ClientSettings:
    return stub_settings("ok")


@pytest.fixture
def failing_settings() -> ClientSettings:
    return stub_settings("failing")


@pytest.fixture
def empty_settings() -> ClientSettings:
    return stub_settings("empty")


@pytest.fixture
def stub_command() -> list[str]:
    return [sys.executable, str(STUB_SERVER), "ok"]
