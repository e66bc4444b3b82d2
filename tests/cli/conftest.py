"""Keep CLI tests independent of any `.env` file or collector set in the shell."""

from __future__ import annotations

from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def _no_dotenv():
    with patch("deepseek_agent.config.load_dotenv", return_value=False) as mock_load:
        yield mock_load


@pytest.fixture(autouse=True)
def _no_otlp_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
