"""Pytest configuration for test isolation.

The CLI and the backend client read ``KIOSK_*`` variables from the process
environment (and the CLI loads a ``.env`` from the working directory). A
developer's local configuration must never leak into tests, so every test
starts from a clean slate and runs from its own temporary directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

_KIOSK_VARS = (
    "KIOSK_API_BASE_URL",
    "KIOSK_KEY",
    "KIOSK_POINT_ID",
    "KIOSK_PIX_CITY",
    "KIOSK_HTTP_TIMEOUT",
    "KIOSK_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _KIOSK_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
