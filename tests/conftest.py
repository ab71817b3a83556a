from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.delenv("PCDRIVER_TIMEOUT", raising=False)
    monkeypatch.delenv("PCDRIVER_RETRIEVE_STATUS", raising=False)
