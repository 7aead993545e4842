from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_log_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("RETROFX_LOG_DIR", str(log_dir))
    monkeypatch.delenv("RETROFX_SAMPLE_RATE", raising=False)
    monkeypatch.delenv("RETROFX_MAX_DURATION", raising=False)
    monkeypatch.delenv("RETROFX_DEBUG", raising=False)
    return log_dir
