"""Shared fixtures: keep Logfire local and point data_dir at a temp directory."""

from pathlib import Path

import logfire
import pytest

from fairhouse.config import get_settings
from fairhouse.engine import SettlementEngine
from fairhouse.storage.state import CasinoState

logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    monkeypatch.setenv("DATA_DIR", str(path))
    monkeypatch.delenv("LOGFIRE_TOKEN", raising=False)
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


@pytest.fixture
def engine() -> SettlementEngine:
    return SettlementEngine(CasinoState(next_bet_id=1, total_funds=0))
