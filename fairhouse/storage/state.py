"""Casino state and its YAML persistence in data/state.yaml."""

import logging
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from fairhouse.config import get_settings
from fairhouse.models import U64_MAX, GameOutcome, PendingBet

logger = logging.getLogger(__name__)


class CasinoState(BaseModel):
    """Everything the casino persists between operations."""

    last_updated: datetime | None = None
    next_bet_id: int = Field(default=1, ge=0)
    total_funds: int = Field(default=0, ge=0, le=U64_MAX)
    player_balances: dict[str, int] = Field(default_factory=dict)
    pending_bets: dict[int, PendingBet] = Field(default_factory=dict)
    history: list[GameOutcome] = Field(default_factory=list)

    def fork(self) -> "CasinoState":
        """Working copy for one operation.

        Containers are copied; records are frozen models and are shared.
        """
        return self.model_copy(
            update={
                "player_balances": dict(self.player_balances),
                "pending_bets": dict(self.pending_bets),
                "history": list(self.history),
            }
        )


STATE_FILENAME = "state.yaml"


def get_data_dir() -> Path:
    """Configured data directory; it must already exist."""
    data_dir = get_settings().data_dir
    if not data_dir.is_dir():
        raise FileNotFoundError(
            f"Data directory {data_dir} does not exist. "
            "Run 'python -m fairhouse init' first."
        )
    return data_dir


def state_path() -> Path:
    return get_data_dir() / STATE_FILENAME


def create_default_state() -> CasinoState:
    """Fresh state seeded from the casino config."""
    casino = get_settings().casino
    return CasinoState(
        next_bet_id=casino.first_bet_id,
        total_funds=casino.initial_funds,
    )


def load_state() -> CasinoState:
    """Read the persisted state, or a fresh one when nothing is stored yet."""
    path = state_path()

    if not path.exists():
        logger.info(f"No {STATE_FILENAME} yet at {path}; starting from defaults")
        return create_default_state()

    try:
        with open(path, "r", encoding="utf-8") as f:
            stored = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Unreadable casino state in {path}: {e}")
        raise

    if not stored:
        logger.warning(f"{path} is empty; starting from defaults")
        return create_default_state()

    state = CasinoState.model_validate(stored)
    logger.debug(
        f"Loaded state: next_bet_id={state.next_bet_id} "
        f"pending={len(state.pending_bets)} settled={len(state.history)}"
    )
    return state


def save_state(state: CasinoState) -> None:
    """Persist ``state`` atomically.

    The YAML is written to a sibling temp file that is then moved over
    state.yaml; readers see either the old file or the new one.
    """
    path = state_path()
    state.last_updated = datetime.now(timezone.utc)
    document = state.model_dump(mode="json")

    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", dir=path.parent, prefix=".state-", suffix=".yaml", delete=False, encoding="utf-8"
        ) as tmp:
            tmp_name = tmp.name
            yaml.safe_dump(document, tmp, sort_keys=False, allow_unicode=True)
        shutil.move(tmp_name, path)
    except Exception as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        logger.error(f"Could not write {path}: {e}")
        raise

    logger.debug(f"Saved state to {path} (next_bet_id={state.next_bet_id})")
