"""Single-operation host: load state, execute, persist on success."""

import logging
import time

from fairhouse.config import get_settings
from fairhouse.engine import SettlementEngine
from fairhouse.models import Operation, Response
from fairhouse.storage.state import load_state, save_state

logger = logging.getLogger(__name__)


def now_micros() -> int:
    """Logical timestamp in microseconds since the epoch."""
    return time.time_ns() // 1_000


def load_engine() -> SettlementEngine:
    settings = get_settings()
    return SettlementEngine(load_state(), amount_decimals=settings.casino.amount_decimals)


def run_operation(operation: Operation, caller: str, timestamp: int | None = None) -> Response:
    """Execute one operation against the persisted state.

    State is written only when the engine accepts the operation; a rejected
    operation raises and leaves data/state.yaml as it was.
    """
    engine = load_engine()
    response = engine.execute(
        operation,
        caller=caller,
        timestamp=now_micros() if timestamp is None else timestamp,
    )
    save_state(engine.state)
    logger.debug(f"Persisted state after {operation.kind} by {caller}")
    return response
