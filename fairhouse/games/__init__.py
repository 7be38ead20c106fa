"""Deterministic outcome calculators, one per game.

Each calculator maps ``(reveal, game_params)`` to a ``GameResult`` using only
integer arithmetic over a SHA3-256 stream tagged with the game's name.
"""

from typing import Callable

from . import mines, plinko, roulette, wheel
from .base import GameResult, GameType

OutcomeCalculator = Callable[[bytes, str], GameResult]

CALCULATORS: dict[GameType, OutcomeCalculator] = {
    GameType.ROULETTE: roulette.calculate_outcome,
    GameType.PLINKO: plinko.calculate_outcome,
    GameType.MINES: mines.calculate_outcome,
    GameType.WHEEL: wheel.calculate_outcome,
}

_missing = set(GameType) - set(CALCULATORS)
if _missing:
    raise RuntimeError(f"No outcome calculator registered for: {sorted(g.value for g in _missing)}")


def compute_outcome(game_type: GameType, reveal: bytes, game_params: str) -> GameResult:
    """Run the calculator for ``game_type``."""
    return CALCULATORS[GameType(game_type)](reveal, game_params)


__all__ = [
    "CALCULATORS",
    "GameResult",
    "GameType",
    "OutcomeCalculator",
    "compute_outcome",
]
