"""Plinko: one digest bit per peg row decides left or right."""

from .base import GameResult, game_digest, parse_u32

TAG = b"plinko"

DEFAULT_ROWS = 16
MIN_ROWS = 8
MAX_ROWS = 16

# Landing slot -> multiplier, symmetric around the centre
MULTIPLIERS = (
    1000, 500, 300, 200, 150, 120, 110, 105, 100, 105, 110, 120, 150, 200, 300, 500, 1000,
)
MAX_SLOT = len(MULTIPLIERS) - 1


def parse_rows(game_params: str) -> int:
    rows = parse_u32(game_params, DEFAULT_ROWS)
    return max(MIN_ROWS, min(rows, MAX_ROWS))


def plinko_path(reveal: bytes, rows: int) -> str:
    """Ball path as an ``L``/``R`` string, reading digest bits LSB-first."""
    digest = game_digest(reveal, TAG)
    steps = []
    for i in range(rows):
        go_right = (digest[i // 8] >> (i % 8)) & 1 == 1
        steps.append("R" if go_right else "L")
    return "".join(steps)


def landing_slot(path: str, rows: int) -> int:
    """Normalise the final displacement into a multiplier table index."""
    position = rows // 2
    for step in path:
        position += 1 if step == "R" else -1
    return min((position + rows) // 2, MAX_SLOT)


def calculate_outcome(reveal: bytes, game_params: str) -> GameResult:
    rows = parse_rows(game_params)
    path = plinko_path(reveal, rows)
    slot = landing_slot(path, rows)
    return GameResult(
        description=f"Plinko: Position {slot}, Path: {path}",
        multiplier=MULTIPLIERS[slot],
    )
