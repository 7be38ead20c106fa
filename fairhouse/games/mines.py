"""Mines on a 5x5 grid: mine placement and cash-out multiplier.

Mine positions are drawn Fisher-Yates style from the digest. The multiplier is
the inverse of the exact survival probability for the revealed cells, scaled by
97 (a 3% house edge) and computed with integers only:

    P = prod((safe - i) / (total - i) for i in range(n))
    multiplier = floor(100 / P * 0.97) = (den * 97) // num
"""

from .base import GameResult, game_digest, parse_u32, read_u32

TAG = b"mines"

TOTAL_CELLS = 25
MIN_MINES = 1
MAX_MINES = 24
DEFAULT_MINES = 5
DEFAULT_CELLS_REVEALED = 0

HOUSE_EDGE_FACTOR = 97
MIN_MULTIPLIER = 100


def parse_params(game_params: str) -> tuple[int, int]:
    """Parse ``num_mines:cells_revealed`` into a clamped mine count and reveals."""
    parts = game_params.split(":")
    num_mines = parse_u32(parts[0] if parts else None, DEFAULT_MINES)
    cells_revealed = parse_u32(parts[1] if len(parts) > 1 else None, DEFAULT_CELLS_REVEALED)
    return max(MIN_MINES, min(num_mines, MAX_MINES)), cells_revealed


def mine_positions(reveal: bytes, num_mines: int) -> list[int]:
    """Cells holding a mine, in draw order."""
    digest = game_digest(reveal, TAG)
    remaining = list(range(TOTAL_CELLS))
    mines = []
    for draw in range(num_mines):
        if not remaining:
            break
        value = read_u32(digest, draw * 4)
        mines.append(remaining.pop(value % len(remaining)))
    return mines


def mines_multiplier(num_mines: int, cells_revealed: int) -> int:
    """Cash-out multiplier in hundredths after ``cells_revealed`` safe picks."""
    if cells_revealed == 0:
        return 0

    safe = TOTAL_CELLS - num_mines
    picks = min(cells_revealed, safe)

    numerator = 1
    denominator = 1
    for i in range(picks):
        numerator *= safe - i
        denominator *= TOTAL_CELLS - i

    if numerator == 0:
        return 0

    return max(denominator * HOUSE_EDGE_FACTOR // numerator, MIN_MULTIPLIER)


def calculate_outcome(reveal: bytes, game_params: str) -> GameResult:
    num_mines, cells_revealed = parse_params(game_params)
    mines = mine_positions(reveal, num_mines)
    layout = ",".join(str(cell) for cell in mines)
    return GameResult(
        description=f"Mines: {num_mines} mines at [{layout}], {cells_revealed} revealed",
        multiplier=mines_multiplier(num_mines, cells_revealed),
    )
