"""European roulette: a single pocket in [0, 36]."""

from .base import GameResult, game_digest, parse_u32, read_u32

TAG = b"roulette"
POCKETS = 37

STRAIGHT_MULTIPLIER = 3600
EVEN_MONEY_MULTIPLIER = 200

RED_NUMBERS = frozenset(
    {1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36}
)

DEFAULT_BET = ("straight", "0")


def spin(reveal: bytes) -> int:
    """Winning pocket for a reveal value."""
    return read_u32(game_digest(reveal, TAG)) % POCKETS


def _parse_bet(game_params: str) -> tuple[str, str]:
    parts = game_params.split(":")
    if len(parts) < 2:
        return DEFAULT_BET
    return parts[0], parts[1]


def _even_money(won: bool) -> int:
    return EVEN_MONEY_MULTIPLIER if won else 0


def bet_multiplier(result: int, bet_type: str, bet_value: str) -> int:
    """Payout multiplier for a bet against a winning pocket.

    Zero loses every even-money bet. For the two-sided bets, anything other
    than the named side (``red``, ``even``, ``high``) backs the opposite side.
    """
    if bet_type in ("number", "straight"):
        number = parse_u32(bet_value, default=-1)
        return STRAIGHT_MULTIPLIER if number == result else 0
    if bet_type not in ("color", "odd_even", "high_low") or result == 0:
        return 0
    if bet_type == "color":
        return _even_money((result in RED_NUMBERS) == (bet_value == "red"))
    if bet_type == "odd_even":
        return _even_money((result % 2 == 0) == (bet_value == "even"))
    return _even_money((result >= 19) == (bet_value == "high"))


def calculate_outcome(reveal: bytes, game_params: str) -> GameResult:
    result = spin(reveal)
    bet_type, bet_value = _parse_bet(game_params)
    return GameResult(
        description=f"Roulette: {result}, Bet: {bet_type}:{bet_value}",
        multiplier=bet_multiplier(result, bet_type, bet_value),
    )
