from enum import Enum


class ErrorKind(str, Enum):
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    NOT_FOUND = "NotFound"
    UNAUTHORIZED = "Unauthorized"
    INVALID_REVEAL = "InvalidReveal"
    # Never raised: outcome calculators substitute defaults for bad params.
    MALFORMED_PARAMETERS = "MalformedParameters"


class CasinoError(Exception):
    """Base exception for rejected casino operations."""

    kind: ErrorKind

    def __init__(self, message: str, bet_id: int | None = None):
        super().__init__(message)
        self.bet_id = bet_id


class InsufficientFundsError(CasinoError):
    """Requested debit exceeds the player's balance."""

    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, player: str, requested: int, available: int):
        super().__init__(
            f"Insufficient balance for {player}: requested {requested}, available {available}"
        )
        self.player = player
        self.requested = requested
        self.available = available


class BetNotFoundError(CasinoError):
    """Bet id is unknown or already settled."""

    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(CasinoError):
    """Caller is not the owner of the bet."""

    kind = ErrorKind.UNAUTHORIZED


class InvalidRevealError(CasinoError):
    """Revealed value does not hash to the stored commitment."""

    kind = ErrorKind.INVALID_REVEAL
