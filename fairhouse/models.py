from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

from fairhouse.commitment import DIGEST_SIZE
from fairhouse.games import GameType

U128_MAX = 2**128 - 1
U64_MAX = 2**64 - 1

DEFAULT_DECIMALS = 18


def _decode_bytes32(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Invalid hex value: {e}") from e
    else:
        raise ValueError(f"Expected bytes or hex string, got {type(value).__name__}")

    if len(raw) != DIGEST_SIZE:
        raise ValueError(f"Expected {DIGEST_SIZE} bytes, got {len(raw)}")
    return raw


Bytes32 = Annotated[
    bytes,
    BeforeValidator(_decode_bytes32),
    PlainSerializer(lambda v: v.hex(), return_type=str, when_used="json"),
]

# Minor units ("attos"); the ledger stores 128-bit balances
Amount = Annotated[int, Field(ge=0, le=U128_MAX)]


def format_amount(value: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Render minor units as decimal tokens: 10**18 -> "1.", 5 * 10**17 -> "0.5"."""
    digits = str(value).rjust(decimals + 1, "0")
    if decimals == 0:
        return f"{digits}."
    integral, fractional = digits[:-decimals], digits[-decimals:]
    return f"{integral}.{fractional.rstrip('0')}"


def _parse_game_type(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, GameType):
        return GameType.parse(value)
    return value


# ============================================================================
# Persisted records
# ============================================================================


class PendingBet(BaseModel):
    """Committed bet awaiting its reveal. Replaced, never edited."""

    model_config = ConfigDict(frozen=True)

    bet_id: int
    owner: str
    game_type: GameType
    bet_amount: Amount
    commit_hash: Bytes32
    game_params: str = ""
    placed_at: int

    @field_validator("game_type", mode="before")
    @classmethod
    def parse_game_type(cls, v: Any) -> Any:
        return _parse_game_type(v)


class GameOutcome(BaseModel):
    """Settled bet as recorded in history. Amounts are in display form."""

    model_config = ConfigDict(frozen=True)

    bet_id: int
    game_type: str
    bet_amount: str
    payout_amount: str
    outcome_details: str
    timestamp: int
    placed_at: int | None = None


# ============================================================================
# Operations
# ============================================================================


class Deposit(BaseModel):
    kind: Literal["deposit"] = "deposit"
    amount: Amount


class Withdraw(BaseModel):
    kind: Literal["withdraw"] = "withdraw"
    amount: Amount


class PlaceBet(BaseModel):
    kind: Literal["place_bet"] = "place_bet"
    game_type: GameType
    bet_amount: Amount
    commit_hash: Bytes32
    game_params: str = ""

    @field_validator("game_type", mode="before")
    @classmethod
    def parse_game_type(cls, v: Any) -> Any:
        return _parse_game_type(v)


class Reveal(BaseModel):
    kind: Literal["reveal"] = "reveal"
    game_id: int = Field(ge=0)
    reveal_value: Bytes32


Operation = Annotated[
    Union[Deposit, Withdraw, PlaceBet, Reveal],
    Field(discriminator="kind"),
]


# ============================================================================
# Responses
# ============================================================================


class DepositSuccess(BaseModel):
    kind: Literal["deposit_success"] = "deposit_success"
    new_balance: int


class WithdrawSuccess(BaseModel):
    kind: Literal["withdraw_success"] = "withdraw_success"
    new_balance: int


class GamePlaced(BaseModel):
    kind: Literal["game_placed"] = "game_placed"
    game_id: int


class GameCompleted(BaseModel):
    kind: Literal["game_completed"] = "game_completed"
    game_id: int
    outcome: str
    payout: int


Response = Annotated[
    Union[DepositSuccess, WithdrawSuccess, GamePlaced, GameCompleted],
    Field(discriminator="kind"),
]
