"""Settlement engine: the bet lifecycle from escrow to payout.

A bet is ``Placed`` when the stake is escrowed and its commitment stored, and
``Settled`` once a reveal matching the commitment has been scored, paid and
written to history. There is no expiry; an unrevealed bet stays placed.

Each operation runs against a fork of the state. The fork replaces the live
state only when the operation succeeds, so a rejected operation changes
nothing.
"""

from __future__ import annotations

import logging
from typing import Iterator

import logfire

from fairhouse.commitment import verify
from fairhouse.exceptions import BetNotFoundError, InvalidRevealError, UnauthorizedError
from fairhouse.games import compute_outcome
from fairhouse.ledger import Ledger
from fairhouse.models import (
    DEFAULT_DECIMALS,
    Deposit,
    DepositSuccess,
    GameCompleted,
    GameOutcome,
    GamePlaced,
    Operation,
    PendingBet,
    PlaceBet,
    Response,
    Reveal,
    Withdraw,
    WithdrawSuccess,
    format_amount,
)
from fairhouse.storage.state import CasinoState

logger = logging.getLogger(__name__)

PERCENT = 100


class PendingBetStore:
    """Bets awaiting reveal, keyed by bet id."""

    def __init__(self, state: CasinoState):
        self._bets = state.pending_bets

    def insert(self, bet: PendingBet) -> None:
        if bet.bet_id in self._bets:
            raise ValueError(f"Bet id {bet.bet_id} is already pending")
        self._bets[bet.bet_id] = bet

    def get(self, bet_id: int) -> PendingBet | None:
        return self._bets.get(bet_id)

    def remove(self, bet_id: int) -> PendingBet:
        try:
            return self._bets.pop(bet_id)
        except KeyError:
            raise BetNotFoundError(f"Bet {bet_id} not found", bet_id=bet_id) from None

    def __len__(self) -> int:
        return len(self._bets)

    def __iter__(self) -> Iterator[PendingBet]:
        return iter(self._bets.values())


class HistoryLog:
    """Append-only record of settled bets in settlement order."""

    def __init__(self, state: CasinoState):
        self._entries = state.history

    def append(self, outcome: GameOutcome) -> None:
        self._entries.append(outcome)

    def entries(self) -> tuple[GameOutcome, ...]:
        return tuple(self._entries)

    def find(self, bet_id: int) -> GameOutcome | None:
        return next((e for e in self._entries if e.bet_id == bet_id), None)

    def __len__(self) -> int:
        return len(self._entries)


def calculate_payout(bet_amount: int, multiplier: int) -> int:
    """Stake times multiplier, where a multiplier of 100 returns the stake."""
    return bet_amount * multiplier // PERCENT


class _Books:
    """Ledger, pending store and history over one working state."""

    def __init__(self, state: CasinoState):
        self.state = state
        self.ledger = Ledger(state)
        self.pending = PendingBetStore(state)
        self.history = HistoryLog(state)


class SettlementEngine:
    """Executes casino operations against an explicitly owned state."""

    def __init__(self, state: CasinoState, amount_decimals: int = DEFAULT_DECIMALS):
        self._state = state
        self.amount_decimals = amount_decimals

    @property
    def state(self) -> CasinoState:
        """Live state, for persisting between operations."""
        return self._state

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def execute(self, operation: Operation, caller: str, timestamp: int) -> Response:
        """Apply ``operation`` for ``caller`` at logical time ``timestamp``.

        Raises a ``CasinoError`` subclass when the operation is rejected; the
        live state is untouched in that case.
        """
        books = _Books(self._state.fork())

        if isinstance(operation, Deposit):
            handler = self._deposit
        elif isinstance(operation, Withdraw):
            handler = self._withdraw
        elif isinstance(operation, PlaceBet):
            handler = self._place_bet
        elif isinstance(operation, Reveal):
            handler = self._reveal
        else:
            raise TypeError(f"Unsupported operation: {type(operation).__name__}")

        with logfire.span("settlement.{kind}", kind=operation.kind, caller=caller):
            response = handler(books, operation, caller, timestamp)

        self._state = books.state
        return response

    def _deposit(self, books: _Books, op: Deposit, caller: str, timestamp: int) -> DepositSuccess:
        new_balance = books.ledger.deposit(caller, op.amount)
        logger.info(f"Deposit: {caller} +{op.amount} -> {new_balance}")
        return DepositSuccess(new_balance=new_balance)

    def _withdraw(self, books: _Books, op: Withdraw, caller: str, timestamp: int) -> WithdrawSuccess:
        new_balance = books.ledger.withdraw(caller, op.amount)
        logger.info(f"Withdraw: {caller} -{op.amount} -> {new_balance}")
        return WithdrawSuccess(new_balance=new_balance)

    def _place_bet(self, books: _Books, op: PlaceBet, caller: str, timestamp: int) -> GamePlaced:
        bet_id = books.state.next_bet_id

        # Escrow the stake before the bet exists
        books.ledger.debit(caller, op.bet_amount)
        books.pending.insert(
            PendingBet(
                bet_id=bet_id,
                owner=caller,
                game_type=op.game_type,
                bet_amount=op.bet_amount,
                commit_hash=op.commit_hash,
                game_params=op.game_params,
                placed_at=timestamp,
            )
        )
        books.state.next_bet_id = bet_id + 1

        logger.info(
            f"Bet placed: id={bet_id} player={caller} game={op.game_type.value} "
            f"amount={op.bet_amount}"
        )
        return GamePlaced(game_id=bet_id)

    def _reveal(self, books: _Books, op: Reveal, caller: str, timestamp: int) -> GameCompleted:
        bet = books.pending.get(op.game_id)
        if bet is None:
            raise BetNotFoundError(f"Bet {op.game_id} not found", bet_id=op.game_id)
        if bet.owner != caller:
            raise UnauthorizedError(
                f"Only the owner of bet {op.game_id} can reveal it", bet_id=op.game_id
            )
        if not verify(op.reveal_value, bet.commit_hash):
            raise InvalidRevealError(
                f"Reveal value does not match commitment for bet {op.game_id}",
                bet_id=op.game_id,
            )

        result = compute_outcome(bet.game_type, op.reveal_value, bet.game_params)
        payout = calculate_payout(bet.bet_amount, result.multiplier)

        books.ledger.credit(caller, payout)
        books.history.append(
            GameOutcome(
                bet_id=bet.bet_id,
                game_type=bet.game_type.value,
                bet_amount=format_amount(bet.bet_amount, self.amount_decimals),
                payout_amount=format_amount(payout, self.amount_decimals),
                outcome_details=result.description,
                timestamp=timestamp,
                placed_at=bet.placed_at,
            )
        )
        books.pending.remove(bet.bet_id)

        logger.info(
            f"Bet settled: id={bet.bet_id} player={caller} multiplier={result.multiplier} "
            f"payout={payout} outcome={result.description!r}"
        )
        return GameCompleted(game_id=bet.bet_id, outcome=result.description, payout=payout)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def next_bet_id(self) -> int:
        return self._state.next_bet_id

    @property
    def total_funds(self) -> int:
        return self._state.total_funds

    def balance_of(self, player: str) -> int:
        return self._state.player_balances.get(player, 0)

    def pending_bet(self, bet_id: int) -> PendingBet | None:
        return self._state.pending_bets.get(bet_id)

    def pending_bets(self) -> list[PendingBet]:
        return sorted(self._state.pending_bets.values(), key=lambda b: b.bet_id)

    def history(self) -> tuple[GameOutcome, ...]:
        return tuple(self._state.history)

    def outcome(self, bet_id: int) -> GameOutcome | None:
        return HistoryLog(self._state).find(bet_id)
