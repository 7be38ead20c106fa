"""Player balances and the aggregate fund counter.

Balances are 128-bit minor-unit integers and the aggregate counter is 64-bit;
both saturate instead of wrapping. Value only enters through ``deposit`` and
leaves through ``withdraw``; bets and payouts move it between a player and the
house escrow via ``debit``/``credit``.
"""

import logging

from fairhouse.exceptions import InsufficientFundsError
from fairhouse.models import U64_MAX, U128_MAX
from fairhouse.storage.state import CasinoState

logger = logging.getLogger(__name__)


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")


class Ledger:
    """Balance mutations over a ``CasinoState``."""

    def __init__(self, state: CasinoState):
        self._state = state

    @property
    def total_funds(self) -> int:
        return self._state.total_funds

    def balance_of(self, player: str) -> int:
        return self._state.player_balances.get(player, 0)

    def credit(self, player: str, amount: int) -> int:
        _check_amount(amount)
        new_balance = min(self.balance_of(player) + amount, U128_MAX)
        self._state.player_balances[player] = new_balance
        return new_balance

    def debit(self, player: str, amount: int) -> int:
        _check_amount(amount)
        current = self.balance_of(player)
        if amount > current:
            raise InsufficientFundsError(player, amount, current)
        new_balance = current - amount
        self._state.player_balances[player] = new_balance
        return new_balance

    def deposit(self, player: str, amount: int) -> int:
        new_balance = self.credit(player, amount)
        self._state.total_funds = min(self._state.total_funds + amount, U64_MAX)
        logger.debug(f"Deposit {amount} for {player}, balance {new_balance}")
        return new_balance

    def withdraw(self, player: str, amount: int) -> int:
        new_balance = self.debit(player, amount)
        self._state.total_funds = max(self._state.total_funds - amount, 0)
        logger.debug(f"Withdraw {amount} for {player}, balance {new_balance}")
        return new_balance
