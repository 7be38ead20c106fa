"""Tests for the settlement engine: escrow, reveal, rollback and conservation."""

import pytest

from fairhouse.commitment import commit
from fairhouse.engine import HistoryLog, SettlementEngine, calculate_payout
from fairhouse.exceptions import (
    BetNotFoundError,
    ErrorKind,
    InsufficientFundsError,
    InvalidRevealError,
    UnauthorizedError,
)
from fairhouse.games import GameType, compute_outcome
from fairhouse.models import (
    U64_MAX,
    U128_MAX,
    Deposit,
    DepositSuccess,
    GameCompleted,
    GamePlaced,
    PlaceBet,
    Reveal,
    Withdraw,
    WithdrawSuccess,
)
from fairhouse.storage.state import CasinoState

TOKEN = 10**18
ALICE = "alice"
BOB = "bob"


def _secret(seed: int) -> bytes:
    return bytes([seed] * 32)


def _place(
    engine: SettlementEngine,
    player: str,
    secret: bytes,
    amount: int,
    game: GameType = GameType.ROULETTE,
    params: str = "color:red",
    timestamp: int = 100,
) -> int:
    response = engine.execute(
        PlaceBet(game_type=game, bet_amount=amount, commit_hash=commit(secret), game_params=params),
        caller=player,
        timestamp=timestamp,
    )
    assert isinstance(response, GamePlaced)
    return response.game_id


def _reveal(engine: SettlementEngine, player: str, bet_id: int, secret: bytes, timestamp: int = 200):
    return engine.execute(Reveal(game_id=bet_id, reveal_value=secret), caller=player, timestamp=timestamp)


# ============================================================================
# Deposit / Withdraw
# ============================================================================


def test_deposit_credits_player_and_aggregate(engine: SettlementEngine) -> None:
    response = engine.execute(Deposit(amount=5 * TOKEN), caller=ALICE, timestamp=1)

    assert response == DepositSuccess(new_balance=5 * TOKEN)
    assert engine.balance_of(ALICE) == 5 * TOKEN
    assert engine.total_funds == 5 * TOKEN
    assert engine.balance_of(BOB) == 0


def test_withdraw_debits_player_and_aggregate(engine: SettlementEngine) -> None:
    engine.execute(Deposit(amount=5 * TOKEN), caller=ALICE, timestamp=1)
    response = engine.execute(Withdraw(amount=2 * TOKEN), caller=ALICE, timestamp=2)

    assert response == WithdrawSuccess(new_balance=3 * TOKEN)
    assert engine.total_funds == 3 * TOKEN


def test_withdraw_beyond_balance_is_rejected(engine: SettlementEngine) -> None:
    engine.execute(Deposit(amount=TOKEN), caller=ALICE, timestamp=1)
    before = engine.state.model_dump()

    with pytest.raises(InsufficientFundsError) as exc_info:
        engine.execute(Withdraw(amount=TOKEN + 1), caller=ALICE, timestamp=2)

    assert exc_info.value.kind is ErrorKind.INSUFFICIENT_FUNDS
    assert exc_info.value.available == TOKEN
    assert engine.state.model_dump() == before


def test_balances_and_aggregate_saturate() -> None:
    engine = SettlementEngine(CasinoState(total_funds=U64_MAX - 1))
    engine.execute(Deposit(amount=U128_MAX), caller=ALICE, timestamp=1)
    engine.execute(Deposit(amount=10), caller=ALICE, timestamp=2)

    assert engine.balance_of(ALICE) == U128_MAX
    assert engine.total_funds == U64_MAX


def test_aggregate_never_goes_negative() -> None:
    engine = SettlementEngine(CasinoState(total_funds=0, player_balances={ALICE: 50}))
    engine.execute(Withdraw(amount=50), caller=ALICE, timestamp=1)
    assert engine.total_funds == 0


# ============================================================================
# PlaceBet
# ============================================================================


def test_place_bet_escrows_stake(engine: SettlementEngine) -> None:
    engine.execute(Deposit(amount=10 * TOKEN), caller=ALICE, timestamp=1)
    bet_id = _place(engine, ALICE, _secret(1), 4 * TOKEN, timestamp=50)

    assert bet_id == 1
    assert engine.next_bet_id == 2
    assert engine.balance_of(ALICE) == 6 * TOKEN
    assert engine.total_funds == 10 * TOKEN

    bet = engine.pending_bet(bet_id)
    assert bet is not None
    assert bet.owner == ALICE
    assert bet.game_type is GameType.ROULETTE
    assert bet.bet_amount == 4 * TOKEN
    assert bet.commit_hash == commit(_secret(1))
    assert bet.placed_at == 50


def test_bet_ids_are_monotonic(engine: SettlementEngine) -> None:
    engine.execute(Deposit(amount=10), caller=ALICE, timestamp=1)
    ids = [_place(engine, ALICE, _secret(i), 1) for i in range(3)]
    assert ids == [1, 2, 3]
    assert [b.bet_id for b in engine.pending_bets()] == ids


def test_bet_ids_start_at_configured_seed() -> None:
    engine = SettlementEngine(CasinoState(next_bet_id=1000, player_balances={ALICE: 5}))
    assert _place(engine, ALICE, _secret(1), 1) == 1000


def test_place_bet_without_funds_changes_nothing(engine: SettlementEngine) -> None:
    engine.execute(Deposit(amount=TOKEN), caller=ALICE, timestamp=1)
    before = engine.state.model_dump()

    with pytest.raises(InsufficientFundsError):
        _place(engine, ALICE, _secret(1), 2 * TOKEN)

    assert engine.state.model_dump() == before
    assert engine.pending_bets() == []
    assert engine.next_bet_id == 1


# ============================================================================
# Reveal
# ============================================================================


def test_reveal_settles_bet(engine: SettlementEngine) -> None:
    secret = _secret(42)
    engine.execute(Deposit(amount=10 * TOKEN), caller=ALICE, timestamp=1)
    bet_id = _place(engine, ALICE, secret, 2 * TOKEN, params="odd_even:even", timestamp=50)

    expected = compute_outcome(GameType.ROULETTE, secret, "odd_even:even")
    expected_payout = 2 * TOKEN * expected.multiplier // 100

    response = _reveal(engine, ALICE, bet_id, secret, timestamp=75)

    assert response == GameCompleted(game_id=bet_id, outcome=expected.description, payout=expected_payout)
    assert engine.balance_of(ALICE) == 8 * TOKEN + expected_payout
    assert engine.pending_bet(bet_id) is None

    outcome = engine.outcome(bet_id)
    assert outcome is not None
    assert outcome.game_type == "Roulette"
    assert outcome.bet_amount == "2."
    assert outcome.payout_amount == ("4." if expected.multiplier == 200 else "0.")
    assert outcome.outcome_details == expected.description
    assert outcome.timestamp == 75
    assert outcome.placed_at == 50


def test_winning_straight_bet_pays_36x(engine: SettlementEngine) -> None:
    secret = _secret(42)
    result = compute_outcome(GameType.ROULETTE, secret, "").description.split(",")[0]
    number = int(result.removeprefix("Roulette: "))

    engine.execute(Deposit(amount=TOKEN), caller=ALICE, timestamp=1)
    bet_id = _place(engine, ALICE, secret, TOKEN, params=f"number:{number}")
    response = _reveal(engine, ALICE, bet_id, secret)

    assert response.payout == 36 * TOKEN
    assert engine.balance_of(ALICE) == 36 * TOKEN


def test_reveal_unknown_bet_is_not_found(engine: SettlementEngine) -> None:
    with pytest.raises(BetNotFoundError) as exc_info:
        _reveal(engine, ALICE, 99, _secret(1))
    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert exc_info.value.bet_id == 99


def test_reveal_by_other_player_is_unauthorized(engine: SettlementEngine) -> None:
    secret = _secret(3)
    engine.execute(Deposit(amount=TOKEN), caller=ALICE, timestamp=1)
    bet_id = _place(engine, ALICE, secret, TOKEN)
    before = engine.state.model_dump()

    with pytest.raises(UnauthorizedError):
        _reveal(engine, BOB, bet_id, secret)

    assert engine.state.model_dump() == before


def test_wrong_reveal_keeps_bet_pending(engine: SettlementEngine) -> None:
    engine.execute(Deposit(amount=TOKEN), caller=ALICE, timestamp=1)
    bet_id = _place(engine, ALICE, _secret(3), TOKEN)
    before = engine.state.model_dump()

    with pytest.raises(InvalidRevealError) as exc_info:
        _reveal(engine, ALICE, bet_id, _secret(4))

    assert exc_info.value.kind is ErrorKind.INVALID_REVEAL
    assert engine.state.model_dump() == before
    assert engine.pending_bet(bet_id) is not None

    # The right secret still settles afterwards
    assert isinstance(_reveal(engine, ALICE, bet_id, _secret(3)), GameCompleted)


def test_settled_bet_cannot_be_revealed_twice(engine: SettlementEngine) -> None:
    secret = _secret(8)
    engine.execute(Deposit(amount=TOKEN), caller=ALICE, timestamp=1)
    bet_id = _place(engine, ALICE, secret, TOKEN)
    _reveal(engine, ALICE, bet_id, secret)
    balance = engine.balance_of(ALICE)

    with pytest.raises(BetNotFoundError):
        _reveal(engine, ALICE, bet_id, secret)

    assert engine.balance_of(ALICE) == balance
    assert len(engine.history()) == 1


def test_failure_mid_settlement_rolls_back(engine: SettlementEngine, monkeypatch: pytest.MonkeyPatch) -> None:
    secret = _secret(6)
    engine.execute(Deposit(amount=TOKEN), caller=ALICE, timestamp=1)
    bet_id = _place(engine, ALICE, secret, TOKEN, game=GameType.WHEEL, params="")
    before = engine.state.model_dump()

    def fail(self, outcome):
        raise RuntimeError("history unavailable")

    monkeypatch.setattr(HistoryLog, "append", fail)

    with pytest.raises(RuntimeError):
        _reveal(engine, ALICE, bet_id, secret)

    assert engine.state.model_dump() == before
    assert engine.pending_bet(bet_id) is not None
    assert engine.history() == ()


def test_history_is_in_settlement_order(engine: SettlementEngine) -> None:
    engine.execute(Deposit(amount=10), caller=ALICE, timestamp=1)
    first = _place(engine, ALICE, _secret(1), 1, game=GameType.WHEEL)
    second = _place(engine, ALICE, _secret(2), 1, game=GameType.PLINKO, params="12")

    _reveal(engine, ALICE, second, _secret(2))
    _reveal(engine, ALICE, first, _secret(1))

    assert [o.bet_id for o in engine.history()] == [second, first]
    assert [o.game_type for o in engine.history()] == ["Plinko", "Wheel"]


def test_calculate_payout() -> None:
    assert calculate_payout(1000, 100) == 1000
    assert calculate_payout(1000, 0) == 0
    assert calculate_payout(3, 150) == 4
    assert calculate_payout(U128_MAX, 3600) == U128_MAX * 36


# ============================================================================
# Conservation
# ============================================================================


def test_balances_are_conserved_across_a_session() -> None:
    # Kept under the 64-bit aggregate limit so total_funds stays exact
    unit = 10**9
    engine = SettlementEngine(CasinoState())
    deposited = withdrawn = staked = paid = 0

    for player, amount in ((ALICE, 500 * unit), (BOB, 300 * unit)):
        engine.execute(Deposit(amount=amount), caller=player, timestamp=1)
        deposited += amount

    games = [
        (GameType.ROULETTE, "color:black"),
        (GameType.PLINKO, "8"),
        (GameType.MINES, "3:4"),
        (GameType.WHEEL, ""),
        (GameType.ROULETTE, "number:7"),
        (GameType.MINES, "24:1"),
    ]

    for round_no in range(12):
        player = ALICE if round_no % 2 == 0 else BOB
        game, params = games[round_no % len(games)]
        secret = _secret(round_no + 10)
        stake = (round_no + 1) * unit

        bet_id = _place(engine, player, secret, stake, game=game, params=params)
        staked += stake
        assert sum(engine.state.player_balances.values()) == deposited - withdrawn - staked + paid

        response = _reveal(engine, player, bet_id, secret)
        paid += response.payout
        assert sum(engine.state.player_balances.values()) == deposited - withdrawn - staked + paid

        if round_no % 3 == 2:
            amount = engine.balance_of(player) // 4
            engine.execute(Withdraw(amount=amount), caller=player, timestamp=3)
            withdrawn += amount

    assert sum(engine.state.player_balances.values()) == deposited - withdrawn - staked + paid
    assert engine.total_funds == deposited - withdrawn
    assert len(engine.history()) == 12
