"""Fairhouse CLI entry point."""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

env_file = Path.cwd() / ".env"
load_dotenv(env_file)

from fairhouse import __version__
from fairhouse.commitment import commit_hex, generate_secret
from fairhouse.config import get_settings
from fairhouse.exceptions import CasinoError
from fairhouse.games import GameType, compute_outcome
from fairhouse.host import load_engine, run_operation
from fairhouse.models import (
    Deposit,
    GameCompleted,
    GameOutcome,
    PlaceBet,
    Reveal,
    Withdraw,
    format_amount,
)
from fairhouse.storage import create_default_state, save_state

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


def _init_logfire() -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from fairhouse.observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def _fmt(amount: int) -> str:
    casino = get_settings().casino
    return f"{format_amount(amount, casino.amount_decimals)} {casino.token_symbol}"


def _print_validation_error(e: ValidationError) -> None:
    print("\n❌ Invalid operation:\n")
    for error in e.errors():
        print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
    print()


def _print_outcome(outcome: GameOutcome) -> None:
    print(f"  #{outcome.bet_id} {outcome.game_type}: {outcome.outcome_details}")
    print(f"      bet {outcome.bet_amount} -> payout {outcome.payout_amount} (t={outcome.timestamp})")


def _submit(operation_factory, player: str):
    """Build and run an operation, translating failures into exit codes."""
    try:
        operation = operation_factory()
        return run_operation(operation, caller=player), 0
    except ValidationError as e:
        _print_validation_error(e)
        return None, 1
    except CasinoError as e:
        print(f"\n❌ {e.kind.value}: {e}\n")
        return None, 1
    except Exception as e:
        logger.error(f"Operation failed: {e}", exc_info=True)
        print(f"\n❌ Operation failed: {e}\n")
        return None, 1


CONFIG_TEMPLATE = """# Fairhouse Configuration
# Secrets (LOGFIRE_TOKEN) belong in .env, not here.

casino:
  initial_funds: 0
  first_bet_id: 1
  amount_decimals: 18
  token_symbol: TOKEN
"""


def cmd_init(args: argparse.Namespace) -> int:
    """Create the data directory, a config template and an initial state file."""
    try:
        data_dir = get_settings().data_dir
        data_dir.mkdir(parents=True, exist_ok=True)

        config_path = data_dir / "config.yaml"
        if config_path.exists():
            logger.info(f"Keeping existing {config_path}")
        else:
            config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
            logger.info(f"Wrote config template to {config_path}")

        # Re-read settings so the new state is seeded from the file on disk
        get_settings.cache_clear()
        state_file = data_dir / "state.yaml"
        if state_file.exists():
            logger.info(f"Keeping existing {state_file}")
        else:
            save_state(create_default_state())
            logger.info(f"Wrote initial state to {state_file}")

        print(f"\n✓ Data directory initialized at {data_dir}")
        print("\nNext steps:")
        print("1. Review config.yaml (initial_funds seeds the aggregate counter)")
        print("2. Run 'python -m fairhouse deposit --player alice --amount 1000'")
        print("3. Run 'python -m fairhouse commit' to generate a bet secret\n")
        return 0

    except Exception as e:
        logger.error(f"Init failed: {e}")
        print(f"\n❌ Initialization failed: {e}\n")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== Fairhouse Configuration ===\n")
        print(f"Data Directory: {settings.data_dir}")
        print(f"Environment: {settings.environment}\n")

        print("Casino:")
        print(f"  Initial Funds: {settings.casino.initial_funds}")
        print(f"  First Bet ID: {settings.casino.first_bet_id}")
        print(f"  Amount Decimals: {settings.casino.amount_decimals}")
        print(f"  Token Symbol: {settings.casino.token_symbol}\n")

        print("Observability:")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")

        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Failed to load configuration: {e}\n")
        return 1


def cmd_status(args: argparse.Namespace) -> int:
    """Display casino totals."""
    try:
        engine = load_engine()
        state = engine.state

        print("\n=== Fairhouse Status ===\n")
        print(f"Next Bet ID: {engine.next_bet_id}")
        print(f"Total Funds: {_fmt(engine.total_funds)}")
        print(f"Players: {len(state.player_balances)}")
        print(f"Pending Bets: {len(state.pending_bets)}")
        print(f"Settled Bets: {len(state.history)}\n")
        return 0

    except Exception as e:
        logger.error(f"Failed to read status: {e}")
        print(f"\n❌ Failed to read status: {e}\n")
        return 1


def cmd_deposit(args: argparse.Namespace) -> int:
    """Credit a player's balance."""
    response, code = _submit(lambda: Deposit(amount=args.amount), args.player)
    if response is not None:
        print(f"\n✓ Deposited. New balance for {args.player}: {_fmt(response.new_balance)}\n")
    return code


def cmd_withdraw(args: argparse.Namespace) -> int:
    """Debit a player's balance."""
    response, code = _submit(lambda: Withdraw(amount=args.amount), args.player)
    if response is not None:
        print(f"\n✓ Withdrawn. New balance for {args.player}: {_fmt(response.new_balance)}\n")
    return code


def cmd_commit(args: argparse.Namespace) -> int:
    """Generate a secret (or use the given one) and print its commitment."""
    try:
        secret = bytes.fromhex(args.secret) if args.secret else generate_secret()
    except ValueError as e:
        print(f"\n❌ Invalid secret hex: {e}\n")
        return 1

    print("\n=== Bet Commitment ===\n")
    print(f"Secret (keep private until reveal): {secret.hex()}")
    print(f"Commitment (submit with bet):       {commit_hex(secret)}\n")
    return 0


def cmd_bet(args: argparse.Namespace) -> int:
    """Place a bet against a commitment."""
    response, code = _submit(
        lambda: PlaceBet(
            game_type=args.game,
            bet_amount=args.amount,
            commit_hash=args.commit,
            game_params=args.params,
        ),
        args.player,
    )
    if response is not None:
        print(f"\n✓ Bet placed. Game ID: {response.game_id}\n")
    return code


def cmd_reveal(args: argparse.Namespace) -> int:
    """Reveal a secret and settle the bet."""
    response, code = _submit(
        lambda: Reveal(game_id=args.bet_id, reveal_value=args.secret),
        args.player,
    )
    if isinstance(response, GameCompleted):
        print(f"\n✓ Game {response.game_id} settled")
        print(f"Outcome: {response.outcome}")
        print(f"Payout: {_fmt(response.payout)}\n")
    return code


def cmd_balance(args: argparse.Namespace) -> int:
    """Display a player's balance."""
    try:
        engine = load_engine()
        print(f"\n{args.player}: {_fmt(engine.balance_of(args.player))}\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to read balance: {e}")
        print(f"\n❌ Failed to read balance: {e}\n")
        return 1


def cmd_history(args: argparse.Namespace) -> int:
    """Display settled bets, or a single one."""
    try:
        engine = load_engine()

        if args.bet_id is not None:
            outcome = engine.outcome(args.bet_id)
            if outcome is None:
                print(f"\n❌ NotFound: no settled bet {args.bet_id}\n")
                return 1
            print()
            _print_outcome(outcome)
            print()
            return 0

        history = engine.history()
        print(f"\n=== Game History ({len(history)}) ===\n")
        if not history:
            print("  (None)")
        for outcome in history[-args.limit:]:
            _print_outcome(outcome)
        print()
        return 0

    except Exception as e:
        logger.error(f"Failed to read history: {e}")
        print(f"\n❌ Failed to read history: {e}\n")
        return 1


def cmd_pending(args: argparse.Namespace) -> int:
    """Display bets awaiting reveal."""
    try:
        bets = load_engine().pending_bets()

        print(f"\nPending Bets: {len(bets)}")
        if not bets:
            print("  (None)")
        for bet in bets:
            print(
                f"  #{bet.bet_id} {bet.owner} {bet.game_type.value} "
                f"{_fmt(bet.bet_amount)} params={bet.game_params!r}"
            )
        print()
        return 0

    except Exception as e:
        logger.error(f"Failed to read pending bets: {e}")
        print(f"\n❌ Failed to read pending bets: {e}\n")
        return 1


def cmd_audit(args: argparse.Namespace) -> int:
    """Recompute a game outcome from a public reveal value."""
    try:
        game = GameType.parse(args.game)
        reveal = bytes.fromhex(args.reveal)
    except ValueError as e:
        print(f"\n❌ {e}\n")
        return 1

    result = compute_outcome(game, reveal, args.params)
    print(f"\n=== Audit: {game.value} ===\n")
    print(f"Commitment: {commit_hex(reveal)}")
    print(f"Outcome: {result.description}")
    print(f"Multiplier: {result.multiplier / 100:.2f}x ({result.multiplier})\n")
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Fairhouse: provably-fair casino settlement engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Fairhouse {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_init = subparsers.add_parser(
        "init",
        help="Initialize data directory and configuration files",
    )
    parser_init.set_defaults(func=cmd_init)

    parser_config = subparsers.add_parser("config", help="Display merged configuration")
    parser_config.set_defaults(func=cmd_config)

    parser_status = subparsers.add_parser("status", help="Display casino totals")
    parser_status.set_defaults(func=cmd_status)

    for name, func, help_text in (
        ("deposit", cmd_deposit, "Deposit funds for a player"),
        ("withdraw", cmd_withdraw, "Withdraw funds for a player"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--player", required=True, help="Player identity")
        sub.add_argument("--amount", required=True, type=int, help="Amount in minor units")
        sub.set_defaults(func=func)

    parser_commit = subparsers.add_parser(
        "commit",
        help="Generate a bet secret and its commitment",
    )
    parser_commit.add_argument("--secret", help="Existing 32-byte secret as hex")
    parser_commit.set_defaults(func=cmd_commit)

    parser_bet = subparsers.add_parser("bet", help="Place a bet against a commitment")
    parser_bet.add_argument("--player", required=True, help="Player identity")
    parser_bet.add_argument(
        "--game",
        required=True,
        choices=[g.value.lower() for g in GameType],
        help="Game to play",
    )
    parser_bet.add_argument("--amount", required=True, type=int, help="Stake in minor units")
    parser_bet.add_argument("--commit", required=True, help="Commitment hash as hex")
    parser_bet.add_argument(
        "--params",
        default="",
        help="Game parameters, e.g. 'color:red', '12', '3:4'",
    )
    parser_bet.set_defaults(func=cmd_bet)

    parser_reveal = subparsers.add_parser("reveal", help="Reveal a secret and settle a bet")
    parser_reveal.add_argument("--player", required=True, help="Player identity")
    parser_reveal.add_argument("--bet-id", required=True, type=int, help="Game ID to settle")
    parser_reveal.add_argument("--secret", required=True, help="Secret as hex")
    parser_reveal.set_defaults(func=cmd_reveal)

    parser_balance = subparsers.add_parser("balance", help="Display a player's balance")
    parser_balance.add_argument("--player", required=True, help="Player identity")
    parser_balance.set_defaults(func=cmd_balance)

    parser_history = subparsers.add_parser("history", help="Display settled bets")
    parser_history.add_argument("--bet-id", type=int, help="Show a single settled bet")
    parser_history.add_argument("--limit", type=int, default=20, help="Most recent entries to show")
    parser_history.set_defaults(func=cmd_history)

    parser_pending = subparsers.add_parser("pending", help="Display bets awaiting reveal")
    parser_pending.set_defaults(func=cmd_pending)

    parser_audit = subparsers.add_parser(
        "audit",
        help="Recompute an outcome from a reveal value",
    )
    parser_audit.add_argument("--game", required=True, help="Game name")
    parser_audit.add_argument("--reveal", required=True, help="Reveal value as hex")
    parser_audit.add_argument("--params", default="", help="Game parameters")
    parser_audit.set_defaults(func=cmd_audit)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    _init_logfire()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
