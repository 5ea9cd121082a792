"""Command-line interface for the DeFi portfolio tracker."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from .config import load_config
from .logging_setup import configure_logging
from .serialize import to_jsonable
from .services import PortfolioTracker, RequestTimeoutError
from .validation import ValidationError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="defi-portfolio",
        description="Multi-chain DeFi portfolio tracker",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    portfolio_parser = sub.add_parser("portfolio", help="Wallet balances and protocol positions")
    portfolio_parser.add_argument("address", help="EVM (0x...) or Solana address")
    portfolio_parser.add_argument(
        "--chains",
        default=None,
        help="Comma-separated chain ids, e.g. 1,8453 (default: all chains for the address)",
    )

    yield_parser = sub.add_parser("yield", help="Yield opportunities for an address")
    yield_parser.add_argument("address", help="EVM (0x...) or Solana address")
    yield_parser.add_argument("--chains", default=None, help="Comma-separated chain ids")

    return parser


async def _run(args: argparse.Namespace) -> object:
    """Execute the selected command and return its result."""
    config = load_config(args.config)
    tracker = PortfolioTracker(config)
    try:
        if args.command == "portfolio":
            return await tracker.get_portfolio(args.address, args.chains)
        return await tracker.analyze_yield(args.address, args.chains)
    finally:
        await tracker.close()


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)
    try:
        result = asyncio.run(_run(args))
    except ValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)
    except RequestTimeoutError as e:
        logger.error("%s", e)
        sys.exit(3)

    json.dump(to_jsonable(result), sys.stdout, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
