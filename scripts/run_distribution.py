#!/usr/bin/env python3
"""
Run one commission distribution by hand.

Used for backfills and for replaying an event whose distribution was
interrupted; replays are safe because already paid levels are skipped.

Usage:
    python scripts/run_distribution.py purchase --user-id 42 \
        --amount 1000 --package-ref starter --event-ref purchase-1001
    python scripts/run_distribution.py return --user-id 42 \
        --amount 12.5 --event-ref roi-2024-05-01-42
"""

import argparse
import asyncio
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger

from levelpay.config.settings import get_settings
from levelpay.database import create_engine, create_session_maker
from levelpay.logging_setup import setup_logging
from levelpay.services.distribution import DistributionOrchestrator


def parse_amount(value: str) -> Decimal:
    """argparse type for positive decimal amounts."""
    try:
        amount = Decimal(value)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"invalid amount: {value}") from e
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError(f"amount must be positive: {value}")
    return amount


def build_parser() -> argparse.ArgumentParser:
    """Command line parser."""
    parser = argparse.ArgumentParser(
        description="Distribute multi-level commission for one event"
    )
    parser.add_argument(
        "kind",
        choices=["purchase", "return"],
        help="purchase = level income, return = ROI-on-ROI",
    )
    parser.add_argument("--user-id", type=int, required=True)
    parser.add_argument("--amount", type=parse_amount, required=True)
    parser.add_argument("--event-ref", required=True)
    parser.add_argument(
        "--package-ref",
        help="Purchased package (required for purchase)",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    """Run the distribution and print its summary as JSON."""
    settings = get_settings()
    engine = create_engine(settings.database_url)
    orchestrator = DistributionOrchestrator(
        create_session_maker(engine),
        feature_key=settings.level_income_feature_key,
        max_levels_cap=settings.max_commission_levels,
    )

    try:
        if args.kind == "purchase":
            summary = await orchestrator.distribute_on_purchase(
                args.user_id, args.amount, args.package_ref, args.event_ref
            )
        else:
            summary = await orchestrator.distribute_on_return(
                args.user_id, args.amount, args.event_ref
            )
    finally:
        await engine.dispose()

    print(json.dumps(summary.to_dict(), indent=2))
    return 0 if summary.success else 1


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    if args.kind == "purchase" and not args.package_ref:
        parser.error("--package-ref is required for purchase")

    setup_logging()
    logger.info(
        "Manual distribution requested",
        extra={"kind": args.kind, "event_ref": args.event_ref},
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
