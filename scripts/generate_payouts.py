#!/usr/bin/env python3
"""
Payout Generation Script

Creates pending payouts for completed orders that do not have one yet.
Safe to re-run: orders that already have a payout are skipped.

Usage:
    python generate_payouts.py
    python generate_payouts.py --order-id 123e4567-e89b-12d3-a456-426614174010
    python generate_payouts.py --dry-run

Schedule via cron (hourly):
    0 * * * * cd /app && python scripts/generate_payouts.py
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from uuid import UUID

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.errors import ValidationError
from services.payout_service import PayoutBatchResult, generate_payouts


def print_summary(result: PayoutBatchResult, dry_run: bool) -> None:
    """Print payout generation summary."""
    print()
    print("=" * 60)
    print("PAYOUT GENERATION SUMMARY")
    print("=" * 60)
    print(f"Payouts:                  {result.generated}")
    print(f"Gross Total:              {sum(p.gross_amount for p in result.payouts)}")
    print(f"Creator Total:            {sum(p.creator_amount for p in result.payouts)}")
    print(f"Platform Total:           {sum(p.platform_amount for p in result.payouts)}")
    print(f"Brand Total:              {sum(p.brand_amount for p in result.payouts)}")
    print()

    if dry_run:
        print("** DRY RUN - No records were inserted **")
    else:
        print(f"SUCCESS: {result.message}")

    print("=" * 60)


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Generate pending payouts for completed orders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Settle every completed order without a payout
  python generate_payouts.py

  # Settle a single order
  python generate_payouts.py --order-id 123e4567-e89b-12d3-a456-426614174010

  # Dry run (no inserts)
  python generate_payouts.py --dry-run
        """
    )

    parser.add_argument(
        "--order-id",
        type=str,
        help="Only generate the payout for this order"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute payouts without inserting records"
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        order_id = UUID(args.order_id) if args.order_id else None
    except ValueError:
        print(f"ERROR: Invalid order id: {args.order_id}", file=sys.stderr)
        return 2

    try:
        print("Starting payout generation...")
        print(f"Dry run: {args.dry_run}")

        result = generate_payouts(order_id, dry_run=args.dry_run)

        if result.generated == 0:
            print(result.message)
            return 0

        for payout in result.payouts:
            print(
                f"  order {payout.order_id}: gross={payout.gross_amount} "
                f"creator={payout.creator_amount} platform={payout.platform_amount} "
                f"brand={payout.brand_amount}"
            )

        print_summary(result, args.dry_run)

        return 0

    except ValidationError as e:
        print(f"\nERROR: Invalid revenue-share configuration: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\n\nPayout generation interrupted by user")
        return 130

    except Exception as e:
        print(f"\nERROR: Payout generation failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
