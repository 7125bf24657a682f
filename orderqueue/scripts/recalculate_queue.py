#!/usr/bin/env python3
"""
Recalculate and store the schedule of every active order.

Run after data fixes, or at the start of a business day so completion
dates are measured from today.

Usage:
    python orderqueue/scripts/recalculate_queue.py [--reference-date YYYY-MM-DD] [--dry-run]
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from orderqueue import create_app
from orderqueue.datetime_utils import parse_iso_date
from orderqueue.production.preview import preview_queue_changes, print_preview
from orderqueue.production.service import recalculate_queue
import argparse


def main():
    parser = argparse.ArgumentParser(
        description='Recalculate total_days and estimated_completion_date for all active orders'
    )
    parser.add_argument(
        '--reference-date',
        type=str,
        help='Day the queue starts (YYYY-MM-DD format, defaults to today)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show the changes without writing them'
    )

    args = parser.parse_args()

    try:
        reference_date = parse_iso_date(args.reference_date)
    except ValueError:
        print(f"Invalid --reference-date '{args.reference_date}', expected YYYY-MM-DD", file=sys.stderr)
        sys.exit(2)

    app = create_app()

    with app.app_context():
        try:
            if args.dry_run:
                print_preview(preview_queue_changes(reference_date), detailed=True)
                return

            result = recalculate_queue(reference_date)
        except Exception as e:
            print(f"\nFatal error: {e}", file=sys.stderr)
            sys.exit(1)

    print("=" * 80)
    print("QUEUE RECALCULATION")
    print("=" * 80)
    print(f"Reference date:  {result.reference_date.isoformat()}")
    print(f"Active orders:   {result.total_orders}")
    print(f"Written:         {result.updated}")
    print(f"Changed:         {result.changed}")
    print(f"Errors:          {len(result.errors)}")
    for error in result.errors:
        print(f"  - order {error['order_id']}: {error['error']}")
    print("=" * 80)

    if result.errors:
        sys.exit(1)


if __name__ == '__main__':
    main()
