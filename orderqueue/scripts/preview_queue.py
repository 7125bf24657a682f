#!/usr/bin/env python3
"""
Command-line script to preview queue schedule changes.

Usage:
    python orderqueue/scripts/preview_queue.py [--reference-date YYYY-MM-DD] [--show-all] [--summary-only]

Options:
    --reference-date YYYY-MM-DD  Day the queue starts (defaults to today)
    --show-all                   Show all active orders, not just those with changes
    --summary-only               Show only summary, not a line per order
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from orderqueue import create_app
from orderqueue.production.preview import run_preview_script
import argparse


def main():
    parser = argparse.ArgumentParser(
        description='Preview queue schedule changes without updating the database'
    )
    parser.add_argument(
        '--reference-date',
        type=str,
        help='Day the queue starts (YYYY-MM-DD format, defaults to today)'
    )
    parser.add_argument(
        '--show-all',
        action='store_true',
        help='Show all active orders, not just those with changes'
    )
    parser.add_argument(
        '--summary-only',
        action='store_true',
        help='Show only summary statistics, not a line per order'
    )

    args = parser.parse_args()

    # Create Flask app context
    app = create_app()

    with app.app_context():
        try:
            run_preview_script(
                reference_date_str=args.reference_date,
                show_all=args.show_all,
                detailed=not args.summary_only
            )
        except Exception as e:
            print(f"\nFatal error: {e}", file=sys.stderr)
            sys.exit(1)


if __name__ == '__main__':
    main()
