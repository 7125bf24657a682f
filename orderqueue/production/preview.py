"""
Preview the queue recalculation without writing anything.

Shows the stored total_days / estimated_completion_date of each active order
next to the values a recalculation would produce.
"""

from datetime import date
from typing import Any, Dict, Optional

from orderqueue.datetime_utils import parse_iso_date
from orderqueue.production.calculator import calculate_queue_schedule, diff_schedule
from orderqueue.production.service import list_active_orders
from orderqueue.logging_config import get_logger

logger = get_logger(__name__)


def format_date(d: Optional[date]) -> str:
    """Format a date for display, or 'None' if None."""
    if d is None:
        return 'None'
    return d.isoformat()


def preview_queue_changes(
    reference_date: Optional[date] = None,
    show_all: bool = False
) -> Dict[str, Any]:
    """
    Preview queue schedule changes without updating the database.

    Args:
        reference_date: Day the queue starts (defaults to today)
        show_all: If True, include orders without changes

    Returns:
        dict: Preview results with orders list and summary
    """
    if reference_date is None:
        reference_date = date.today()

    logger.info(f"Previewing queue changes (reference_date={reference_date})")

    active_orders = list_active_orders()
    if not active_orders:
        return {
            'total_orders': 0,
            'orders_with_changes': 0,
            'orders': [],
            'summary': {'reference_date': reference_date.isoformat()},
        }

    stored = []
    for order in active_orders:
        row = order.to_schedule_input()
        row['estimated_completion_date'] = order.estimated_completion_date
        row['status'] = order.status.value
        stored.append(row)

    schedule = calculate_queue_schedule(stored, reference_date)
    rows = diff_schedule(stored, schedule)

    orders = []
    for order, row in zip(stored, rows):
        if show_all or row['has_changes']:
            orders.append({
                **row,
                'status': order['status'],
                'start_date': schedule[order['id']]['start_date'],
            })

    orders_with_changes = sum(1 for row in rows if row['has_changes'])
    return {
        'total_orders': len(rows),
        'orders_with_changes': orders_with_changes,
        'orders': orders,
        'summary': {
            'total_orders': len(rows),
            'orders_with_changes': orders_with_changes,
            'orders_without_changes': len(rows) - orders_with_changes,
            'total_queue_days': sum(s['total_days'] for s in schedule.values()),
            'reference_date': reference_date.isoformat(),
        },
    }


def serialize_preview(preview_results: Dict[str, Any]) -> Dict[str, Any]:
    """Convert dates in preview results to ISO strings for JSON output."""
    orders = []
    for row in preview_results.get('orders', []):
        orders.append({
            key: (value.isoformat() if isinstance(value, date) else value)
            for key, value in row.items()
        })
    return {**preview_results, 'orders': orders}


def print_preview(preview_results: Dict[str, Any], detailed: bool = True):
    """
    Print a formatted preview of queue changes.

    Args:
        preview_results: Results from preview_queue_changes()
        detailed: If True, show a line per order. If False, only show summary.
    """
    summary = preview_results.get('summary', {})
    orders = preview_results.get('orders', [])

    print("\n" + "=" * 80)
    print("QUEUE PREVIEW - Changes Summary")
    print("=" * 80)
    print(f"Reference date:       {summary.get('reference_date')}")
    print(f"Active orders:        {preview_results.get('total_orders', 0)}")
    print(f"Orders with changes:  {preview_results.get('orders_with_changes', 0)}")
    if 'total_queue_days' in summary:
        print(f"Queue length (days):  {summary['total_queue_days']}")

    if not detailed or not orders:
        print("=" * 80 + "\n")
        return

    print("-" * 80)
    print(f"{'Order':>8}  {'Status':<12} {'Days':>11}  {'Start':<10}  {'Completion':<23}")
    print("-" * 80)
    for row in orders:
        days = f"{row['current_total_days']}→{row['computed_total_days']}"
        completion = (
            f"{format_date(row['current_completion_date'])}→"
            f"{format_date(row['computed_completion_date'])}"
        )
        print(
            f"{row['id']:>8}  {row['status']:<12} {days:>11}  "
            f"{format_date(row['start_date']):<10}  {completion:<23}"
        )
    print("=" * 80 + "\n")


def run_preview_script(
    reference_date_str: Optional[str] = None,
    show_all: bool = False,
    detailed: bool = True
):
    """
    Run the preview from the command line.

    Args:
        reference_date_str: Optional ISO date string (YYYY-MM-DD)
        show_all: Show all orders, not just those with changes
        detailed: Show a line for each order
    """
    reference_date = None
    if reference_date_str:
        try:
            reference_date = parse_iso_date(reference_date_str)
        except ValueError:
            print(f"Warning: Invalid reference_date '{reference_date_str}', using today")
            reference_date = None

    try:
        preview_results = preview_queue_changes(
            reference_date=reference_date,
            show_all=show_all
        )

        print_preview(preview_results, detailed=detailed)

        return preview_results

    except Exception as e:
        logger.error(f"Error in preview script: {e}", exc_info=True)
        print(f"\nError: {e}")
        raise
