"""
Production deadline calculation module.

Pure functions for estimating how many business days an order occupies the
production line and when it completes. Contains no database dependencies -
works with plain numbers and order dictionaries.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from orderqueue.datetime_utils import add_business_days


@dataclass
class DeadlineEstimate:
    """Result of estimating a single order's production window."""
    days: int
    completion_date: date
    total_minutes: int

    def to_dict(self) -> dict:
        return {
            'days': self.days,
            'completion_date': self.completion_date.isoformat(),
            'total_minutes': self.total_minutes,
        }


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_positive_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_production_inputs(
    product_a_quantity,
    product_b_quantity,
    production_time_a,
    production_time_b,
    daily_capacity
) -> Tuple[bool, Optional[str]]:
    """
    Check the preconditions for a deadline estimate.

    Args:
        product_a_quantity: Units of product A (non-negative integer)
        product_b_quantity: Units of product B (non-negative integer)
        production_time_a: Minutes per unit of A (positive)
        production_time_b: Minutes per unit of B (positive)
        daily_capacity: Production minutes available per business day (positive)

    Returns:
        (is_valid, error_message)
    """
    if not _is_count(product_a_quantity) or product_a_quantity < 0:
        return False, "product_a_quantity must be a non-negative integer"
    if not _is_count(product_b_quantity) or product_b_quantity < 0:
        return False, "product_b_quantity must be a non-negative integer"
    if product_a_quantity == 0 and product_b_quantity == 0:
        return False, "At least one product quantity must be greater than zero"
    if not _is_positive_number(production_time_a):
        return False, "production_time_a must be greater than zero"
    if not _is_positive_number(production_time_b):
        return False, "production_time_b must be greater than zero"
    if not _is_positive_number(daily_capacity):
        return False, "daily_capacity must be greater than zero"
    return True, None


def calculate_total_minutes(
    product_a_quantity: int,
    product_b_quantity: int,
    production_time_a: float,
    production_time_b: float
) -> float:
    """
    Calculate the production minutes an order needs.

    Formula: quantity_a × time_a + quantity_b × time_b
    """
    return product_a_quantity * production_time_a + product_b_quantity * production_time_b


def calculate_production_days(total_minutes: float, daily_capacity: float) -> int:
    """
    Convert production minutes to business days.

    Formula: ceil(total_minutes / daily_capacity)

    Exactly one day of work is 1 day, never 0; any positive remainder adds a day.

    Raises:
        ValueError: If daily_capacity is not positive
    """
    if daily_capacity is None or daily_capacity <= 0:
        raise ValueError(f"daily_capacity must be greater than zero, got {daily_capacity!r}")

    return int(math.ceil(total_minutes / daily_capacity))


def estimate(
    product_a_quantity: int,
    product_b_quantity: int,
    production_time_a: float,
    production_time_b: float,
    daily_capacity: float,
    start_date: Optional[date] = None
) -> DeadlineEstimate:
    """
    Estimate production days and completion date for one order.

    Formula:
    - total_minutes = qty_a × time_a + qty_b × time_b
    - days = ceil(total_minutes / daily_capacity)
    - completion_date = start_date + days (business days only)

    Args:
        product_a_quantity: Units of product A
        product_b_quantity: Units of product B
        production_time_a: Minutes per unit of A
        production_time_b: Minutes per unit of B
        daily_capacity: Production minutes per business day
        start_date: Day production starts (defaults to today)

    Returns:
        DeadlineEstimate: days, completion_date and total_minutes

    Raises:
        ValueError: If any precondition is violated
    """
    is_valid, error = validate_production_inputs(
        product_a_quantity,
        product_b_quantity,
        production_time_a,
        production_time_b,
        daily_capacity
    )
    if not is_valid:
        raise ValueError(error)

    if start_date is None:
        start_date = date.today()
    elif isinstance(start_date, datetime):
        start_date = start_date.date()

    total_minutes = calculate_total_minutes(
        product_a_quantity,
        product_b_quantity,
        production_time_a,
        production_time_b
    )
    days = calculate_production_days(total_minutes, daily_capacity)

    return DeadlineEstimate(
        days=days,
        completion_date=add_business_days(start_date, days),
        total_minutes=total_minutes,
    )


def estimate_order(order: Dict[str, Any], start_date: Optional[date] = None) -> DeadlineEstimate:
    """Estimate an order given as a dictionary of its snapshotted fields."""
    return estimate(
        order.get('product_a_quantity'),
        order.get('product_b_quantity'),
        order.get('production_time_a'),
        order.get('production_time_b'),
        order.get('daily_capacity'),
        start_date
    )


def calculate_days_in_front(orders: Sequence[Dict[str, Any]]) -> int:
    """
    Sum the persisted day counts of orders already in the queue.

    Orders without a stored total_days contribute nothing.

    Args:
        orders: Order dictionaries with 'total_days'

    Returns:
        int: Business days the production line is already committed for
    """
    return sum(order.get('total_days') or 0 for order in orders)


def calculate_queue_schedule(
    active_orders: Sequence[Dict[str, Any]],
    reference_start_date: Optional[date] = None
) -> Dict[Any, Dict[str, Any]]:
    """
    Calculate the schedule of every active order on the single production line.

    Orders are processed strictly in the given sequence (oldest first); the
    sequence is never re-sorted. Each order starts on the day the previous
    order completes:

    - cursor = reference_start_date
    - for each order: days, completion = estimate(order, cursor); cursor = cursor + days

    Args:
        active_orders: Order dictionaries in FIFO order, each with 'id' and
                       the snapshotted quantity/time/capacity fields
        reference_start_date: Day the queue starts (defaults to today)

    Returns:
        dict: order id -> {'total_days', 'estimated_completion_date', 'start_date'},
              in the same order as the input
    """
    if reference_start_date is None:
        reference_start_date = date.today()
    elif isinstance(reference_start_date, datetime):
        reference_start_date = reference_start_date.date()

    schedule: Dict[Any, Dict[str, Any]] = {}
    cursor = reference_start_date

    for order in active_orders:
        result = estimate_order(order, cursor)
        schedule[order['id']] = {
            'total_days': result.days,
            'estimated_completion_date': result.completion_date,
            'start_date': cursor,
        }
        cursor = add_business_days(cursor, result.days)

    return schedule


def project_completion_after_queue(
    days: int,
    days_in_front: int,
    reference_date: Optional[date] = None
) -> Tuple[date, date]:
    """
    Project where a new order lands behind the existing queue.

    Formula:
    - start_date = reference_date + days_in_front (business days)
    - completion_date = start_date + days (business days)

    Returns:
        tuple: (start_date, completion_date)
    """
    if reference_date is None:
        reference_date = date.today()

    start_date = add_business_days(reference_date, days_in_front)
    return start_date, add_business_days(start_date, days)


def diff_schedule(
    orders: List[Dict[str, Any]],
    schedule: Dict[Any, Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """
    Compare persisted schedule fields against a freshly calculated schedule.

    Args:
        orders: Order dictionaries with 'id', 'total_days' and 'estimated_completion_date'
        schedule: Output of calculate_queue_schedule()

    Returns:
        list: One entry per order with current/computed values and change flags
    """
    rows = []
    for order in orders:
        computed = schedule.get(order['id'], {})
        current_days = order.get('total_days')
        current_date = order.get('estimated_completion_date')
        computed_days = computed.get('total_days')
        computed_date = computed.get('estimated_completion_date')

        days_changed = current_days != computed_days
        date_changed = current_date != computed_date

        rows.append({
            'id': order['id'],
            'current_total_days': current_days,
            'computed_total_days': computed_days,
            'total_days_changed': days_changed,
            'current_completion_date': current_date,
            'computed_completion_date': computed_date,
            'completion_date_changed': date_changed,
            'has_changes': days_changed or date_changed,
        })
    return rows
