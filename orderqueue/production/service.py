"""
Production queue service.

Reads and writes Order records and keeps every active order's total_days and
estimated_completion_date in line with its position on the production line.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from orderqueue.models import ACTIVE_STATUSES, Order, OrderStatus, ProductionSettings, db
from orderqueue.production.calculator import (
    calculate_days_in_front,
    calculate_queue_schedule,
    project_completion_after_queue,
)
from orderqueue.production.errors import OrderNotFoundError, QueueFetchError
from orderqueue.queue_lock import queue_lock_manager
from orderqueue.logging_config import QueueOperationContext, get_logger

logger = get_logger(__name__)


@dataclass
class QueueRecalculationResult:
    reference_date: date
    total_orders: int = 0
    updated: int = 0
    changed: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    schedule: Dict[int, Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            'reference_date': self.reference_date.isoformat(),
            'total_orders': self.total_orders,
            'updated': self.updated,
            'changed': self.changed,
            'errors': self.errors,
            'schedule': [
                {
                    'id': order_id,
                    'total_days': fields['total_days'],
                    'start_date': fields['start_date'].isoformat(),
                    'estimated_completion_date': fields['estimated_completion_date'].isoformat(),
                }
                for order_id, fields in self.schedule.items()
            ],
        }


# ==============================================================================
# STORE ACCESS
# ==============================================================================

def list_active_orders() -> List[Order]:
    """
    Return pending and in-progress orders in queue order (oldest first).

    Orders created in the same instant keep insertion order through the id.

    Raises:
        QueueFetchError: If the orders could not be read
    """
    try:
        return Order.query.filter(
            Order.status.in_(ACTIVE_STATUSES)
        ).order_by(Order.created_at.asc(), Order.id.asc()).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error fetching active orders: {e}", exc_info=True)
        raise QueueFetchError(f"Could not load active orders: {e}") from e


def list_orders_by_status(status) -> List[Order]:
    """Return orders with the given status, newest first."""
    return Order.query.filter(Order.status == status).order_by(
        Order.created_at.desc(), Order.id.desc()
    ).all()


def count_orders_by_status() -> Dict[str, int]:
    """Return the number of orders in each status, including zero counts."""
    rows = db.session.query(Order.status, db.func.count(Order.id)).group_by(Order.status).all()
    counts = {status.value: 0 for status in OrderStatus}
    for status, count in rows:
        counts[status.value] = count
    return counts


def get_order(order_id: int) -> Order:
    """
    Raises:
        OrderNotFoundError: If no order has this id
    """
    order = db.session.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(f"Order {order_id} not found")
    return order


def insert_order(**fields) -> Order:
    """Create an order record; the database assigns id and created_at."""
    order = Order(**fields)
    db.session.add(order)
    db.session.commit()
    logger.info(f"Inserted order {order.id}")
    return order


def update_order(order_id: int, **fields) -> Order:
    """
    Apply a partial update to an order and commit.

    Raises:
        OrderNotFoundError: If no order has this id
    """
    order = get_order(order_id)
    for name, value in fields.items():
        setattr(order, name, value)
    db.session.commit()
    return order


def get_settings() -> Optional[ProductionSettings]:
    """Return the saved production settings, or None when none were saved."""
    return ProductionSettings.get_current()


def save_settings(product_a_name: str, product_b_name: str,
                  product_a_time: int, product_b_time: int) -> ProductionSettings:
    """Create or update the single settings row. Existing orders are not touched."""
    settings = ProductionSettings.get_current()
    if settings is None:
        settings = ProductionSettings()
        db.session.add(settings)

    settings.product_a_name = product_a_name
    settings.product_b_name = product_b_name
    settings.product_a_time = product_a_time
    settings.product_b_time = product_b_time
    db.session.commit()

    logger.info("Production settings saved", settings=settings.to_dict())
    return settings


# ==============================================================================
# QUEUE SCHEDULING
# ==============================================================================

def project_new_order_schedule(
    days: int,
    reference_date: Optional[date] = None
) -> Tuple[date, date, int]:
    """
    Place a not-yet-inserted order behind the current queue.

    Uses the total_days already stored on the active orders instead of
    recalculating them; the full recalculation after insertion corrects any drift.

    Returns:
        tuple: (start_date, completion_date, days_in_front)

    Raises:
        QueueFetchError: If the active orders could not be read
    """
    if reference_date is None:
        reference_date = date.today()

    active_orders = list_active_orders()
    days_in_front = calculate_days_in_front([o.to_schedule_input() for o in active_orders])
    start_date, completion_date = project_completion_after_queue(days, days_in_front, reference_date)
    return start_date, completion_date, days_in_front


def _persist_schedule(order: Order, scheduling: Dict[str, Any]) -> None:
    """Write one order's schedule fields in their own transaction."""
    order.total_days = scheduling['total_days']
    order.estimated_completion_date = scheduling['estimated_completion_date']
    db.session.commit()


def recalculate_queue(reference_date: Optional[date] = None) -> QueueRecalculationResult:
    """
    Recalculate and store the schedule of every active order.

    This function:
    1. Fetches all pending/in-progress orders oldest first
    2. Replays the deadline estimate over the queue from the reference date
    3. Writes total_days and estimated_completion_date for every order,
       committing each order separately

    A failed fetch aborts before anything is written. A failed write for one
    order is rolled back and logged, and the remaining orders are still written.

    Args:
        reference_date: Day the queue starts (defaults to today)

    Returns:
        QueueRecalculationResult: counts, per-order errors and the computed schedule

    Raises:
        QueueFetchError: If the active orders could not be read
        QueueLockTimeout: If another queue operation did not finish in time
    """
    if reference_date is None:
        reference_date = date.today()

    with queue_lock_manager.acquire_queue_lock("recalculate_queue"):
        with QueueOperationContext("recalculate_queue"):
            active_orders = list_active_orders()
            result = QueueRecalculationResult(
                reference_date=reference_date,
                total_orders=len(active_orders),
            )

            if not active_orders:
                logger.info("No active orders to schedule")
                return result

            logger.info(
                f"Recalculating schedule for {len(active_orders)} active orders "
                f"(reference_date={reference_date})"
            )

            schedule = calculate_queue_schedule(
                [order.to_schedule_input() for order in active_orders],
                reference_date
            )
            result.schedule = schedule

            for order in active_orders:
                order_id = order.id
                scheduling = schedule[order_id]
                try:
                    old_days = order.total_days
                    old_date = order.estimated_completion_date

                    _persist_schedule(order, scheduling)
                    result.updated += 1

                    if old_days != scheduling['total_days'] or old_date != scheduling['estimated_completion_date']:
                        result.changed += 1
                        logger.info(
                            f"Updated schedule for order {order_id}: "
                            f"total_days={old_days}→{scheduling['total_days']}, "
                            f"estimated_completion_date={old_date}→{scheduling['estimated_completion_date']}"
                        )

                except SQLAlchemyError as e:
                    db.session.rollback()
                    error_msg = f"Error updating schedule for order {order_id}: {str(e)}"
                    logger.error(error_msg, exc_info=True)
                    result.errors.append({
                        'order_id': order_id,
                        'error': str(e)
                    })
                    # Continue with next order

            logger.info(
                f"Queue recalculation complete: {result.updated}/{result.total_orders} orders written, "
                f"{result.changed} changed, {len(result.errors)} errors"
            )
            return result
