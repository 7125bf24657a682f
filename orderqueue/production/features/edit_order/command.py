# orderqueue/production/features/edit_order/command.py

from dataclasses import dataclass
from typing import Optional

from orderqueue.models import OrderStatus, db
from orderqueue.production.calculator import (
    calculate_production_days,
    calculate_total_minutes,
    validate_production_inputs,
)
from orderqueue.production.errors import OrderStateError, OrderValidationError
from orderqueue.production.features.edit_order.results import EditOrderResult
from orderqueue.production.service import get_order
from orderqueue.production.validation import normalize_notes
from orderqueue.queue_lock import queue_lock_manager
from orderqueue.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class EditOrderCommand:
    """
    Command to change a pending order's quantities or notes.

    Quantity changes recompute only this order's total_days from its own
    snapshotted times and capacity. Its estimated_completion_date and every
    other order stay as stored until the next full queue recalculation.

    Fields left as None are not changed; pass notes="" to clear the notes.
    """
    order_id: int
    product_a_quantity: Optional[int] = None
    product_b_quantity: Optional[int] = None
    notes: Optional[str] = None

    def execute(self) -> EditOrderResult:
        """
        Execute the edit.

        Raises:
            OrderNotFoundError: If the order does not exist
            OrderStateError: If the order is not pending
            OrderValidationError: If the new quantities are invalid
            QueueLockTimeout: If another queue operation did not finish in time
        """
        # Serialized with queue recalculation
        with queue_lock_manager.acquire_queue_lock("edit_order"):
            order = get_order(self.order_id)

            if order.status != OrderStatus.PENDING:
                raise OrderStateError("Only pending orders can be edited")

            quantities_changed = self.product_a_quantity is not None or self.product_b_quantity is not None

            if quantities_changed:
                new_a = self.product_a_quantity if self.product_a_quantity is not None else order.product_a_quantity
                new_b = self.product_b_quantity if self.product_b_quantity is not None else order.product_b_quantity

                is_valid, error = validate_production_inputs(
                    new_a,
                    new_b,
                    order.production_time_a,
                    order.production_time_b,
                    order.daily_capacity
                )
                if not is_valid:
                    raise OrderValidationError(error)

                old_days = order.total_days
                order.product_a_quantity = new_a
                order.product_b_quantity = new_b
                order.total_days = calculate_production_days(
                    calculate_total_minutes(new_a, new_b, order.production_time_a, order.production_time_b),
                    order.daily_capacity
                )
                logger.info(f"Order {self.order_id} quantities edited: total_days={old_days}→{order.total_days}")

            if self.notes is not None:
                order.notes = normalize_notes(self.notes)

            db.session.commit()

        return EditOrderResult(
            order_id=order.id,
            product_a_quantity=order.product_a_quantity,
            product_b_quantity=order.product_b_quantity,
            total_days=order.total_days,
            notes=order.notes,
        )
