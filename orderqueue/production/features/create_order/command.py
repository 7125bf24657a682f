# orderqueue/production/features/create_order/command.py

from dataclasses import dataclass
from datetime import date
from typing import Optional

from orderqueue.models import OrderStatus
from orderqueue.production.calculator import (
    calculate_production_days,
    calculate_total_minutes,
    validate_production_inputs,
)
from orderqueue.production.config import ProductionDefaults
from orderqueue.production.errors import OrderValidationError
from orderqueue.production.features.create_order.results import CreateOrderResult
from orderqueue.production.service import (
    get_settings,
    insert_order,
    project_new_order_schedule,
    recalculate_queue,
)
from orderqueue.production.validation import normalize_notes
from orderqueue.queue_lock import queue_lock_manager
from orderqueue.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class CreateOrderCommand:
    """
    Command to add a new order to the end of the production queue.

    - Snapshots per-unit times, daily capacity and product names onto the order
    - Computes the order's own day count and a provisional completion date
      behind the days already stored on the active queue
    - Inserts the order as pending
    - Recalculates the whole queue so every active order (including this one)
      is reconciled against today's date
    """
    product_a_quantity: int
    product_b_quantity: int
    production_time_a: Optional[int] = None
    production_time_b: Optional[int] = None
    daily_capacity: Optional[int] = None
    notes: Optional[str] = None
    user_id: Optional[int] = None

    def execute(self, reference_date: Optional[date] = None) -> CreateOrderResult:
        """
        Execute the order creation.

        Args:
            reference_date: Day the queue starts (defaults to today)

        Returns:
            CreateOrderResult with the stored schedule of the new order

        Raises:
            OrderValidationError: If demand, times or capacity are invalid
            QueueFetchError: If the active queue could not be read (nothing is inserted)
        """
        settings = get_settings()
        product_a_name, product_b_name = ProductionDefaults.resolve_names(settings)
        time_a, time_b, capacity = ProductionDefaults.resolve_parameters(
            settings,
            self.production_time_a,
            self.production_time_b,
            self.daily_capacity
        )

        # 1️⃣ Reject invalid input before any computation
        is_valid, error = validate_production_inputs(
            self.product_a_quantity,
            self.product_b_quantity,
            time_a,
            time_b,
            capacity
        )
        if not is_valid:
            logger.warning(f"Rejected new order: {error}")
            raise OrderValidationError(error)

        with queue_lock_manager.acquire_queue_lock("create_order"):
            # 2️⃣ Own duration on the production line
            total_minutes = calculate_total_minutes(
                self.product_a_quantity,
                self.product_b_quantity,
                time_a,
                time_b
            )
            order_days = calculate_production_days(total_minutes, capacity)

            # 3️⃣ Provisional completion behind the stored queue
            _, projected_completion, days_in_front = project_new_order_schedule(
                order_days,
                reference_date
            )

            # 4️⃣ Insert as pending
            order = insert_order(
                user_id=self.user_id,
                product_a_quantity=self.product_a_quantity,
                product_b_quantity=self.product_b_quantity,
                product_a_name=product_a_name,
                product_b_name=product_b_name,
                production_time_a=time_a,
                production_time_b=time_b,
                daily_capacity=capacity,
                total_days=order_days,
                estimated_completion_date=projected_completion,
                status=OrderStatus.PENDING,
                notes=normalize_notes(self.notes),
            )
            order_id = order.id

            logger.info(
                f"Order {order_id} queued: {order_days} day(s) behind {days_in_front} day(s) of work, "
                f"provisional completion {projected_completion}"
            )

            # 5️⃣ Reconcile the whole queue
            recalculation = recalculate_queue(reference_date)

        return CreateOrderResult(
            order_id=order_id,
            total_days=order.total_days,
            estimated_completion_date=order.estimated_completion_date,
            projected_completion_date=projected_completion,
            days_in_front=days_in_front,
            queue_errors=len(recalculation.errors),
        )
