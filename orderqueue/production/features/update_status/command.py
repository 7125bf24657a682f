# orderqueue/production/features/update_status/command.py

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from orderqueue.models import OrderStatus, db
from orderqueue.production.features.update_status.results import StatusUpdateResult
from orderqueue.production.service import get_order, recalculate_queue
from orderqueue.production.transitions import (
    changes_queue_membership,
    parse_status,
    validate_transition,
)
from orderqueue.production.validation import normalize_notes
from orderqueue.queue_lock import queue_lock_manager
from orderqueue.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class UpdateOrderStatusCommand:
    """
    Command to move an order through its lifecycle.

    - Validates the transition (pending→in_progress, in_progress→completed,
      pending→canceled, canceled→pending)
    - Stamps completed_at when the order is completed
    - Replaces notes when non-empty notes are given
    - Recalculates the whole active queue after every status change

    Requesting the status the order already has only updates notes.
    """
    order_id: int
    status: str
    notes: Optional[str] = None

    def execute(self, reference_date: Optional[date] = None) -> StatusUpdateResult:
        """
        Execute the status update.

        Returns:
            StatusUpdateResult with old/new status and whether the queue was recalculated

        Raises:
            OrderValidationError: If status is missing or unknown
            OrderNotFoundError: If the order does not exist
            InvalidTransitionError: If the lifecycle does not allow the change
        """
        target = parse_status(self.status)
        notes = normalize_notes(self.notes)

        with queue_lock_manager.acquire_queue_lock("update_order_status"):
            # 1️⃣ Fetch order record
            order = get_order(self.order_id)
            current = order.status

            # 2️⃣ Same status: notes only
            if current == target:
                if notes is not None:
                    order.notes = notes
                    db.session.commit()
                logger.info(f"Order {self.order_id} already {current.value}, status unchanged")
                return StatusUpdateResult(
                    order_id=self.order_id,
                    from_status=current.value,
                    to_status=target.value,
                    queue_recalculated=False,
                    completed_at=order.completed_at.isoformat() if order.completed_at else None,
                )

            validate_transition(current, target)

            # 3️⃣ Update order fields
            order.status = target
            if target == OrderStatus.COMPLETED:
                order.completed_at = datetime.utcnow()
            if notes is not None:
                order.notes = notes
            completed_at = order.completed_at.isoformat() if order.completed_at else None
            db.session.commit()

            logger.info(
                f"Order {self.order_id} status {current.value}→{target.value}",
                queue_membership_changed=changes_queue_membership(current, target),
            )

            # 4️⃣ Every status change recalculates the full active queue
            recalculation = recalculate_queue(reference_date)

        return StatusUpdateResult(
            order_id=self.order_id,
            from_status=current.value,
            to_status=target.value,
            queue_recalculated=True,
            queue_errors=len(recalculation.errors),
            completed_at=completed_at,
        )
