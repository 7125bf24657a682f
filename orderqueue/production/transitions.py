"""
Order lifecycle rules.

pending -> in_progress -> completed
pending -> canceled -> pending
"""
from typing import Dict, FrozenSet, Optional

from orderqueue.models import ACTIVE_STATUSES, OrderStatus
from orderqueue.production.errors import InvalidTransitionError, OrderValidationError


ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.CANCELED: frozenset({OrderStatus.PENDING}),
    OrderStatus.COMPLETED: frozenset(),
}


def parse_status(value: Optional[str]) -> OrderStatus:
    """
    Convert a raw status string to an OrderStatus.

    Raises:
        OrderValidationError: If the value is missing or unknown
    """
    if isinstance(value, OrderStatus):
        return value
    if not value:
        raise OrderValidationError("status is required")
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        valid = ', '.join(s.value for s in OrderStatus)
        raise OrderValidationError(f"status must be one of: {valid}") from None


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def validate_transition(current: OrderStatus, target: OrderStatus) -> None:
    """
    Raises:
        InvalidTransitionError: If the lifecycle does not allow current -> target
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot change order status from {current.value} to {target.value}"
        )


def changes_queue_membership(current: OrderStatus, target: OrderStatus) -> bool:
    """True when the order enters or leaves the set of orders sharing the production line."""
    return (current in ACTIVE_STATUSES) != (target in ACTIVE_STATUSES)
