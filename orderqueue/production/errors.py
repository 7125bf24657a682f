"""Exceptions raised by the production order services."""


class OrderError(Exception):
    """Base class for production order errors."""


class OrderValidationError(OrderError, ValueError):
    """Input rejected before any computation (missing demand, non-positive times or capacity)."""


class OrderNotFoundError(OrderError, LookupError):
    """No order exists with the requested id."""


class OrderStateError(OrderError, ValueError):
    """The order's current status does not allow the requested change."""


class InvalidTransitionError(OrderStateError):
    """Status change not permitted by the order lifecycle."""


class QueueFetchError(OrderError, RuntimeError):
    """The active order set could not be read; nothing was written."""
