"""
Helper functions for parsing order requests and shaping API responses.
"""
from typing import Any, Dict, Optional

from flask import jsonify

from orderqueue.datetime_utils import parse_iso_date
from orderqueue.models import Order
from orderqueue.production.config import ProductionDefaults
from orderqueue.production.errors import (
    OrderError,
    OrderNotFoundError,
    OrderStateError,
    OrderValidationError,
    QueueFetchError,
)
from orderqueue.production.validation import coerce_int
from orderqueue.queue_lock import QueueLockTimeout


def parse_create_order_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract CreateOrderCommand arguments from a request body.

    Missing quantities count as 0; missing times and capacity are left for
    the command to fill from settings and defaults.

    Raises:
        OrderValidationError: If a field is not an integer
    """
    return {
        'product_a_quantity': coerce_int(data.get('product_a_quantity'), 'product_a_quantity', minimum=0) or 0,
        'product_b_quantity': coerce_int(data.get('product_b_quantity'), 'product_b_quantity', minimum=0) or 0,
        'production_time_a': coerce_int(data.get('production_time_a'), 'production_time_a'),
        'production_time_b': coerce_int(data.get('production_time_b'), 'production_time_b'),
        'daily_capacity': coerce_int(data.get('daily_capacity'), 'daily_capacity'),
        'notes': data.get('notes'),
    }


def parse_edit_order_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract EditOrderCommand arguments; absent keys stay None (unchanged).

    Raises:
        OrderValidationError: If a quantity is not a non-negative integer
    """
    return {
        'product_a_quantity': coerce_int(data.get('product_a_quantity'), 'product_a_quantity', minimum=0),
        'product_b_quantity': coerce_int(data.get('product_b_quantity'), 'product_b_quantity', minimum=0),
        'notes': data.get('notes'),
    }


def parse_settings_payload(data: Dict[str, Any], current=None) -> Dict[str, Any]:
    """
    Extract settings fields, keeping current values for keys that are absent.

    Raises:
        OrderValidationError: If a name is blank or a time is not a positive integer
    """
    name_a, name_b = ProductionDefaults.resolve_names(current)
    time_a, time_b = ProductionDefaults.resolve_times(current)

    product_a_name = str(data.get('product_a_name', name_a) or '').strip()
    product_b_name = str(data.get('product_b_name', name_b) or '').strip()
    if not product_a_name or not product_b_name:
        raise OrderValidationError("Product names cannot be empty")

    product_a_time = coerce_int(data.get('product_a_time', time_a), 'product_a_time', minimum=1)
    product_b_time = coerce_int(data.get('product_b_time', time_b), 'product_b_time', minimum=1)
    if product_a_time is None or product_b_time is None:
        raise OrderValidationError("Production times are required")

    return {
        'product_a_name': product_a_name,
        'product_b_name': product_b_name,
        'product_a_time': product_a_time,
        'product_b_time': product_b_time,
    }


def transform_order_for_queue(order: Order, position: int) -> Dict[str, Any]:
    """Order as shown in the queue view, with its 1-based queue position."""
    return {
        'position': position,
        **order.to_dict(),
    }


def order_error_response(exc: Exception):
    """Translate a production error into a JSON error response."""
    if isinstance(exc, OrderNotFoundError):
        status_code = 404
    elif isinstance(exc, (OrderValidationError, OrderStateError)):
        status_code = 400
    elif isinstance(exc, QueueLockTimeout):
        status_code = 409
    elif isinstance(exc, QueueFetchError):
        status_code = 500
    elif isinstance(exc, OrderError):
        status_code = 400
    else:
        status_code = 500
    return jsonify({'error': str(exc)}), status_code


def parse_optional_date_arg(value: Optional[str], name: str):
    """
    Parse a YYYY-MM-DD query argument.

    Raises:
        OrderValidationError: If the value is malformed
    """
    try:
        return parse_iso_date(value)
    except ValueError:
        raise OrderValidationError(f"{name} must be in YYYY-MM-DD format") from None
