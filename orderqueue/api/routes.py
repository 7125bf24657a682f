"""
API routes for production orders, the queue, settings and reports.
"""
from flask import Response, jsonify, request

from orderqueue.api import api_bp
from orderqueue.api.helpers import (
    order_error_response,
    parse_create_order_payload,
    parse_edit_order_payload,
    parse_optional_date_arg,
    parse_settings_payload,
    transform_order_for_queue,
)
from orderqueue.auth.utils import admin_required, get_current_user_id, login_required
from orderqueue.models import OrderStatus, db
from orderqueue.production.calculator import estimate
from orderqueue.production.config import ProductionDefaults
from orderqueue.production.errors import OrderError
from orderqueue.production.features.create_order.command import CreateOrderCommand
from orderqueue.production.features.edit_order.command import EditOrderCommand
from orderqueue.production.features.update_status.command import UpdateOrderStatusCommand
from orderqueue.production.preview import preview_queue_changes, serialize_preview
from orderqueue.production.reports import build_completed_orders_report, completed_orders_csv
from orderqueue.production.service import (
    count_orders_by_status,
    get_order,
    get_settings,
    list_active_orders,
    list_orders_by_status,
    recalculate_queue,
    save_settings,
)
from orderqueue.production.transitions import parse_status
from orderqueue.queue_lock import QueueLockTimeout
from orderqueue.logging_config import get_logger

logger = get_logger(__name__)


def _unexpected_error(route: str, e: Exception):
    db.session.rollback()
    logger.error(f"Error in {route}", error=str(e), exc_info=True)
    return jsonify({'error': str(e)}), 500


# ==============================================================================
# ORDERS
# ==============================================================================

@api_bp.route("/orders", methods=["GET"])
@login_required
def list_orders():
    """
    Return orders with the requested status, newest first.

    Query Parameters:
        status: pending (default), in_progress, completed or canceled
    """
    try:
        status = parse_status(request.args.get('status', OrderStatus.PENDING.value))
        orders = list_orders_by_status(status)
        return jsonify({
            'orders': [order.to_dict() for order in orders],
            'total_count': len(orders),
            'status': status.value,
        }), 200
    except OrderError as e:
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("/api/orders", e)


@api_bp.route("/orders/summary", methods=["GET"])
@login_required
def orders_summary():
    """Return the number of orders in each status."""
    try:
        return jsonify({'counts': count_orders_by_status()}), 200
    except Exception as e:
        return _unexpected_error("/api/orders/summary", e)


@api_bp.route("/orders/<int:order_id>", methods=["GET"])
@login_required
def get_order_detail(order_id):
    try:
        return jsonify(get_order(order_id).to_dict()), 200
    except OrderError as e:
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("/api/orders/<id>", e)


@api_bp.route("/orders", methods=["POST"])
@login_required
def create_order():
    """
    Queue a new order behind every active order.

    Request Body:
        {
            "product_a_quantity": int,
            "product_b_quantity": int,
            "production_time_a": int (optional),
            "production_time_b": int (optional),
            "daily_capacity": int (optional),
            "notes": str (optional)
        }
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No JSON data provided'}), 400

    try:
        command = CreateOrderCommand(
            user_id=get_current_user_id(),
            **parse_create_order_payload(data)
        )
        result = command.execute()
        return jsonify(result.to_dict()), 201
    except (OrderError, QueueLockTimeout) as e:
        logger.warning(f"create_order rejected: {e}")
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("POST /api/orders", e)


@api_bp.route("/orders/estimate", methods=["POST"])
@login_required
def estimate_order_deadline():
    """
    Estimate days and completion date for an order starting today, without saving it.

    Accepts the same body as POST /api/orders. Times and capacity that are
    not given come from the saved settings and defaults.
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No JSON data provided'}), 400

    try:
        payload = parse_create_order_payload(data)
        time_a, time_b, capacity = ProductionDefaults.resolve_parameters(
            get_settings(),
            payload['production_time_a'],
            payload['production_time_b'],
            payload['daily_capacity']
        )
        result = estimate(
            payload['product_a_quantity'],
            payload['product_b_quantity'],
            time_a,
            time_b,
            capacity
        )
        return jsonify({
            **result.to_dict(),
            'production_time_a': time_a,
            'production_time_b': time_b,
            'daily_capacity': capacity,
        }), 200
    except OrderError as e:
        return order_error_response(e)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        return _unexpected_error("/api/orders/estimate", e)


@api_bp.route("/orders/<int:order_id>/status", methods=["PUT"])
@login_required
def update_order_status(order_id):
    """
    Move an order to a new status and recalculate the queue.

    Request Body:
        {
            "status": "pending" | "in_progress" | "completed" | "canceled",
            "notes": str (optional)
        }
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No JSON data provided'}), 400

    try:
        command = UpdateOrderStatusCommand(
            order_id=order_id,
            status=data.get('status'),
            notes=data.get('notes')
        )
        result = command.execute()
        return jsonify(result.to_dict()), 200
    except (OrderError, QueueLockTimeout) as e:
        logger.warning(f"update_order_status rejected for order {order_id}: {e}")
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("/api/orders/<id>/status", e)


@api_bp.route("/orders/<int:order_id>", methods=["PUT"])
@login_required
def edit_order(order_id):
    """
    Change quantities or notes of a pending order.

    Request Body:
        {
            "product_a_quantity": int (optional),
            "product_b_quantity": int (optional),
            "notes": str (optional, "" clears)
        }
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No JSON data provided'}), 400

    try:
        result = EditOrderCommand(order_id=order_id, **parse_edit_order_payload(data)).execute()
        return jsonify(result.to_dict()), 200
    except (OrderError, QueueLockTimeout) as e:
        logger.warning(f"edit_order rejected for order {order_id}: {e}")
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("PUT /api/orders/<id>", e)


# ==============================================================================
# QUEUE
# ==============================================================================

@api_bp.route("/queue", methods=["GET"])
@login_required
def get_queue():
    """Return active orders in production order with their stored schedule."""
    try:
        orders = list_active_orders()
        return jsonify({
            'orders': [transform_order_for_queue(order, position) for position, order in enumerate(orders, 1)],
            'total_count': len(orders),
            'total_days': sum(order.total_days or 0 for order in orders),
        }), 200
    except OrderError as e:
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("/api/queue", e)


@api_bp.route("/queue/preview", methods=["GET"])
@login_required
def preview_queue():
    """
    Show what a recalculation would change, without writing.

    Query Parameters:
        reference_date: YYYY-MM-DD (defaults to today)
        show_all: "true" to include unchanged orders
    """
    try:
        reference_date = parse_optional_date_arg(request.args.get('reference_date'), 'reference_date')
        show_all = request.args.get('show_all', 'false').lower() in ('1', 'true', 'yes')
        return jsonify(serialize_preview(preview_queue_changes(reference_date, show_all=show_all))), 200
    except OrderError as e:
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("/api/queue/preview", e)


@api_bp.route("/queue/recalculate", methods=["POST"])
@admin_required
def force_recalculate_queue():
    """Recalculate and store the schedule of every active order."""
    data = request.get_json(silent=True) or {}
    try:
        reference_date = parse_optional_date_arg(data.get('reference_date'), 'reference_date')
        result = recalculate_queue(reference_date)
        return jsonify(result.to_dict()), 200
    except (OrderError, QueueLockTimeout) as e:
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("/api/queue/recalculate", e)


# ==============================================================================
# SETTINGS
# ==============================================================================

@api_bp.route("/settings", methods=["GET"])
@login_required
def get_production_settings():
    """Return saved settings, or the defaults when nothing was saved yet."""
    try:
        settings = get_settings()
        if settings is not None:
            payload = settings.to_dict()
        else:
            name_a, name_b = ProductionDefaults.resolve_names()
            time_a, time_b = ProductionDefaults.resolve_times()
            payload = {
                'product_a_name': name_a,
                'product_b_name': name_b,
                'product_a_time': time_a,
                'product_b_time': time_b,
                'updated_at': None,
            }
        payload['daily_capacity'] = ProductionDefaults.DAILY_CAPACITY_MINUTES
        return jsonify(payload), 200
    except Exception as e:
        return _unexpected_error("/api/settings", e)


@api_bp.route("/settings", methods=["PUT"])
@login_required
def update_production_settings():
    """
    Save product names and per-unit times for future orders.

    Existing orders keep the values they were created with.
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No JSON data provided'}), 400

    try:
        fields = parse_settings_payload(data, get_settings())
        settings = save_settings(**fields)
        return jsonify({'status': 'success', 'settings': settings.to_dict()}), 200
    except OrderError as e:
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("PUT /api/settings", e)


# ==============================================================================
# REPORTS
# ==============================================================================

@api_bp.route("/reports", methods=["GET"])
@login_required
def completed_orders_report():
    """
    Completed orders within a date range.

    Query Parameters:
        start_date: YYYY-MM-DD (optional, inclusive)
        end_date: YYYY-MM-DD (optional, inclusive)
        format: "csv" to download CSV instead of JSON
    """
    try:
        start_date = parse_optional_date_arg(request.args.get('start_date'), 'start_date')
        end_date = parse_optional_date_arg(request.args.get('end_date'), 'end_date')
        if start_date and end_date and start_date > end_date:
            return jsonify({'error': 'start_date must not be after end_date'}), 400

        if request.args.get('format', '').lower() == 'csv':
            return Response(
                completed_orders_csv(start_date, end_date),
                mimetype='text/csv',
                headers={'Content-Disposition': 'attachment; filename=completed_orders.csv'}
            )

        report = build_completed_orders_report(start_date, end_date)
        report['start_date'] = start_date.isoformat() if start_date else None
        report['end_date'] = end_date.isoformat() if end_date else None
        return jsonify(report), 200
    except OrderError as e:
        return order_error_response(e)
    except Exception as e:
        return _unexpected_error("/api/reports", e)
