"""
Production queue module.

Estimates production deadlines for orders sharing a single production line
and keeps the stored schedule of every active order up to date.
"""

from orderqueue.production.config import ProductionDefaults
from orderqueue.production.calculator import (
    DeadlineEstimate,
    calculate_days_in_front,
    calculate_production_days,
    calculate_queue_schedule,
    calculate_total_minutes,
    estimate,
)
from orderqueue.production.service import (
    QueueRecalculationResult,
    list_active_orders,
    recalculate_queue,
)

__all__ = [
    'ProductionDefaults',
    'DeadlineEstimate',
    'calculate_days_in_front',
    'calculate_production_days',
    'calculate_queue_schedule',
    'calculate_total_minutes',
    'estimate',
    'QueueRecalculationResult',
    'list_active_orders',
    'recalculate_queue',
]
