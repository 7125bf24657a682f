"""
Reports over completed orders.

Read-only aggregation of fields the queue scheduler already stored.
"""
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd

from orderqueue.models import Order, OrderStatus

REPORT_COLUMNS = [
    "id",
    "created_at",
    "completed_at",
    "product_a_name",
    "product_a_quantity",
    "product_b_name",
    "product_b_quantity",
    "total_days",
    "estimated_completion_date",
    "notes",
]


def query_completed_orders(start_date: Optional[date] = None,
                           end_date: Optional[date] = None) -> List[Order]:
    """
    Completed orders whose completed_at falls within [start_date, end_date], newest first.

    Both bounds are whole days and inclusive; either may be omitted.
    """
    query = Order.query.filter(Order.status == OrderStatus.COMPLETED)

    if start_date:
        query = query.filter(Order.completed_at >= datetime.combine(start_date, time.min))

    if end_date:
        query = query.filter(Order.completed_at < datetime.combine(end_date + timedelta(days=1), time.min))

    return query.order_by(Order.completed_at.desc(), Order.id.desc()).all()


def orders_to_dataframe(orders: List[Order]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": o.id,
                "created_at": o.created_at,
                "completed_at": o.completed_at,
                "product_a_name": o.product_a_name,
                "product_a_quantity": o.product_a_quantity,
                "product_b_name": o.product_b_name,
                "product_b_quantity": o.product_b_quantity,
                "total_days": o.total_days,
                "estimated_completion_date": o.estimated_completion_date,
                "notes": o.notes,
            }
            for o in orders
        ],
        columns=REPORT_COLUMNS,
    )


def summarize_orders(frame: pd.DataFrame) -> Dict[str, Any]:
    """
    Summary statistics for a report.

    average_completion_days treats a missing total_days as 0 and is 0 for an empty report.
    """
    if frame.empty:
        return {
            "total_orders": 0,
            "total_product_a": 0,
            "total_product_b": 0,
            "average_completion_days": 0,
        }

    return {
        "total_orders": int(len(frame)),
        "total_product_a": int(frame["product_a_quantity"].fillna(0).sum()),
        "total_product_b": int(frame["product_b_quantity"].fillna(0).sum()),
        "average_completion_days": float(frame["total_days"].fillna(0).mean()),
    }


def build_completed_orders_report(start_date: Optional[date] = None,
                                  end_date: Optional[date] = None) -> Dict[str, Any]:
    """Completed orders in the date range plus summary statistics."""
    orders = query_completed_orders(start_date, end_date)
    frame = orders_to_dataframe(orders)
    return {
        "orders": [o.to_dict() for o in orders],
        "summary": summarize_orders(frame),
    }


def completed_orders_csv(start_date: Optional[date] = None,
                         end_date: Optional[date] = None) -> str:
    """Completed orders in the date range as CSV text."""
    frame = orders_to_dataframe(query_completed_orders(start_date, end_date))
    return frame.to_csv(index=False)
