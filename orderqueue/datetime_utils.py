"""
Date and time utility functions for the application.
"""
from datetime import date, datetime, timedelta
from typing import Optional, Union


def add_business_days(start_date, business_days):
    """
    Calculate the date that is a specified number of business days after the start date.

    Steps forward one calendar day at a time and only counts Monday through Friday.
    Adding 0 business days returns the start date unchanged, even if it falls on a weekend.

    Args:
        start_date: The start date (date or datetime object)
        business_days: Number of business days to add

    Returns:
        date: The calculated date that is business_days after start_date
    """
    # Convert to date if it's a datetime
    if isinstance(start_date, datetime):
        current_date = start_date.date()
    else:
        current_date = start_date

    days_forward = 0
    business_days_counted = 0

    while business_days_counted < business_days:
        days_forward += 1
        check_date = current_date + timedelta(days=days_forward)

        # Check if it's a weekday (Monday=0, Sunday=6)
        if check_date.weekday() < 5:  # Monday through Friday
            business_days_counted += 1

    return current_date + timedelta(days=days_forward)


def is_business_day(d: Union[date, datetime]) -> bool:
    """Return True if the given day is Monday through Friday."""
    return d.weekday() < 5


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string into a date.

    Returns None for empty input. Raises ValueError for malformed strings.
    """
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    return datetime.strptime(value, "%Y-%m-%d").date()
