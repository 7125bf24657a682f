"""
Tests for the production deadline calculator (pure business logic).
These tests have no database or Flask dependencies - they test pure functions.
"""
import pytest
from datetime import date, datetime

from orderqueue.datetime_utils import add_business_days, is_business_day, parse_iso_date
from orderqueue.production.calculator import (
    DeadlineEstimate,
    calculate_days_in_front,
    calculate_production_days,
    calculate_queue_schedule,
    calculate_total_minutes,
    diff_schedule,
    estimate,
    project_completion_after_queue,
    validate_production_inputs,
)

MONDAY = date(2024, 1, 1)
FRIDAY = date(2024, 1, 5)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)


def make_order(order_id, qty_a=0, qty_b=10, time_a=30, time_b=45, capacity=480, total_days=None):
    return {
        'id': order_id,
        'product_a_quantity': qty_a,
        'product_b_quantity': qty_b,
        'production_time_a': time_a,
        'production_time_b': time_b,
        'daily_capacity': capacity,
        'total_days': total_days,
    }


# ==============================================================================
# BUSINESS DAY TESTS
# ==============================================================================

class TestAddBusinessDays:
    """Tests for add_business_days."""

    def test_zero_days_returns_start(self):
        """Test that adding 0 days returns the start date."""
        assert add_business_days(MONDAY, 0) == MONDAY

    def test_zero_days_on_weekend_is_not_normalized(self):
        """Test that a weekend start stays on the weekend when nothing is added."""
        assert add_business_days(SATURDAY, 0) == SATURDAY
        assert add_business_days(SUNDAY, 0) == SUNDAY

    def test_friday_plus_one_is_monday(self):
        """Test that the weekend is skipped."""
        assert add_business_days(FRIDAY, 1) == date(2024, 1, 8)

    def test_weekend_start_plus_one_is_monday(self):
        """Test that counting from a Saturday lands on Monday."""
        assert add_business_days(SATURDAY, 1) == date(2024, 1, 8)
        assert add_business_days(SUNDAY, 1) == date(2024, 1, 8)

    def test_full_week(self):
        """Test that 5 business days from Monday is the next Monday."""
        assert add_business_days(MONDAY, 5) == date(2024, 1, 8)

    def test_accepts_datetime(self):
        """Test that a datetime start is reduced to its date."""
        assert add_business_days(datetime(2024, 1, 1, 15, 30), 1) == date(2024, 1, 2)

    def test_result_is_business_day_for_positive_days(self):
        """Test that every positive offset lands on a weekday."""
        for start in (MONDAY, FRIDAY, SATURDAY, SUNDAY):
            for days in range(1, 12):
                assert is_business_day(add_business_days(start, days))


class TestParseIsoDate:
    """Tests for parse_iso_date."""

    def test_parses_date(self):
        assert parse_iso_date("2024-01-05") == FRIDAY

    def test_empty_is_none(self):
        assert parse_iso_date(None) is None
        assert parse_iso_date("  ") is None

    def test_malformed_raises(self):
        with pytest.raises(ValueError):
            parse_iso_date("01/05/2024")


# ==============================================================================
# ESTIMATOR TESTS
# ==============================================================================

class TestValidateProductionInputs:
    """Tests for validate_production_inputs."""

    def test_valid_inputs(self):
        is_valid, error = validate_production_inputs(1, 0, 30, 45, 480)
        assert is_valid is True
        assert error is None

    def test_both_quantities_zero_rejected(self):
        """Test that an order must contain at least one unit."""
        is_valid, error = validate_production_inputs(0, 0, 30, 45, 480)
        assert is_valid is False
        assert "At least one" in error

    def test_negative_quantity_rejected(self):
        is_valid, error = validate_production_inputs(-1, 5, 30, 45, 480)
        assert is_valid is False
        assert "product_a_quantity" in error

    def test_non_integer_quantity_rejected(self):
        """Test that fractional and boolean quantities are rejected."""
        assert validate_production_inputs(1.5, 0, 30, 45, 480)[0] is False
        assert validate_production_inputs(True, 0, 30, 45, 480)[0] is False

    def test_non_positive_time_rejected(self):
        assert validate_production_inputs(1, 1, 0, 45, 480)[0] is False
        assert validate_production_inputs(1, 1, 30, -5, 480)[0] is False

    def test_non_positive_capacity_rejected(self):
        is_valid, error = validate_production_inputs(1, 1, 30, 45, 0)
        assert is_valid is False
        assert "daily_capacity" in error


class TestEstimate:
    """Tests for the single-order deadline estimate."""

    def test_ten_b_units_fit_in_one_day(self):
        """Test 10 × 45 min = 450 min → 1 day, done Tuesday when started Monday."""
        result = estimate(0, 10, 30, 45, 480, MONDAY)

        assert isinstance(result, DeadlineEstimate)
        assert result.total_minutes == 450
        assert result.days == 1
        assert result.completion_date == date(2024, 1, 2)

    def test_exact_capacity_is_one_day(self):
        """Test that a full day of work is 1 day, not 2."""
        result = estimate(16, 0, 30, 45, 480, MONDAY)
        assert result.total_minutes == 480
        assert result.days == 1

    def test_one_minute_over_capacity_is_two_days(self):
        result = estimate(1, 0, 481, 45, 480, MONDAY)
        assert result.days == 2
        assert result.completion_date == date(2024, 1, 3)

    def test_completion_skips_weekend(self):
        """Test that an order started Friday completes the following Monday."""
        result = estimate(0, 10, 30, 45, 480, FRIDAY)
        assert result.completion_date == date(2024, 1, 8)

    def test_datetime_start_is_reduced_to_date(self):
        result = estimate(0, 10, 30, 45, 480, datetime(2024, 1, 1, 23, 59))
        assert result.completion_date == date(2024, 1, 2)

    def test_invalid_capacity_raises(self):
        with pytest.raises(ValueError):
            estimate(1, 1, 30, 45, 0, MONDAY)

    def test_empty_order_raises(self):
        with pytest.raises(ValueError):
            estimate(0, 0, 30, 45, 480, MONDAY)

    def test_to_dict(self):
        data = estimate(0, 10, 30, 45, 480, MONDAY).to_dict()
        assert data == {'days': 1, 'completion_date': '2024-01-02', 'total_minutes': 450}


class TestProductionDays:
    """Tests for calculate_total_minutes and calculate_production_days."""

    def test_total_minutes(self):
        assert calculate_total_minutes(2, 3, 30, 45) == 195

    def test_days_round_up(self):
        assert calculate_production_days(1, 480) == 1
        assert calculate_production_days(960, 480) == 2
        assert calculate_production_days(961, 480) == 3

    def test_zero_capacity_raises(self):
        with pytest.raises(ValueError):
            calculate_production_days(100, 0)


# ==============================================================================
# QUEUE SCHEDULER TESTS
# ==============================================================================

class TestCalculateQueueSchedule:
    """Tests for calculate_queue_schedule."""

    def test_three_one_day_orders_from_monday(self):
        """Test that each order starts where the previous one finished."""
        orders = [make_order(1), make_order(2), make_order(3)]

        schedule = calculate_queue_schedule(orders, MONDAY)

        assert schedule[1]['estimated_completion_date'] == date(2024, 1, 2)
        assert schedule[2]['estimated_completion_date'] == date(2024, 1, 3)
        assert schedule[3]['estimated_completion_date'] == date(2024, 1, 4)
        assert [schedule[i]['total_days'] for i in (1, 2, 3)] == [1, 1, 1]
        assert schedule[2]['start_date'] == date(2024, 1, 2)

    def test_multi_day_order_pushes_later_orders(self):
        orders = [make_order(1, qty_b=20), make_order(2)]

        schedule = calculate_queue_schedule(orders, MONDAY)

        assert schedule[1]['total_days'] == 2
        assert schedule[1]['estimated_completion_date'] == date(2024, 1, 3)
        assert schedule[2]['estimated_completion_date'] == date(2024, 1, 4)

    def test_queue_crosses_weekend(self):
        orders = [make_order(i) for i in range(1, 6)]

        schedule = calculate_queue_schedule(orders, date(2024, 1, 3))

        assert schedule[2]['estimated_completion_date'] == FRIDAY
        assert schedule[3]['estimated_completion_date'] == date(2024, 1, 8)
        assert schedule[5]['estimated_completion_date'] == date(2024, 1, 10)

    def test_input_sequence_is_not_resorted(self):
        """Test that the schedule follows the given order, not the ids."""
        orders = [make_order(7), make_order(3)]

        schedule = calculate_queue_schedule(orders, MONDAY)

        assert list(schedule.keys()) == [7, 3]
        assert schedule[7]['estimated_completion_date'] < schedule[3]['estimated_completion_date']

    def test_each_order_uses_its_own_snapshot(self):
        """Test that per-order times and capacity are respected."""
        orders = [
            make_order(1, qty_b=10, time_b=45, capacity=480),
            make_order(2, qty_b=10, time_b=45, capacity=240),
        ]

        schedule = calculate_queue_schedule(orders, MONDAY)

        assert schedule[1]['total_days'] == 1
        assert schedule[2]['total_days'] == 2

    def test_stored_total_days_are_ignored(self):
        """Test that the schedule recomputes days instead of trusting stored values."""
        schedule = calculate_queue_schedule([make_order(1, total_days=9)], MONDAY)
        assert schedule[1]['total_days'] == 1

    def test_empty_queue(self):
        assert calculate_queue_schedule([], MONDAY) == {}

    def test_same_input_same_output(self):
        orders = [make_order(1), make_order(2, qty_a=20)]
        assert calculate_queue_schedule(orders, MONDAY) == calculate_queue_schedule(orders, MONDAY)


class TestDaysInFront:
    """Tests for calculate_days_in_front and project_completion_after_queue."""

    def test_sums_stored_days(self):
        orders = [make_order(1, total_days=2), make_order(2, total_days=3)]
        assert calculate_days_in_front(orders) == 5

    def test_missing_days_count_as_zero(self):
        orders = [make_order(1, total_days=None), make_order(2, total_days=1)]
        assert calculate_days_in_front(orders) == 1

    def test_empty_queue_starts_today(self):
        start, completion = project_completion_after_queue(1, 0, MONDAY)
        assert start == MONDAY
        assert completion == date(2024, 1, 2)

    def test_behind_existing_queue(self):
        start, completion = project_completion_after_queue(2, 3, MONDAY)
        assert start == date(2024, 1, 4)
        assert completion == date(2024, 1, 8)


class TestDiffSchedule:
    """Tests for diff_schedule."""

    def test_flags_changes(self):
        orders = [
            {**make_order(1, total_days=1), 'estimated_completion_date': date(2024, 1, 2)},
            {**make_order(2, total_days=1), 'estimated_completion_date': date(2024, 1, 2)},
        ]
        schedule = calculate_queue_schedule(orders, MONDAY)

        rows = diff_schedule(orders, schedule)

        assert rows[0]['has_changes'] is False
        assert rows[1]['has_changes'] is True
        assert rows[1]['completion_date_changed'] is True
        assert rows[1]['total_days_changed'] is False
        assert rows[1]['computed_completion_date'] == date(2024, 1, 3)
