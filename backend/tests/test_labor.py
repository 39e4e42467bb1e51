"""
Tests for time logs, labor costs and labor metrics.
"""

from datetime import datetime, timedelta

import pytest

from savorsync.schemas.labor import StaffRole, ShiftStatus, TimeLogStatus
from savorsync.config import Settings
from savorsync.services import labor
from savorsync.services.labor import (
    LaborCostCalculator,
    split_shift_hours,
    calculate_shift_pay,
    build_time_log,
    build_time_logs,
    build_labor_cost,
    build_labor_costs,
    tips_for_time_log,
    calculate_labor_metrics,
    daily_labor,
)
from tests.factories import make_order, make_staff, make_shift

MORNING = datetime(2024, 3, 14, 9, 0)


@pytest.fixture
def calculator():
    return LaborCostCalculator(overtime_threshold=8.0, overtime_multiplier=1.5)


class TestOvertimeSplit:

    def test_ten_hour_shift_at_twenty_dollars(self, calculator):
        assert calculator.split_hours(10) == (8.0, 2.0)
        assert calculator.shift_pay(10, 20.0) == pytest.approx(220.0)

    def test_short_shift_has_no_overtime(self):
        assert split_shift_hours(6.5) == (6.5, 0.0)
        assert calculate_shift_pay(6.5, 20.0) == (130.0, 0.0)

    def test_negative_hours_clamped(self):
        assert split_shift_hours(-1) == (0.0, 0.0)

    def test_threshold_applies_per_shift(self, calculator):
        # Two 6-hour shifts are 12 hours in total but never overtime
        staff = make_staff()
        shifts = [
            make_shift(staff, MORNING, 6),
            make_shift(staff, MORNING + timedelta(days=1), 6),
        ]
        time_logs = calculator.time_logs(shifts)
        assert sum(log.overtime_hours for log in time_logs) == 0.0


class TestTimeLogs:

    def test_completed_shift_uses_scheduled_times(self):
        shift = make_shift(make_staff(), MORNING, 10, break_minutes=30)
        time_log = build_time_log(shift)

        assert time_log.status == TimeLogStatus.CLOSED
        assert time_log.regular_hours == pytest.approx(8.0)
        assert time_log.overtime_hours == pytest.approx(2.0)
        assert time_log.total_hours == pytest.approx(10.0)

    def test_actual_clock_times(self):
        shift = make_shift(make_staff(), MORNING, 8)
        time_log = build_time_log(shift, clock_out=MORNING + timedelta(hours=9))
        assert time_log.overtime_hours == pytest.approx(1.0)

    def test_in_progress_shift_gives_open_log(self):
        shift = make_shift(make_staff(), MORNING, 8, status=ShiftStatus.IN_PROGRESS)
        time_log = build_time_log(shift)

        assert time_log.status == TimeLogStatus.OPEN
        assert time_log.clock_out is None
        assert time_log.total_hours == 0

    def test_clock_out_before_clock_in_rejected(self):
        shift = make_shift(make_staff(), MORNING, 8)
        with pytest.raises(ValueError):
            build_time_log(shift, clock_out=MORNING - timedelta(minutes=1))

    def test_only_completed_shifts_are_logged(self):
        staff = make_staff()
        shifts = [
            make_shift(staff, MORNING, 8),
            make_shift(staff, MORNING, 8, status=ShiftStatus.NO_SHOW),
            make_shift(staff, MORNING, 8, status=ShiftStatus.SCHEDULED),
        ]
        assert len(build_time_logs(shifts)) == 1


class TestLaborCosts:

    def test_regular_and_overtime_pay(self):
        staff = make_staff(hourly_rate=20.0)
        time_log = build_time_log(make_shift(staff, MORNING, 10))
        cost = build_labor_cost(time_log, staff)

        assert cost.regular_pay == pytest.approx(160.0)
        assert cost.overtime_pay == pytest.approx(60.0)
        assert cost.total_compensation == pytest.approx(220.0)
        assert cost.work_date == MORNING

    def test_tips_only_for_front_of_house(self):
        cook = make_staff("cook_1", StaffRole.COOK)
        time_log = build_time_log(make_shift(cook, MORNING, 8))
        cost = build_labor_cost(time_log, cook, tips=40.0)

        assert cost.tips == 0.0
        assert cost.total_compensation == pytest.approx(160.0)

    def test_staff_mismatch_rejected(self):
        time_log = build_time_log(make_shift(make_staff("a"), MORNING, 8))
        with pytest.raises(ValueError):
            build_labor_cost(time_log, make_staff("b"))

    def test_tips_from_orders_inside_clock_window(self):
        staff = make_staff()
        time_log = build_time_log(make_shift(staff, MORNING, 8))
        orders = [
            make_order(50.0, MORNING + timedelta(hours=1), tip=8.0, staff_id=staff.id),
            make_order(50.0, MORNING + timedelta(hours=9), tip=5.0, staff_id=staff.id),
            make_order(50.0, MORNING + timedelta(hours=2), tip=7.0, staff_id="other"),
        ]
        assert tips_for_time_log(time_log, orders) == pytest.approx(8.0)

    def test_unknown_staff_and_open_logs_skipped(self):
        known = make_staff("known")
        ghost = make_staff("ghost")
        time_logs = [
            build_time_log(make_shift(known, MORNING, 8)),
            build_time_log(make_shift(ghost, MORNING, 8)),
            build_time_log(make_shift(known, MORNING, 8, status=ShiftStatus.IN_PROGRESS)),
        ]
        costs = build_labor_costs(time_logs, [known])
        assert [cost.staff_id for cost in costs] == ["known"]


class TestLaborMetrics:

    def test_rollup(self, calculator):
        server = make_staff("server", StaffRole.SERVER, hourly_rate=20.0)
        cook = make_staff("cook", StaffRole.COOK, hourly_rate=20.0)
        shifts = [make_shift(server, MORNING, 10), make_shift(cook, MORNING, 6)]
        orders = [make_order(500.0, MORNING + timedelta(hours=1), tip=30.0, staff_id="server")]

        time_logs = calculator.time_logs(shifts)
        labor_costs = calculator.labor_costs(time_logs, [server, cook], orders)
        metrics = calculator.metrics(time_logs, labor_costs, orders)

        # 220 + 30 tips + 120
        assert metrics.total_labor_cost == pytest.approx(370.0)
        assert metrics.total_tips == pytest.approx(30.0)
        assert metrics.total_regular_hours == pytest.approx(14.0)
        assert metrics.total_overtime_hours == pytest.approx(2.0)
        assert metrics.labor_cost_percentage == pytest.approx(74.0)
        assert metrics.overtime_shift_count == 1
        # Wages 340 over 8 + 6 + 2 x 1.5 weighted hours
        assert metrics.average_hourly_rate == pytest.approx(20.0)
        assert metrics.total_regular_hours <= 8 * metrics.shift_count

    def test_no_revenue_gives_zero_percentage(self):
        metrics = calculate_labor_metrics([], [], [])
        assert metrics.labor_cost_percentage == 0.0
        assert metrics.average_hourly_rate == 0.0

    def test_daily_labor(self, calculator):
        staff = make_staff()
        shifts = [
            make_shift(staff, MORNING, 9),
            make_shift(staff, MORNING + timedelta(days=1), 4),
        ]
        time_logs = calculator.time_logs(shifts)
        days = daily_labor(time_logs, calculator.labor_costs(time_logs, [staff]))

        assert [day.date for day in days] == ["2024-03-14", "2024-03-15"]
        assert days[0].overtime_hours == pytest.approx(1.0)
        assert days[0].cost == pytest.approx(190.0)
        assert days[1].staff_count == 1


class TestOvertimeSettings:

    def test_module_defaults_match_settings(self):
        settings = Settings()
        assert labor.OVERTIME_THRESHOLD_HOURS == settings.overtime_threshold_hours
        assert labor.OVERTIME_MULTIPLIER == settings.overtime_multiplier

    def test_calculator_follows_overridden_settings(self, monkeypatch):
        overridden = Settings(overtime_threshold_hours=10.0, overtime_multiplier=2.0)
        monkeypatch.setattr(labor, "get_settings", lambda: overridden)

        calculator = LaborCostCalculator()
        assert calculator.split_hours(11) == (10.0, 1.0)
        # 10h at 20 plus 1h at 40
        assert calculator.shift_pay(11, 20.0) == pytest.approx(240.0)
