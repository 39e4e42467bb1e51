"""
Tests for the daily profit & loss rollup.
"""

from datetime import datetime

import pytest

from savorsync.schemas.common import DateRange, Scope
from savorsync.schemas.labor import LaborCost
from savorsync.schemas.location import Location
from savorsync.services.profit import (
    daily_rental_cost,
    build_daily_profit,
    aggregate_profit_by_period,
    summarize_profit,
)
from tests.factories import make_menu_item, make_line, make_order

# Saturday 9th to Monday 11th
RANGE = DateRange(start=datetime(2024, 3, 9), end=datetime(2024, 3, 11, 23, 59))


@pytest.fixture
def locations():
    return [
        Location(id="loc_1", name="Downtown", monthly_rent=3000.0),
        Location(id="loc_2", name="Uptown", monthly_rent=1500.0),
        Location(id="loc_3", name="Closed", monthly_rent=9000.0, is_active=False),
    ]


@pytest.fixture
def labor_costs():
    return [
        LaborCost(
            id="cost_1", time_log_id="log_1", staff_id="staff_1", location_id="loc_1",
            work_date=datetime(2024, 3, 10, 9), hourly_rate=15.0,
            regular_pay=30.0, overtime_pay=0.0, total_compensation=30.0,
        ),
    ]


@pytest.fixture
def orders():
    burger = make_menu_item(price=10.0, cost=4.0)
    return [make_order(50.0, datetime(2024, 3, 10, 12), items=[make_line(burger, 2)])]


class TestDailyProfit:

    def test_daily_rental_cost(self):
        assert daily_rental_cost(3000.0) == pytest.approx(100.0)
        assert daily_rental_cost(3100.0, 31) == pytest.approx(100.0)

    def test_every_day_in_range_gets_an_entry(self, orders, labor_costs, locations):
        scope = Scope(location_id="loc_1", date_range=RANGE)
        entries = build_daily_profit(orders, labor_costs, locations, scope)

        assert [entry.date for entry in entries] == ["2024-03-09", "2024-03-10", "2024-03-11"]
        assert all(entry.rental_cost == pytest.approx(100.0) for entry in entries)

        sunday = entries[1]
        assert sunday.sales == pytest.approx(50.0)
        assert sunday.ingredients_cost == pytest.approx(8.0)
        assert sunday.labour_cost == pytest.approx(30.0)
        assert sunday.profit == pytest.approx(-88.0)

    def test_rent_of_active_locations_in_scope(self, orders, labor_costs, locations):
        scope = Scope(date_range=RANGE)
        entries = build_daily_profit(orders, labor_costs, locations, scope)
        assert entries[0].rental_cost == pytest.approx(150.0)

    def test_other_location_has_no_sales(self, orders, labor_costs, locations):
        scope = Scope(location_id="loc_2", date_range=RANGE)
        entries = build_daily_profit(orders, labor_costs, locations, scope)
        assert sum(entry.sales for entry in entries) == 0


class TestAggregation:

    def test_weeks_start_on_sunday(self, orders, labor_costs, locations):
        entries = build_daily_profit(orders, labor_costs, locations, Scope(location_id="loc_1", date_range=RANGE))
        weeks = aggregate_profit_by_period(entries, "week")

        assert [week.date for week in weeks] == ["2024-03-03", "2024-03-10"]
        assert weeks[1].rental_cost == pytest.approx(200.0)
        assert weeks[1].sales == pytest.approx(50.0)

    def test_month(self, orders, labor_costs, locations):
        entries = build_daily_profit(orders, labor_costs, locations, Scope(location_id="loc_1", date_range=RANGE))
        months = aggregate_profit_by_period(entries, "month")

        assert [month.date for month in months] == ["2024-03"]
        assert months[0].profit == pytest.approx(50.0 - 8.0 - 30.0 - 300.0)

    def test_unknown_period_rejected(self):
        with pytest.raises(ValueError):
            aggregate_profit_by_period([], "year")

    def test_summary(self, orders, labor_costs, locations):
        entries = build_daily_profit(orders, labor_costs, locations, Scope(location_id="loc_1", date_range=RANGE))
        summary = summarize_profit(entries)

        assert summary.sales == pytest.approx(50.0)
        assert summary.rental_cost == pytest.approx(300.0)
        assert summary.profit == pytest.approx(-288.0)
        assert summary.to_dict()["labour_percentage"] == pytest.approx(60.0)

    def test_summary_without_sales(self):
        assert summarize_profit([]).profit_margin == 0.0
