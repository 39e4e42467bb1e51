"""
Scope Filtering

Narrows raw record collections to a (location, date range) scope before
aggregation, and builds the reporting windows used for period comparison.
All period boundaries are derived from an explicit ``as_of`` timestamp.
"""

from typing import Dict, Iterable, List, Optional, TypeVar
from datetime import datetime, timedelta
import math

from savorsync.schemas.common import DateRange, Scope
from savorsync.schemas.order import Order, OrderChannel
from savorsync.schemas.labor import TimeLog, LaborCost
from savorsync.schemas.task import Task
from savorsync.schemas.inventory import StockMovement

T = TypeVar("T")


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, returning exactly 0.0 for a zero denominator or a non-finite result."""
    if denominator == 0:
        return 0.0
    result = numerator / denominator
    if not math.isfinite(result):
        return 0.0
    return result


def percentage(numerator: float, denominator: float) -> float:
    result = safe_ratio(numerator, denominator) * 100
    return result if math.isfinite(result) else 0.0


def filter_by_scope(
    records: Iterable[T],
    scope: Scope,
    location_attr: str = "location_id",
    timestamp_attr: Optional[str] = None
) -> List[T]:
    """
    Keep records matching the scope's location and date range.

    Args:
        records: Records to filter (never modified)
        scope: Location/date-range scope; location "all" disables the location filter
        location_attr: Attribute holding the record's location id
        timestamp_attr: Attribute holding the record's timestamp; when None the
            date range is ignored
    """
    filtered = []
    for record in records:
        if not scope.is_all_locations and getattr(record, location_attr) != scope.location_id:
            continue
        if scope.date_range is not None and timestamp_attr is not None:
            if not scope.date_range.contains(getattr(record, timestamp_attr)):
                continue
        filtered.append(record)
    return filtered


def scope_orders(orders: Iterable[Order], scope: Scope) -> List[Order]:
    return filter_by_scope(orders, scope, timestamp_attr="created_at")


def scope_time_logs(time_logs: Iterable[TimeLog], scope: Scope) -> List[TimeLog]:
    return filter_by_scope(time_logs, scope, timestamp_attr="clock_in")


def scope_labor_costs(labor_costs: Iterable[LaborCost], scope: Scope) -> List[LaborCost]:
    return filter_by_scope(labor_costs, scope, timestamp_attr="work_date")


def scope_tasks(tasks: Iterable[Task], scope: Scope) -> List[Task]:
    return filter_by_scope(tasks, scope, timestamp_attr="due_date")


def scope_stock_movements(movements: Iterable[StockMovement], scope: Scope) -> List[StockMovement]:
    return filter_by_scope(movements, scope, timestamp_attr="created_at")


def filter_orders_by_channel(orders: Iterable[Order], channels: Iterable[OrderChannel]) -> List[Order]:
    wanted = {OrderChannel(c) for c in channels}
    return [order for order in orders if order.channel in wanted]


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def date_range_presets(as_of: datetime) -> Dict[str, DateRange]:
    """
    Standard reporting windows relative to ``as_of``.

    Weeks start on Sunday. Rolling windows end at ``as_of`` itself.
    """
    today_start = _start_of_day(as_of)
    yesterday = as_of - timedelta(days=1)
    # Python weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (as_of.weekday() + 1) % 7
    week_start = today_start - timedelta(days=days_since_sunday)
    month_start = today_start.replace(day=1)

    return {
        "today": DateRange(start=today_start, end=_end_of_day(as_of), label="Today"),
        "yesterday": DateRange(
            start=_start_of_day(yesterday), end=_end_of_day(yesterday), label="Yesterday"
        ),
        "last_7_days": DateRange(start=as_of - timedelta(days=6), end=as_of, label="Last 7 Days"),
        "last_30_days": DateRange(start=as_of - timedelta(days=29), end=as_of, label="Last 30 Days"),
        "this_week": DateRange(start=week_start, end=as_of, label="This Week"),
        "this_month": DateRange(start=month_start, end=as_of, label="This Month"),
        "last_90_days": DateRange(start=as_of - timedelta(days=89), end=as_of, label="Last 90 Days"),
    }


def period_label(date_range: DateRange) -> str:
    """Display label for comparing a window against the one before it."""
    days = date_range.days
    if days <= 1:
        return "vs previous day"
    return f"vs last {days} days"


def previous_period(date_range: DateRange) -> DateRange:
    """
    Window of identical length ending just before ``date_range`` starts.

    The two windows never share an instant, so a record is counted in at
    most one of them.
    """
    end = date_range.start - timedelta(microseconds=1)
    return DateRange(
        start=end - date_range.length,
        end=end,
        label=period_label(date_range),
    )
