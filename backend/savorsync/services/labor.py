"""
Labor Cost Aggregator

Turns worked shifts into time logs and labor costs, then rolls them up:
- Regular/overtime split per single shift (8 hours regular, remainder overtime)
- Overtime paid at 1.5x the base hourly rate
- Tips attributed to front-of-house staff only
- Labor cost as a percentage of revenue over the same scope

The module functions default to the stock overtime rules declared on
``Settings``. Environment overrides of those settings apply through
``LaborCostCalculator``, which reads ``get_settings()`` when built.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass
from datetime import datetime
import logging

from savorsync.schemas.labor import (
    Shift, ShiftStatus, StaffMember, TimeLog, TimeLogStatus, LaborCost
)
from savorsync.schemas.order import Order
from savorsync.services.scope import safe_ratio, percentage
from savorsync.config import Settings, get_settings

logger = logging.getLogger(__name__)

OVERTIME_THRESHOLD_HOURS = Settings.model_fields["overtime_threshold_hours"].default
OVERTIME_MULTIPLIER = Settings.model_fields["overtime_multiplier"].default


@dataclass
class LaborMetrics:
    """Labor totals for a scope."""
    total_labor_cost: float = 0.0
    total_regular_hours: float = 0.0
    total_overtime_hours: float = 0.0
    total_tips: float = 0.0
    total_revenue: float = 0.0
    labor_cost_percentage: float = 0.0
    average_hourly_rate: float = 0.0
    shift_count: int = 0
    overtime_shift_count: int = 0

    @property
    def total_hours(self) -> float:
        return self.total_regular_hours + self.total_overtime_hours

    def to_dict(self) -> Dict:
        return {
            "total_labor_cost": round(self.total_labor_cost, 2),
            "total_regular_hours": round(self.total_regular_hours, 2),
            "total_overtime_hours": round(self.total_overtime_hours, 2),
            "total_hours": round(self.total_hours, 2),
            "total_tips": round(self.total_tips, 2),
            "total_revenue": round(self.total_revenue, 2),
            "labor_cost_percentage": round(self.labor_cost_percentage, 2),
            "average_hourly_rate": round(self.average_hourly_rate, 2),
            "shift_count": self.shift_count,
            "overtime_shift_count": self.overtime_shift_count,
        }


@dataclass
class DailyLabor:
    date: str  # ISO date
    hours: float
    overtime_hours: float
    cost: float
    shifts: int
    staff_count: int

    def to_dict(self) -> Dict:
        return {
            "date": self.date,
            "hours": round(self.hours, 2),
            "overtime_hours": round(self.overtime_hours, 2),
            "cost": round(self.cost, 2),
            "shifts": self.shifts,
            "staff_count": self.staff_count,
        }


def split_shift_hours(
    hours_worked: float,
    threshold: float = OVERTIME_THRESHOLD_HOURS
) -> Tuple[float, float]:
    """Split one shift's worked hours into (regular, overtime)."""
    hours = max(0.0, hours_worked)
    regular = min(hours, threshold)
    overtime = max(0.0, hours - threshold)
    return regular, overtime


def calculate_shift_pay(
    hours_worked: float,
    hourly_rate: float,
    threshold: float = OVERTIME_THRESHOLD_HOURS,
    multiplier: float = OVERTIME_MULTIPLIER
) -> Tuple[float, float]:
    """Return (regular_pay, overtime_pay) for a single shift."""
    regular, overtime = split_shift_hours(hours_worked, threshold)
    return regular * hourly_rate, overtime * hourly_rate * multiplier


def build_time_log(
    shift: Shift,
    clock_in: Optional[datetime] = None,
    clock_out: Optional[datetime] = None,
    break_minutes: Optional[int] = None,
    threshold: float = OVERTIME_THRESHOLD_HOURS
) -> TimeLog:
    """
    Derive a time log from a shift.

    Clock times default to the shift's scheduled times; a shift that is not
    completed has no default clock-out and yields an open log with zero hours.
    """
    if clock_in is None:
        clock_in = shift.start_time
    if clock_out is None and shift.status == ShiftStatus.COMPLETED:
        clock_out = shift.end_time
    if break_minutes is None:
        break_minutes = shift.break_minutes

    if clock_out is None:
        return TimeLog(
            id=f"log_{shift.id}",
            shift_id=shift.id,
            staff_id=shift.staff_id,
            location_id=shift.location_id,
            clock_in=clock_in,
            break_minutes=break_minutes,
            status=TimeLogStatus.OPEN,
        )

    if clock_out < clock_in:
        raise ValueError(f"Shift {shift.id}: clock-out {clock_out} is before clock-in {clock_in}")

    worked_hours = (clock_out - clock_in).total_seconds() / 3600 - break_minutes / 60
    regular, overtime = split_shift_hours(worked_hours, threshold)

    return TimeLog(
        id=f"log_{shift.id}",
        shift_id=shift.id,
        staff_id=shift.staff_id,
        location_id=shift.location_id,
        clock_in=clock_in,
        clock_out=clock_out,
        break_minutes=break_minutes,
        regular_hours=regular,
        overtime_hours=overtime,
        status=TimeLogStatus.CLOSED,
    )


def build_time_logs(
    shifts: Iterable[Shift],
    threshold: float = OVERTIME_THRESHOLD_HOURS
) -> List[TimeLog]:
    """Time logs for completed shifts, at their scheduled times."""
    return [
        build_time_log(shift, threshold=threshold)
        for shift in shifts
        if shift.status == ShiftStatus.COMPLETED
    ]


def build_labor_cost(
    time_log: TimeLog,
    staff: StaffMember,
    tips: float = 0.0,
    multiplier: float = OVERTIME_MULTIPLIER
) -> LaborCost:
    """Price a time log at the staff member's hourly rate."""
    if time_log.staff_id != staff.id:
        raise ValueError(f"Time log {time_log.id} belongs to {time_log.staff_id}, not {staff.id}")

    regular_pay = time_log.regular_hours * staff.hourly_rate
    overtime_pay = time_log.overtime_hours * staff.hourly_rate * multiplier
    tips = tips if staff.is_front_of_house else 0.0

    return LaborCost(
        id=f"cost_{time_log.id}",
        time_log_id=time_log.id,
        staff_id=staff.id,
        location_id=time_log.location_id,
        work_date=time_log.clock_in,
        hourly_rate=staff.hourly_rate,
        regular_pay=regular_pay,
        overtime_pay=overtime_pay,
        tips=tips,
        total_compensation=regular_pay + overtime_pay + tips,
    )


def tips_for_time_log(time_log: TimeLog, orders: Iterable[Order]) -> float:
    """Tips on orders served by the log's staff member while clocked in."""
    if time_log.clock_out is None:
        return 0.0
    return sum(
        order.tip_amount
        for order in orders
        if order.staff_id == time_log.staff_id
        and time_log.clock_in <= order.created_at <= time_log.clock_out
    )


def build_labor_costs(
    time_logs: Iterable[TimeLog],
    staff: Iterable[StaffMember],
    orders: Sequence[Order] = (),
    multiplier: float = OVERTIME_MULTIPLIER
) -> List[LaborCost]:
    """Labor costs for closed time logs; logs for unknown staff are skipped."""
    staff_map = {member.id: member for member in staff}
    orders_by_staff: Dict[str, List[Order]] = {}
    for order in orders:
        if order.staff_id:
            orders_by_staff.setdefault(order.staff_id, []).append(order)
    costs = []

    for time_log in time_logs:
        if time_log.status != TimeLogStatus.CLOSED:
            continue
        member = staff_map.get(time_log.staff_id)
        if member is None:
            logger.warning("No staff record for time log %s (staff %s)", time_log.id, time_log.staff_id)
            continue
        tips = tips_for_time_log(time_log, orders_by_staff.get(time_log.staff_id, ()))
        costs.append(build_labor_cost(time_log, member, tips=tips, multiplier=multiplier))

    return costs


def calculate_labor_metrics(
    time_logs: Sequence[TimeLog],
    labor_costs: Sequence[LaborCost],
    orders: Iterable[Order] = (),
    multiplier: float = OVERTIME_MULTIPLIER
) -> LaborMetrics:
    """
    Roll up labor for one scope.

    All three collections must already be filtered to the same location and
    date range. The average hourly rate is implied by weighted hours
    (overtime hours count ``multiplier`` times) rather than averaged across
    individual rates.
    """
    metrics = LaborMetrics()

    for cost in labor_costs:
        metrics.total_labor_cost += cost.total_compensation
        metrics.total_tips += cost.tips

    for time_log in time_logs:
        metrics.total_regular_hours += time_log.regular_hours
        metrics.total_overtime_hours += time_log.overtime_hours
        metrics.shift_count += 1
        if time_log.overtime_hours > 0:
            metrics.overtime_shift_count += 1

    metrics.total_revenue = sum(order.total_amount for order in orders)
    metrics.labor_cost_percentage = percentage(metrics.total_labor_cost, metrics.total_revenue)

    weighted_hours = metrics.total_regular_hours + metrics.total_overtime_hours * multiplier
    metrics.average_hourly_rate = safe_ratio(
        metrics.total_labor_cost - metrics.total_tips, weighted_hours
    )

    logger.debug(
        "Labor metrics: %d shifts, %.2f cost, %.2f%% of revenue",
        metrics.shift_count, metrics.total_labor_cost, metrics.labor_cost_percentage
    )
    return metrics


def daily_labor(
    time_logs: Iterable[TimeLog],
    labor_costs: Iterable[LaborCost]
) -> List[DailyLabor]:
    """Per-day hours and cost, ascending by date."""
    days: Dict[str, DailyLabor] = {}
    staff_by_day: Dict[str, set] = {}

    def bucket(key: str) -> DailyLabor:
        if key not in days:
            days[key] = DailyLabor(date=key, hours=0.0, overtime_hours=0.0, cost=0.0, shifts=0, staff_count=0)
            staff_by_day[key] = set()
        return days[key]

    for time_log in time_logs:
        key = time_log.clock_in.date().isoformat()
        day = bucket(key)
        day.hours += time_log.total_hours
        day.overtime_hours += time_log.overtime_hours
        day.shifts += 1
        staff_by_day[key].add(time_log.staff_id)

    for cost in labor_costs:
        bucket(cost.work_date.date().isoformat()).cost += cost.total_compensation

    for key, day in days.items():
        day.staff_count = len(staff_by_day[key])

    return [days[key] for key in sorted(days)]


class LaborCostCalculator:
    """Labor operations bound to the configured overtime rules."""

    def __init__(
        self,
        overtime_threshold: Optional[float] = None,
        overtime_multiplier: Optional[float] = None
    ):
        settings = get_settings()
        self.overtime_threshold = (
            overtime_threshold if overtime_threshold is not None else settings.overtime_threshold_hours
        )
        self.overtime_multiplier = (
            overtime_multiplier if overtime_multiplier is not None else settings.overtime_multiplier
        )

    def split_hours(self, hours_worked: float) -> Tuple[float, float]:
        return split_shift_hours(hours_worked, self.overtime_threshold)

    def shift_pay(self, hours_worked: float, hourly_rate: float) -> float:
        """Total pay for a single shift."""
        regular_pay, overtime_pay = calculate_shift_pay(
            hours_worked, hourly_rate, self.overtime_threshold, self.overtime_multiplier
        )
        return regular_pay + overtime_pay

    def time_logs(self, shifts: Iterable[Shift]) -> List[TimeLog]:
        return build_time_logs(shifts, self.overtime_threshold)

    def labor_costs(
        self,
        time_logs: Iterable[TimeLog],
        staff: Iterable[StaffMember],
        orders: Sequence[Order] = ()
    ) -> List[LaborCost]:
        return build_labor_costs(time_logs, staff, orders, self.overtime_multiplier)

    def metrics(
        self,
        time_logs: Sequence[TimeLog],
        labor_costs: Sequence[LaborCost],
        orders: Iterable[Order] = ()
    ) -> LaborMetrics:
        return calculate_labor_metrics(time_logs, labor_costs, orders, self.overtime_multiplier)
