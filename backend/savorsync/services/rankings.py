"""
Top-Performer / Ranking Engine

Builds leaderboards for menu items, staff and locations. Every ranking is a
stable descending sort: ties keep their input order, ranks are reassigned
1..N on each call, and the input records are never modified.
"""

from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar, Union
from dataclasses import dataclass, replace
from enum import Enum
from collections import Counter
import logging

from savorsync.schemas.order import Order, OrderChannel
from savorsync.schemas.labor import StaffMember, TimeLog, LaborCost
from savorsync.services.scope import safe_ratio, percentage
from savorsync.services.sales_metrics import line_item_profit, order_profit, growth_rate

logger = logging.getLogger(__name__)

R = TypeVar("R")


class RankingMode(str, Enum):
    """Sort keys for menu item leaderboards."""
    REVENUE = "revenue"
    PROFIT = "profit"
    QUANTITY = "quantity"


class StaffRankingMode(str, Enum):
    SALES = "sales"
    HOURS = "hours"
    COMPENSATION = "compensation"


@dataclass
class MenuItemPerformance:
    menu_item_id: str
    name: str
    category: str
    total_sales: float = 0.0
    total_quantity: int = 0
    order_count: int = 0
    total_profit: float = 0.0
    rank: int = 0

    @property
    def average_price(self) -> float:
        return safe_ratio(self.total_sales, self.total_quantity)

    @property
    def profit_margin(self) -> float:
        return percentage(self.total_profit, self.total_sales)

    def to_dict(self) -> Dict:
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "category": self.category,
            "total_sales": round(self.total_sales, 2),
            "total_quantity": self.total_quantity,
            "order_count": self.order_count,
            "average_price": round(self.average_price, 2),
            "total_profit": round(self.total_profit, 2),
            "profit_margin": round(self.profit_margin, 2),
            "rank": self.rank,
        }


@dataclass
class StaffPerformance:
    staff_id: str
    staff_name: str
    role: str
    total_sales: float = 0.0
    order_count: int = 0
    hours_worked: float = 0.0
    overtime_hours: float = 0.0
    total_compensation: float = 0.0
    rank: int = 0

    @property
    def sales_per_hour(self) -> float:
        return safe_ratio(self.total_sales, self.hours_worked)

    def to_dict(self) -> Dict:
        return {
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "role": self.role,
            "total_sales": round(self.total_sales, 2),
            "order_count": self.order_count,
            "hours_worked": round(self.hours_worked, 2),
            "overtime_hours": round(self.overtime_hours, 2),
            "total_compensation": round(self.total_compensation, 2),
            "sales_per_hour": round(self.sales_per_hour, 2),
            "rank": self.rank,
        }


@dataclass
class LocationPerformance:
    location_id: str
    location_name: str
    sales: float = 0.0
    orders: int = 0
    profit: float = 0.0
    top_channel: Optional[OrderChannel] = None
    growth: float = 0.0
    rank: int = 0

    @property
    def average_order_value(self) -> float:
        return safe_ratio(self.sales, self.orders)

    @property
    def profit_margin(self) -> float:
        return percentage(self.profit, self.sales)

    def to_dict(self) -> Dict:
        return {
            "location_id": self.location_id,
            "location_name": self.location_name,
            "sales": round(self.sales, 2),
            "orders": self.orders,
            "average_order_value": round(self.average_order_value, 2),
            "profit": round(self.profit, 2),
            "profit_margin": round(self.profit_margin, 2),
            "top_channel": self.top_channel.value if self.top_channel else None,
            "growth": round(self.growth, 2),
            "rank": self.rank,
        }


def rank_records(
    records: Iterable[R],
    key: Union[str, Callable[[R], float]],
    limit: Optional[int] = None
) -> List[R]:
    """
    Stable descending ranking.

    Args:
        records: Dataclass records with a ``rank`` field
        key: Attribute name or callable giving the numeric sort key
        limit: Keep only the top ``limit`` records (None keeps all)

    Returns:
        New records with ``rank`` set to their 1-based position
    """
    if limit is not None and limit < 0:
        raise ValueError("limit must not be negative")

    key_fn = (lambda record: getattr(record, key)) if isinstance(key, str) else key

    # sorted() keeps equal keys in input order, also with reverse=True
    ordered = sorted(records, key=key_fn, reverse=True)
    if limit is not None:
        ordered = ordered[:limit]

    return [replace(record, rank=position) for position, record in enumerate(ordered, start=1)]


def summarize_menu_items(orders: Iterable[Order]) -> List[MenuItemPerformance]:
    """Per menu item totals, in order of first appearance."""
    items: Dict[str, MenuItemPerformance] = {}

    for order in orders:
        for line in order.items:
            key = line.menu_item_id
            if key not in items:
                items[key] = MenuItemPerformance(
                    menu_item_id=key,
                    name=line.menu_item.name,
                    category=line.menu_item.category,
                )
            performance = items[key]
            performance.total_sales += line.subtotal
            performance.total_quantity += line.quantity
            performance.order_count += 1
            performance.total_profit += line_item_profit(line)

    return list(items.values())


_MENU_ITEM_KEYS = {
    RankingMode.REVENUE: "total_sales",
    RankingMode.PROFIT: "total_profit",
    RankingMode.QUANTITY: "total_quantity",
}


def top_menu_items(
    orders: Iterable[Order],
    mode: RankingMode = RankingMode.REVENUE,
    limit: Optional[int] = 5
) -> List[MenuItemPerformance]:
    """Menu item leaderboard by revenue, profit or quantity sold."""
    mode = RankingMode(mode)
    return rank_records(summarize_menu_items(orders), _MENU_ITEM_KEYS[mode], limit)


def summarize_staff(
    staff: Iterable[StaffMember],
    orders: Iterable[Order] = (),
    time_logs: Iterable[TimeLog] = (),
    labor_costs: Iterable[LaborCost] = ()
) -> List[StaffPerformance]:
    """
    Per staff member sales, hours and pay, in staff input order.

    Records referencing staff ids missing from ``staff`` are ignored.
    """
    summaries: Dict[str, StaffPerformance] = {
        member.id: StaffPerformance(
            staff_id=member.id, staff_name=member.full_name, role=member.role.value
        )
        for member in staff
    }

    for order in orders:
        summary = summaries.get(order.staff_id) if order.staff_id else None
        if summary is not None:
            summary.total_sales += order.total_amount
            summary.order_count += 1

    for time_log in time_logs:
        summary = summaries.get(time_log.staff_id)
        if summary is not None:
            summary.hours_worked += time_log.total_hours
            summary.overtime_hours += time_log.overtime_hours

    for cost in labor_costs:
        summary = summaries.get(cost.staff_id)
        if summary is not None:
            summary.total_compensation += cost.total_compensation

    return list(summaries.values())


_STAFF_KEYS = {
    StaffRankingMode.SALES: "total_sales",
    StaffRankingMode.HOURS: "hours_worked",
    StaffRankingMode.COMPENSATION: "total_compensation",
}


def top_staff(
    summaries: Iterable[StaffPerformance],
    mode: StaffRankingMode = StaffRankingMode.SALES,
    limit: Optional[int] = 5
) -> List[StaffPerformance]:
    mode = StaffRankingMode(mode)
    return rank_records(summaries, _STAFF_KEYS[mode], limit)


def _top_channel(channels: Sequence[OrderChannel]) -> Optional[OrderChannel]:
    """Most frequent channel; ties go to the channel seen first."""
    if not channels:
        return None
    counts = Counter(channels)
    # Counter preserves first-seen order and max() returns the first maximum
    return max(counts, key=counts.get)


def location_performance(
    orders: Iterable[Order],
    previous_orders: Optional[Iterable[Order]] = None,
    limit: Optional[int] = None
) -> List[LocationPerformance]:
    """
    Per-location rollup ranked by sales.

    Args:
        orders: Current period orders (any number of locations)
        previous_orders: Prior period orders used for per-location sales growth
        limit: Keep only the top ``limit`` locations
    """
    locations: Dict[str, LocationPerformance] = {}
    channels: Dict[str, List[OrderChannel]] = {}

    for order in orders:
        if order.location_id not in locations:
            locations[order.location_id] = LocationPerformance(
                location_id=order.location_id, location_name=order.location_name
            )
            channels[order.location_id] = []
        performance = locations[order.location_id]
        performance.sales += order.total_amount
        performance.orders += 1
        performance.profit += order_profit(order)
        channels[order.location_id].append(order.channel)

    prior_sales: Dict[str, float] = {}
    for order in previous_orders or ():
        prior_sales[order.location_id] = prior_sales.get(order.location_id, 0.0) + order.total_amount

    for location_id, performance in locations.items():
        performance.top_channel = _top_channel(channels[location_id])
        performance.growth = growth_rate(performance.sales, prior_sales.get(location_id, 0.0))

    return rank_locations(locations.values(), limit)


def rank_locations(
    performances: Iterable[LocationPerformance],
    limit: Optional[int] = None
) -> List[LocationPerformance]:
    return rank_records(performances, "sales", limit)
