"""
Profit & Loss Rollup

Daily profit entries (sales minus labour, ingredient and rental cost) and
their aggregation into weekly or monthly periods.
"""

from typing import Dict, Iterable, List, Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta

from savorsync.schemas.common import Scope
from savorsync.schemas.location import Location
from savorsync.schemas.order import Order
from savorsync.schemas.labor import LaborCost
from savorsync.services.scope import safe_ratio, percentage, scope_orders, scope_labor_costs
from savorsync.services.sales_metrics import line_item_cost

PERIODS = ("day", "week", "month")


@dataclass
class ProfitEntry:
    date: str  # ISO date, week start (Sunday) or YYYY-MM
    location: str
    sales: float = 0.0
    labour_cost: float = 0.0
    ingredients_cost: float = 0.0
    rental_cost: float = 0.0

    @property
    def profit(self) -> float:
        return self.sales - self.labour_cost - self.ingredients_cost - self.rental_cost

    def to_dict(self) -> Dict:
        return {
            "date": self.date,
            "location": self.location,
            "sales": round(self.sales, 2),
            "labour_cost": round(self.labour_cost, 2),
            "ingredients_cost": round(self.ingredients_cost, 2),
            "rental_cost": round(self.rental_cost, 2),
            "profit": round(self.profit, 2),
        }


@dataclass
class ProfitSummary:
    sales: float
    labour_cost: float
    ingredients_cost: float
    rental_cost: float
    profit: float

    @property
    def profit_margin(self) -> float:
        return percentage(self.profit, self.sales)

    def to_dict(self) -> Dict:
        return {
            "sales": round(self.sales, 2),
            "labour_cost": round(self.labour_cost, 2),
            "ingredients_cost": round(self.ingredients_cost, 2),
            "rental_cost": round(self.rental_cost, 2),
            "profit": round(self.profit, 2),
            "profit_margin": round(self.profit_margin, 2),
            "labour_percentage": round(percentage(self.labour_cost, self.sales), 2),
            "ingredients_percentage": round(percentage(self.ingredients_cost, self.sales), 2),
            "rental_percentage": round(percentage(self.rental_cost, self.sales), 2),
        }


def daily_rental_cost(monthly_rent: float, days_per_month: int = 30) -> float:
    return safe_ratio(monthly_rent, days_per_month)


def build_daily_profit(
    orders: Iterable[Order],
    labor_costs: Iterable[LaborCost],
    locations: Iterable[Location],
    scope: Scope,
    days_per_month: int = 30
) -> List[ProfitEntry]:
    """
    One profit entry per day in scope.

    With a date range every calendar day in it gets an entry (rent accrues on
    days without sales); otherwise only days with orders or labor appear.
    Rent is the daily share of every active location in scope.
    """
    orders = scope_orders(orders, scope)
    labor_costs = scope_labor_costs(labor_costs, scope)
    daily_rent = sum(
        daily_rental_cost(location.monthly_rent, days_per_month)
        for location in locations
        if location.is_active and (scope.is_all_locations or location.id == scope.location_id)
    )

    entries: Dict[date, ProfitEntry] = {}

    def entry_for(day: date) -> ProfitEntry:
        if day not in entries:
            entries[day] = ProfitEntry(date=day.isoformat(), location=scope.location_id, rental_cost=daily_rent)
        return entries[day]

    if scope.date_range is not None:
        day = scope.date_range.start.date()
        while day <= scope.date_range.end.date():
            entry_for(day)
            day += timedelta(days=1)

    for order in orders:
        entry = entry_for(order.created_at.date())
        entry.sales += order.total_amount
        entry.ingredients_cost += sum(line_item_cost(item) for item in order.items)

    for cost in labor_costs:
        entry_for(cost.work_date.date()).labour_cost += cost.total_compensation

    return [entries[day] for day in sorted(entries)]


def _period_key(entry_date: str, period: str) -> str:
    day = date.fromisoformat(entry_date)
    if period == "week":
        # Weeks start on Sunday
        return (day - timedelta(days=(day.weekday() + 1) % 7)).isoformat()
    return f"{day.year}-{day.month:02d}"


def aggregate_profit_by_period(entries: Sequence[ProfitEntry], period: str) -> List[ProfitEntry]:
    """Roll daily entries up to "day", "week" or "month" periods, ascending."""
    if period not in PERIODS:
        raise ValueError(f"Unknown period {period!r}; expected one of {', '.join(PERIODS)}")
    if period == "day":
        return sorted((replace(entry) for entry in entries), key=lambda entry: entry.date)

    aggregated: Dict[str, ProfitEntry] = {}
    for entry in entries:
        key = _period_key(entry.date, period)
        if key not in aggregated:
            aggregated[key] = ProfitEntry(date=key, location=entry.location)
        bucket = aggregated[key]
        bucket.sales += entry.sales
        bucket.labour_cost += entry.labour_cost
        bucket.ingredients_cost += entry.ingredients_cost
        bucket.rental_cost += entry.rental_cost

    return [aggregated[key] for key in sorted(aggregated)]


def summarize_profit(entries: Iterable[ProfitEntry]) -> ProfitSummary:
    sales = labour = ingredients = rental = 0.0
    for entry in entries:
        sales += entry.sales
        labour += entry.labour_cost
        ingredients += entry.ingredients_cost
        rental += entry.rental_cost
    return ProfitSummary(
        sales=sales,
        labour_cost=labour,
        ingredients_cost=ingredients,
        rental_cost=rental,
        profit=sales - labour - ingredients - rental,
    )
