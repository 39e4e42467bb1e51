"""
Sales Metrics Calculator

Reduces scoped order collections to sales totals, profit figures and
period-over-period growth:
- Period totals (sales, orders, average order value, profit margin)
- Growth against a prior period of equal length
- Daily, hourly and per-channel breakdowns

Line-item profit follows a single model everywhere: unit price minus tracked
unit cost, falling back to the menu item's fixed per-unit profit when no cost
is tracked.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from dataclasses import dataclass
import logging

from savorsync.schemas.common import DateRange, Scope
from savorsync.schemas.order import Order, OrderItem, OrderChannel
from savorsync.services.scope import safe_ratio, percentage, scope_orders, previous_period

logger = logging.getLogger(__name__)


@dataclass
class SalesMetrics:
    """Summary statistics for a set of orders."""
    total_sales: float = 0.0
    total_orders: int = 0
    average_order_value: float = 0.0
    total_items: int = 0
    total_tax: float = 0.0
    total_discounts: float = 0.0
    total_tips: float = 0.0
    total_delivery_fees: float = 0.0
    gross_profit: float = 0.0
    profit_margin: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "total_sales": round(self.total_sales, 2),
            "total_orders": self.total_orders,
            "average_order_value": round(self.average_order_value, 2),
            "total_items": self.total_items,
            "total_tax": round(self.total_tax, 2),
            "total_discounts": round(self.total_discounts, 2),
            "total_tips": round(self.total_tips, 2),
            "total_delivery_fees": round(self.total_delivery_fees, 2),
            "gross_profit": round(self.gross_profit, 2),
            "profit_margin": round(self.profit_margin, 2),
        }


@dataclass
class GrowthMetrics:
    """Signed percentage change between two periods."""
    sales_growth: float
    order_growth: float
    aov_growth: float
    period_label: str
    current: Optional[SalesMetrics] = None
    previous: Optional[SalesMetrics] = None

    def to_dict(self) -> Dict:
        data = {
            "sales_growth": round(self.sales_growth, 2),
            "order_growth": round(self.order_growth, 2),
            "aov_growth": round(self.aov_growth, 2),
            "period_label": self.period_label,
        }
        if self.current is not None:
            data["current"] = self.current.to_dict()
        if self.previous is not None:
            data["previous"] = self.previous.to_dict()
        return data


@dataclass
class DailySales:
    date: str  # ISO date
    sales: float
    orders: int
    average_order_value: float
    profit: float
    profit_margin: float
    day_of_week: str
    is_weekend: bool

    def to_dict(self) -> Dict:
        return {
            "date": self.date,
            "sales": round(self.sales, 2),
            "orders": self.orders,
            "average_order_value": round(self.average_order_value, 2),
            "profit": round(self.profit, 2),
            "profit_margin": round(self.profit_margin, 2),
            "day_of_week": self.day_of_week,
            "is_weekend": self.is_weekend,
        }


@dataclass
class HourlySales:
    hour: int
    hour_label: str
    sales: float
    orders: int
    average_order_value: float
    profit: float
    profit_margin: float

    def to_dict(self) -> Dict:
        return {
            "hour": self.hour,
            "hour_label": self.hour_label,
            "sales": round(self.sales, 2),
            "orders": self.orders,
            "average_order_value": round(self.average_order_value, 2),
            "profit": round(self.profit, 2),
            "profit_margin": round(self.profit_margin, 2),
        }


@dataclass
class ChannelShare:
    channel: OrderChannel
    sales: float
    orders: int
    percentage: float
    average_order_value: float

    def to_dict(self) -> Dict:
        return {
            "channel": self.channel.value,
            "sales": round(self.sales, 2),
            "orders": self.orders,
            "percentage": round(self.percentage, 2),
            "average_order_value": round(self.average_order_value, 2),
        }


def line_item_profit(item: OrderItem) -> float:
    """Profit contributed by one order line."""
    menu_item = item.menu_item
    if menu_item.cost is not None:
        return (item.unit_price - menu_item.cost) * item.quantity
    if menu_item.profit is not None:
        return menu_item.profit * item.quantity
    return 0.0


def line_item_cost(item: OrderItem) -> float:
    """Cost of goods for one order line (unit price minus profit when cost is untracked)."""
    menu_item = item.menu_item
    if menu_item.cost is not None:
        return menu_item.cost * item.quantity
    return item.unit_price * item.quantity - line_item_profit(item)


def order_profit(order: Order) -> float:
    return sum(line_item_profit(item) for item in order.items)


def calculate_sales_metrics(orders: Iterable[Order]) -> SalesMetrics:
    """
    Compute period totals for an already-scoped set of orders.

    An empty collection yields an all-zero SalesMetrics.
    """
    metrics = SalesMetrics()
    for order in orders:
        metrics.total_sales += order.total_amount
        metrics.total_orders += 1
        metrics.total_items += order.item_count
        metrics.total_tax += order.tax_amount
        metrics.total_discounts += order.discount_amount
        metrics.total_tips += order.tip_amount
        metrics.total_delivery_fees += order.delivery_fee
        metrics.gross_profit += order_profit(order)

    metrics.average_order_value = safe_ratio(metrics.total_sales, metrics.total_orders)
    metrics.profit_margin = percentage(metrics.gross_profit, metrics.total_sales)

    logger.debug(
        "Sales metrics: %d orders, %.2f sales", metrics.total_orders, metrics.total_sales
    )
    return metrics


def growth_rate(current: float, prior: float) -> float:
    """Signed percentage change; exactly 0 when the prior value is 0."""
    return percentage(current - prior, prior)


def calculate_growth_metrics(
    current_orders: Iterable[Order],
    previous_orders: Iterable[Order],
    period_label: str
) -> GrowthMetrics:
    """Compare two scoped order sets of equal period length."""
    current = calculate_sales_metrics(current_orders)
    previous = calculate_sales_metrics(previous_orders)

    return GrowthMetrics(
        sales_growth=growth_rate(current.total_sales, previous.total_sales),
        order_growth=growth_rate(current.total_orders, previous.total_orders),
        aov_growth=growth_rate(current.average_order_value, previous.average_order_value),
        period_label=period_label,
        current=current,
        previous=previous,
    )


def compare_periods(
    orders: Sequence[Order],
    date_range: DateRange,
    location_id: Optional[str] = None
) -> GrowthMetrics:
    """
    Growth of ``date_range`` over the window of equal length preceding it.

    Args:
        orders: Unscoped orders covering both windows
        date_range: Current reporting window
        location_id: Optional location filter (None or "all" for every location)
    """
    prior_range = previous_period(date_range)
    location = location_id or Scope().location_id

    current_orders = scope_orders(orders, Scope(location_id=location, date_range=date_range))
    previous_orders = scope_orders(orders, Scope(location_id=location, date_range=prior_range))

    return calculate_growth_metrics(current_orders, previous_orders, prior_range.label)


def daily_sales(orders: Iterable[Order]) -> List[DailySales]:
    """Per-day totals, ascending by date."""
    buckets: Dict[str, DailySales] = {}

    for order in orders:
        day = order.created_at.date()
        key = day.isoformat()
        if key not in buckets:
            buckets[key] = DailySales(
                date=key,
                sales=0.0,
                orders=0,
                average_order_value=0.0,
                profit=0.0,
                profit_margin=0.0,
                day_of_week=day.strftime("%a"),
                is_weekend=day.weekday() >= 5,
            )
        bucket = buckets[key]
        bucket.sales += order.total_amount
        bucket.orders += 1
        bucket.profit += order_profit(order)

    for bucket in buckets.values():
        bucket.average_order_value = safe_ratio(bucket.sales, bucket.orders)
        bucket.profit_margin = percentage(bucket.profit, bucket.sales)

    return [buckets[key] for key in sorted(buckets)]


def format_hour(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def hourly_sales(orders: Iterable[Order]) -> List[HourlySales]:
    """Per hour-of-day totals; hours without sales are omitted."""
    buckets = {
        hour: HourlySales(
            hour=hour,
            hour_label=format_hour(hour),
            sales=0.0,
            orders=0,
            average_order_value=0.0,
            profit=0.0,
            profit_margin=0.0,
        )
        for hour in range(24)
    }

    for order in orders:
        bucket = buckets[order.created_at.hour]
        bucket.sales += order.total_amount
        bucket.orders += 1
        bucket.profit += order_profit(order)

    for bucket in buckets.values():
        bucket.average_order_value = safe_ratio(bucket.sales, bucket.orders)
        bucket.profit_margin = percentage(bucket.profit, bucket.sales)

    return [bucket for bucket in buckets.values() if bucket.orders > 0]


def channel_distribution(orders: Sequence[Order]) -> List[ChannelShare]:
    """Share of sales per channel; channels without orders are omitted."""
    shares = {
        channel: ChannelShare(
            channel=channel, sales=0.0, orders=0, percentage=0.0, average_order_value=0.0
        )
        for channel in OrderChannel
    }
    total_sales = 0.0

    for order in orders:
        share = shares[order.channel]
        share.sales += order.total_amount
        share.orders += 1
        total_sales += order.total_amount

    for share in shares.values():
        share.percentage = percentage(share.sales, total_sales)
        share.average_order_value = safe_ratio(share.sales, share.orders)

    return [share for share in shares.values() if share.orders > 0]
