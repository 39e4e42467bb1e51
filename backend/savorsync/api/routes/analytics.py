"""
Analytics API Routes

Read-only dashboard endpoints:
- Sales summary, growth, daily/hourly trends and channel mix
- Menu item, staff and location leaderboards
- Labor cost summary
- Ingredient wastage report
- Task performance
- Profit & loss rollup
"""

from typing import Any, Dict, List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from savorsync.config import get_settings
from savorsync.schemas.common import Scope
from savorsync.schemas.order import OrderChannel
from savorsync.providers.base import DataProvider
from savorsync.api.deps import align_to_provider, get_data_provider, get_scope
from savorsync.services.scope import (
    date_range_presets, previous_period, scope_orders, scope_time_logs,
    scope_labor_costs, scope_tasks, scope_stock_movements, filter_orders_by_channel
)
from savorsync.services.sales_metrics import (
    calculate_sales_metrics, compare_periods, daily_sales, hourly_sales, channel_distribution
)
from savorsync.services.rankings import (
    RankingMode, StaffRankingMode, top_menu_items, summarize_staff, top_staff, location_performance
)
from savorsync.services.labor import LaborCostCalculator, daily_labor
from savorsync.services.wastage import build_wastage_report
from savorsync.services.tasks import calculate_task_metrics, staff_task_performance
from savorsync.services.profit import build_daily_profit, aggregate_profit_by_period, summarize_profit

router = APIRouter()


def describe_scope(scope: Scope) -> Dict[str, Any]:
    date_range = scope.date_range
    return {
        "location_id": scope.location_id,
        "start": date_range.start.isoformat() if date_range else None,
        "end": date_range.end.isoformat() if date_range else None,
        "label": date_range.label if date_range else None,
    }


def _scoped_staff(provider: DataProvider, scope: Scope):
    return [
        member for member in provider.staff()
        if scope.is_all_locations or member.location_id == scope.location_id
    ]


@router.get("/ranges")
async def get_date_ranges(
    as_of: Optional[datetime] = Query(None),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """List the named date range presets for the reference time."""
    presets = date_range_presets(align_to_provider(as_of, provider) or provider.as_of)
    return {
        key: {"start": rng.start.isoformat(), "end": rng.end.isoformat(), "label": rng.label}
        for key, rng in presets.items()
    }


# ============================================================================
# SALES
# ============================================================================

@router.get("/sales/summary")
async def get_sales_summary(
    channel: Optional[List[OrderChannel]] = Query(None),
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Totals, average order value and gross profit for the scope."""
    orders = scope_orders(provider.orders(), scope)
    if channel:
        orders = filter_orders_by_channel(orders, channel)
    metrics = calculate_sales_metrics(orders)
    return {"scope": describe_scope(scope), "summary": metrics.to_dict()}


@router.get("/sales/growth")
async def get_sales_growth(
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Compare the scope's range with the preceding range of equal length."""
    growth = compare_periods(provider.orders(), scope.date_range, scope.location_id)
    return {"scope": describe_scope(scope), "growth": growth.to_dict()}


@router.get("/sales/top-items")
async def get_top_items(
    mode: RankingMode = Query(RankingMode.REVENUE),
    limit: Optional[int] = Query(None, description="Number of items (defaults to settings)"),
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Menu item leaderboard by revenue, profit or quantity."""
    if limit is None:
        limit = get_settings().default_top_items
    try:
        items = top_menu_items(scope_orders(provider.orders(), scope), mode, limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "scope": describe_scope(scope),
        "mode": mode.value,
        "items": [item.to_dict() for item in items],
    }


@router.get("/sales/daily")
async def get_daily_sales(
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    days = daily_sales(scope_orders(provider.orders(), scope))
    return {"scope": describe_scope(scope), "days": [day.to_dict() for day in days]}


@router.get("/sales/hourly")
async def get_hourly_sales(
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    hours = hourly_sales(scope_orders(provider.orders(), scope))
    return {"scope": describe_scope(scope), "hours": [hour.to_dict() for hour in hours]}


@router.get("/sales/channels")
async def get_channel_distribution(
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    channels = channel_distribution(scope_orders(provider.orders(), scope))
    return {"scope": describe_scope(scope), "channels": [share.to_dict() for share in channels]}


# ============================================================================
# LOCATIONS & STAFF
# ============================================================================

@router.get("/locations/performance")
async def get_location_performance(
    limit: Optional[int] = Query(None),
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Locations ranked by sales, with growth over the preceding period."""
    orders = provider.orders()
    previous_scope = Scope(location_id=scope.location_id, date_range=previous_period(scope.date_range))
    try:
        performances = location_performance(
            scope_orders(orders, scope), scope_orders(orders, previous_scope), limit
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "scope": describe_scope(scope),
        "locations": [performance.to_dict() for performance in performances],
    }


@router.get("/staff/top")
async def get_top_staff(
    mode: StaffRankingMode = Query(StaffRankingMode.SALES),
    limit: Optional[int] = Query(None, description="Number of staff (defaults to settings)"),
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Staff leaderboard by sales, hours worked or compensation."""
    if limit is None:
        limit = get_settings().default_top_staff
    summaries = summarize_staff(
        _scoped_staff(provider, scope),
        scope_orders(provider.orders(), scope),
        scope_time_logs(provider.time_logs(), scope),
        scope_labor_costs(provider.labor_costs(), scope),
    )
    try:
        ranked = top_staff(summaries, mode, limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "scope": describe_scope(scope),
        "mode": mode.value,
        "staff": [summary.to_dict() for summary in ranked],
    }


# ============================================================================
# LABOR, WASTAGE, TASKS
# ============================================================================

@router.get("/labor/summary")
async def get_labor_summary(
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Hours, overtime, labor cost and labor cost percentage of revenue."""
    time_logs = scope_time_logs(provider.time_logs(), scope)
    labor_costs = scope_labor_costs(provider.labor_costs(), scope)
    orders = scope_orders(provider.orders(), scope)

    metrics = LaborCostCalculator().metrics(time_logs, labor_costs, orders)
    return {
        "scope": describe_scope(scope),
        "summary": metrics.to_dict(),
        "daily": [day.to_dict() for day in daily_labor(time_logs, labor_costs)],
    }


@router.get("/wastage")
async def get_wastage_report(
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Expected vs actual ingredient usage, ranked by estimated wastage cost."""
    report = build_wastage_report(
        provider.ingredients(),
        scope_orders(provider.orders(), scope),
        provider.recipes(),
        scope_stock_movements(provider.stock_movements(), scope),
    )
    return {"scope": describe_scope(scope), "report": report.to_dict()}


@router.get("/tasks/summary")
async def get_task_summary(
    limit: Optional[int] = Query(None),
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Task completion metrics and per-staff scorecards."""
    tasks = scope_tasks(provider.tasks(), scope)
    try:
        scorecards = staff_task_performance(tasks, _scoped_staff(provider, scope), limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "scope": describe_scope(scope),
        "summary": calculate_task_metrics(tasks).to_dict(),
        "staff": [scorecard.to_dict() for scorecard in scorecards],
    }


# ============================================================================
# PROFIT & LOSS
# ============================================================================

@router.get("/profit")
async def get_profit(
    period: str = Query("day", description="Aggregation period: day, week or month"),
    scope: Scope = Depends(get_scope),
    provider: DataProvider = Depends(get_data_provider)
) -> Dict[str, Any]:
    """Sales minus labour, ingredient and rental cost per period."""
    settings = get_settings()
    entries = build_daily_profit(
        provider.orders(),
        provider.labor_costs(),
        provider.locations(),
        scope,
        settings.rent_days_per_month,
    )
    try:
        periods = aggregate_profit_by_period(entries, period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "scope": describe_scope(scope),
        "period": period,
        "summary": summarize_profit(entries).to_dict(),
        "entries": [entry.to_dict() for entry in periods],
    }
