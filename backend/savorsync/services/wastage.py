"""
Wastage / Variance Reporter

Compares the ingredient usage implied by sold quantities (recipes) with the
usage recorded by outgoing stock movements, and prices the excess.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from dataclasses import dataclass, field
import logging

from savorsync.schemas.order import Order
from savorsync.schemas.inventory import (
    Ingredient, RecipeComponent, StockMovement, StockDirection, StockChangeReason
)
from savorsync.services.scope import percentage
from savorsync.services.rankings import rank_records

logger = logging.getLogger(__name__)


@dataclass
class IngredientVariance:
    ingredient_id: str
    ingredient_name: str
    unit: str
    expected_usage: float
    actual_usage: float
    variance: float
    variance_percentage: float
    estimated_wastage_cost: float
    primary_reasons: List[StockChangeReason] = field(default_factory=list)
    rank: int = 0

    def to_dict(self) -> Dict:
        return {
            "ingredient_id": self.ingredient_id,
            "ingredient_name": self.ingredient_name,
            "unit": self.unit,
            "expected_usage": round(self.expected_usage, 2),
            "actual_usage": round(self.actual_usage, 2),
            "variance": round(self.variance, 2),
            "variance_percentage": round(self.variance_percentage, 2),
            "estimated_wastage_cost": round(self.estimated_wastage_cost, 2),
            "primary_reasons": [reason.value for reason in self.primary_reasons],
            "rank": self.rank,
        }


@dataclass
class ReasonBreakdown:
    reason: StockChangeReason
    quantity: float
    cost: float
    percentage: float

    def to_dict(self) -> Dict:
        return {
            "reason": self.reason.value,
            "quantity": round(self.quantity, 2),
            "cost": round(self.cost, 2),
            "percentage": round(self.percentage, 2),
        }


@dataclass
class WastageReport:
    lines: List[IngredientVariance] = field(default_factory=list)
    total_wastage_cost: float = 0.0
    by_reason: List[ReasonBreakdown] = field(default_factory=list)

    @property
    def top_reason(self) -> Optional[StockChangeReason]:
        if not self.by_reason:
            return None
        return self.by_reason[0].reason

    def to_dict(self) -> Dict:
        return {
            "total_wastage_cost": round(self.total_wastage_cost, 2),
            "top_reason": self.top_reason.value if self.top_reason else None,
            "by_reason": [reason.to_dict() for reason in self.by_reason],
            "ingredients": [line.to_dict() for line in self.lines],
        }


def expected_usage(
    orders: Iterable[Order],
    recipes: Iterable[RecipeComponent]
) -> Dict[str, float]:
    """Ingredient quantities implied by the menu items sold."""
    components_by_item: Dict[str, List[RecipeComponent]] = {}
    for component in recipes:
        components_by_item.setdefault(component.menu_item_id, []).append(component)

    usage: Dict[str, float] = {}
    for order in orders:
        for line in order.items:
            for component in components_by_item.get(line.menu_item_id, ()):
                usage[component.ingredient_id] = (
                    usage.get(component.ingredient_id, 0.0) + component.quantity * line.quantity
                )
    return usage


def actual_usage(movements: Iterable[StockMovement]) -> Dict[str, float]:
    """Ingredient quantities recorded as leaving stock."""
    usage: Dict[str, float] = {}
    for movement in movements:
        if movement.direction == StockDirection.OUT:
            usage[movement.ingredient_id] = usage.get(movement.ingredient_id, 0.0) + movement.quantity
    return usage


def variance_reasons(movements: Iterable[StockMovement]) -> Dict[str, List[StockChangeReason]]:
    """
    Distinct non-sale reasons on outgoing movements, per ingredient.

    Sales are the expected consumption path, so only the other reasons can
    explain a variance. Reasons keep first-seen order.
    """
    reasons: Dict[str, List[StockChangeReason]] = {}
    for movement in movements:
        if movement.direction != StockDirection.OUT or movement.reason == StockChangeReason.SALE:
            continue
        seen = reasons.setdefault(movement.ingredient_id, [])
        if movement.reason not in seen:
            seen.append(movement.reason)
    return reasons


def calculate_variance(
    ingredient: Ingredient,
    expected: float,
    actual: float,
    reasons: Sequence[StockChangeReason] = ()
) -> IngredientVariance:
    """
    Variance for one ingredient over a period.

    A positive variance means more was consumed than expected. Only a
    positive variance is priced; the cost is never negative.
    """
    variance = actual - expected
    return IngredientVariance(
        ingredient_id=ingredient.id,
        ingredient_name=ingredient.name,
        unit=ingredient.unit,
        expected_usage=expected,
        actual_usage=actual,
        variance=variance,
        variance_percentage=percentage(variance, expected),
        estimated_wastage_cost=max(0.0, variance) * ingredient.unit_cost,
        primary_reasons=list(reasons),
    )


def wastage_by_reason(
    movements: Iterable[StockMovement],
    ingredients: Iterable[Ingredient]
) -> List[ReasonBreakdown]:
    """Non-sale outgoing quantity and cost per reason, largest cost first."""
    unit_costs = {ingredient.id: ingredient.unit_cost for ingredient in ingredients}
    breakdown: Dict[StockChangeReason, ReasonBreakdown] = {}

    for movement in movements:
        if movement.direction != StockDirection.OUT or movement.reason == StockChangeReason.SALE:
            continue
        entry = breakdown.setdefault(
            movement.reason,
            ReasonBreakdown(reason=movement.reason, quantity=0.0, cost=0.0, percentage=0.0),
        )
        entry.quantity += movement.quantity
        entry.cost += movement.quantity * unit_costs.get(movement.ingredient_id, 0.0)

    total_cost = sum(entry.cost for entry in breakdown.values())
    for entry in breakdown.values():
        entry.percentage = percentage(entry.cost, total_cost)

    return sorted(breakdown.values(), key=lambda entry: entry.cost, reverse=True)


def build_wastage_report(
    ingredients: Sequence[Ingredient],
    orders: Iterable[Order],
    recipes: Iterable[RecipeComponent],
    movements: Sequence[StockMovement]
) -> WastageReport:
    """
    Variance report across ingredients, ranked by estimated wastage cost.

    Orders and movements must already be scoped to the same period and
    location. Ingredients with neither expected nor actual usage are left out.
    """
    expected = expected_usage(orders, recipes)
    actual = actual_usage(movements)
    reasons = variance_reasons(movements)

    lines = []
    for ingredient in ingredients:
        if ingredient.id not in expected and ingredient.id not in actual:
            continue
        lines.append(calculate_variance(
            ingredient,
            expected.get(ingredient.id, 0.0),
            actual.get(ingredient.id, 0.0),
            reasons.get(ingredient.id, ()),
        ))

    known = {ingredient.id for ingredient in ingredients}
    unknown = (set(expected) | set(actual)) - known
    if unknown:
        logger.warning("Usage recorded for %d unknown ingredient(s): %s", len(unknown), sorted(unknown))

    ranked = rank_records(lines, "estimated_wastage_cost")
    return WastageReport(
        lines=ranked,
        total_wastage_cost=sum(line.estimated_wastage_cost for line in ranked),
        by_reason=wastage_by_reason(movements, ingredients),
    )
