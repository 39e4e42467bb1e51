"""
Tabular Data Provider

Loads exported POS and inventory data from CSV or Excel files:
- Orders, one row per line item (rows sharing an order_id form one order)
- Stock movements
- Ingredients and recipe components

Rows that cannot be parsed are skipped and reported in ``errors`` as
``Row N: ...`` (N is the spreadsheet row, header being row 1).
"""

from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from pathlib import Path
import logging

import pandas as pd

from savorsync.schemas.order import (
    MenuItem, Order, OrderItem, OrderChannel, OrderStatus, PaymentMethod
)
from savorsync.schemas.location import Location
from savorsync.schemas.labor import StaffMember, Shift, TimeLog, LaborCost
from savorsync.schemas.task import Task
from savorsync.schemas.inventory import (
    Ingredient, RecipeComponent, StockMovement, StockDirection, StockChangeReason
)

logger = logging.getLogger(__name__)

Source = Union[str, Path, pd.DataFrame]

ORDER_COLUMNS = ["order_id", "location_id", "created_at", "menu_item_id", "menu_item_name", "quantity", "unit_price"]
MOVEMENT_COLUMNS = ["ingredient_id", "location_id", "direction", "quantity", "reason", "created_at"]
INGREDIENT_COLUMNS = ["id", "name", "unit_cost"]
RECIPE_COLUMNS = ["menu_item_id", "ingredient_id", "quantity"]

MAX_REPORTED_ERRORS = 20


def read_table(source: Source) -> pd.DataFrame:
    """Read a CSV/Excel file (chosen by extension) or pass a DataFrame through."""
    if isinstance(source, pd.DataFrame):
        return source

    filename = str(source).lower()
    try:
        if filename.endswith('.csv'):
            df = pd.read_csv(source)
        elif filename.endswith('.xlsx') or filename.endswith('.xls'):
            df = pd.read_excel(source)
        else:
            raise ValueError(f"Unsupported file type: {source}. Supported formats: CSV, XLSX, XLS")
    except pd.errors.EmptyDataError:
        raise ValueError(f"File is empty: {source}")

    if df.empty:
        raise ValueError(f"File is empty: {source}")
    return df


def require_columns(df: pd.DataFrame, required: List[str]) -> None:
    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns: {', '.join(missing_cols)}")


def _value(row: pd.Series, column: str, default: Any = None) -> Any:
    value = row.get(column)
    if value is None or pd.isna(value):
        return default
    return value


def _float(row: pd.Series, column: str, default: Optional[float] = None) -> Optional[float]:
    value = _value(row, column)
    return default if value is None else float(value)


def _count(row: pd.Series, column: str) -> int:
    value = float(row[column])
    if not value.is_integer():
        raise ValueError(f"{column} must be a whole number, got {row[column]!r}")
    return int(value)


class TabularDataProvider:
    """
    Provider backed by tabular exports.

    Args:
        as_of: Reference "now" for period presets
        orders: Order line items (file path or DataFrame)
        stock_movements: Optional stock movement table
        ingredients: Optional ingredient table (id, name, unit, unit_cost)
        recipes: Optional recipe table (menu_item_id, ingredient_id, quantity)

    Raises:
        ValueError: If a table is empty, unreadable or misses required columns
    """

    def __init__(
        self,
        as_of: datetime,
        orders: Source,
        stock_movements: Optional[Source] = None,
        ingredients: Optional[Source] = None,
        recipes: Optional[Source] = None
    ):
        self.as_of = as_of
        self.errors: List[str] = []

        self._menu_items: Dict[str, MenuItem] = {}
        self._locations: Dict[str, Location] = {}
        self._orders = self._load_orders(read_table(orders))
        self._stock_movements = (
            self._load_stock_movements(read_table(stock_movements)) if stock_movements is not None else []
        )
        self._ingredients = self._load_ingredients(read_table(ingredients)) if ingredients is not None else []
        self._recipes = self._load_recipes(read_table(recipes)) if recipes is not None else []

        logger.info(
            "Loaded %d orders, %d stock movements, %d ingredients (%d rows skipped)",
            len(self._orders), len(self._stock_movements), len(self._ingredients), len(self.errors)
        )

    # ------------------------------------------------------------------
    # DataProvider interface
    # ------------------------------------------------------------------

    def locations(self) -> List[Location]:
        return list(self._locations.values())

    def menu_items(self) -> List[MenuItem]:
        return list(self._menu_items.values())

    def orders(self) -> List[Order]:
        return list(self._orders)

    def staff(self) -> List[StaffMember]:
        return []

    def shifts(self) -> List[Shift]:
        return []

    def time_logs(self) -> List[TimeLog]:
        return []

    def labor_costs(self) -> List[LaborCost]:
        return []

    def tasks(self) -> List[Task]:
        return []

    def ingredients(self) -> List[Ingredient]:
        return list(self._ingredients)

    def recipes(self) -> List[RecipeComponent]:
        return list(self._recipes)

    def stock_movements(self) -> List[StockMovement]:
        return list(self._stock_movements)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _row_error(self, idx: int, error: Exception) -> None:
        message = f"Row {idx + 2}: {error}"
        self.errors.append(message)
        if len(self.errors) <= MAX_REPORTED_ERRORS:
            logger.warning(message)

    def _timestamp(self, value: Any) -> datetime:
        stamp = pd.to_datetime(value)
        if pd.isna(stamp):
            raise ValueError(f"Invalid timestamp {value!r}")
        moment = stamp.to_pydatetime()
        # Naive exports are read in the reference timezone
        if moment.tzinfo is None and self.as_of.tzinfo is not None:
            moment = moment.replace(tzinfo=self.as_of.tzinfo)
        return moment

    def _menu_item(self, row: pd.Series) -> MenuItem:
        item_id = str(row['menu_item_id'])
        if item_id not in self._menu_items:
            self._menu_items[item_id] = MenuItem(
                id=item_id,
                name=str(row['menu_item_name']).strip(),
                category=str(_value(row, 'category', "Uncategorized")),
                base_price=float(row['unit_price']),
                cost=_float(row, 'unit_cost'),
                profit=_float(row, 'unit_profit'),
            )
        return self._menu_items[item_id]

    def _load_orders(self, df: pd.DataFrame) -> List[Order]:
        require_columns(df, ORDER_COLUMNS)

        # Order headers and lines, in order of first appearance
        headers: Dict[str, Dict[str, Any]] = {}
        first_rows: Dict[str, int] = {}
        lines: Dict[str, List[OrderItem]] = {}

        for idx, row in df.iterrows():
            try:
                order_id = str(row['order_id'])
                quantity = _count(row, 'quantity')
                unit_price = float(row['unit_price'])
                item = OrderItem(
                    id=f"{order_id}_item_{len(lines.get(order_id, []))}",
                    menu_item=self._menu_item(row),
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal=_float(row, 'subtotal', unit_price * quantity),
                )

                if order_id not in headers:
                    location_id = str(row['location_id'])
                    location_name = str(_value(row, 'location_name', location_id))
                    self._locations.setdefault(location_id, Location(id=location_id, name=location_name))
                    headers[order_id] = {
                        "id": order_id,
                        "order_number": str(_value(row, 'order_number', order_id)),
                        "location_id": location_id,
                        "location_name": location_name,
                        "channel": OrderChannel(str(_value(row, 'channel', OrderChannel.DINE_IN.value)).lower()),
                        "status": OrderStatus(str(_value(row, 'status', OrderStatus.COMPLETED.value)).lower()),
                        "payment_method": PaymentMethod(
                            str(_value(row, 'payment_method', PaymentMethod.CARD.value)).lower()
                        ),
                        "created_at": self._timestamp(row['created_at']),
                        "tax_amount": _float(row, 'tax_amount', 0.0),
                        "discount_amount": _float(row, 'discount_amount', 0.0),
                        "tip_amount": _float(row, 'tip_amount', 0.0),
                        "delivery_fee": _float(row, 'delivery_fee', 0.0),
                        "total_amount": _float(row, 'total_amount'),
                        "staff_id": str(row['staff_id']) if _value(row, 'staff_id') is not None else None,
                        "staff_name": str(row['staff_name']) if _value(row, 'staff_name') is not None else None,
                    }
                    first_rows[order_id] = idx
                    lines[order_id] = []
                lines[order_id].append(item)

            except (KeyError, TypeError, ValueError) as e:
                self._row_error(idx, e)

        orders = []
        for order_id, header in headers.items():
            items = lines[order_id]
            subtotal = sum(item.subtotal for item in items)
            total = header.pop("total_amount")
            if total is None:
                total = (
                    subtotal + header["tax_amount"] - header["discount_amount"]
                    + header["tip_amount"] + header["delivery_fee"]
                )
            try:
                orders.append(Order(
                    items=items,
                    subtotal=subtotal,
                    tax_rate=(header["tax_amount"] / subtotal) if subtotal else 0.0,
                    total_amount=total,
                    **header
                ))
            except ValueError as e:
                # pydantic's ValidationError is a ValueError
                self._row_error(first_rows[order_id], e)
        return orders

    def _load_stock_movements(self, df: pd.DataFrame) -> List[StockMovement]:
        require_columns(df, MOVEMENT_COLUMNS)
        movements = []

        for idx, row in df.iterrows():
            try:
                movements.append(StockMovement(
                    id=str(_value(row, 'id', f"mv_{idx + 1:06d}")),
                    ingredient_id=str(row['ingredient_id']),
                    location_id=str(row['location_id']),
                    direction=StockDirection(str(row['direction']).lower()),
                    quantity=float(row['quantity']),
                    reason=StockChangeReason(str(row['reason']).lower()),
                    stock_before=_float(row, 'stock_before', 0.0),
                    stock_after=_float(row, 'stock_after', 0.0),
                    created_at=self._timestamp(row['created_at']),
                ))
            except (KeyError, TypeError, ValueError) as e:
                self._row_error(idx, e)

        return movements

    def _load_ingredients(self, df: pd.DataFrame) -> List[Ingredient]:
        require_columns(df, INGREDIENT_COLUMNS)
        ingredients = []

        for idx, row in df.iterrows():
            try:
                ingredients.append(Ingredient(
                    id=str(row['id']),
                    name=str(row['name']).strip(),
                    unit=str(_value(row, 'unit', "unit")),
                    unit_cost=float(row['unit_cost']),
                ))
            except (KeyError, TypeError, ValueError) as e:
                self._row_error(idx, e)

        return ingredients

    def _load_recipes(self, df: pd.DataFrame) -> List[RecipeComponent]:
        require_columns(df, RECIPE_COLUMNS)
        recipes = []

        for idx, row in df.iterrows():
            try:
                recipes.append(RecipeComponent(
                    menu_item_id=str(row['menu_item_id']),
                    ingredient_id=str(row['ingredient_id']),
                    quantity=float(row['quantity']),
                ))
            except (KeyError, TypeError, ValueError) as e:
                self._row_error(idx, e)

        return recipes
