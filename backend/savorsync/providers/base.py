from typing import List, Protocol
from datetime import datetime

from savorsync.schemas.order import Order, MenuItem
from savorsync.schemas.location import Location
from savorsync.schemas.labor import StaffMember, Shift, TimeLog, LaborCost
from savorsync.schemas.task import Task
from savorsync.schemas.inventory import Ingredient, RecipeComponent, StockMovement


class DataProvider(Protocol):
    """Source of already-authorized record collections for the aggregator."""

    as_of: datetime

    def locations(self) -> List[Location]: ...

    def menu_items(self) -> List[MenuItem]: ...

    def orders(self) -> List[Order]: ...

    def staff(self) -> List[StaffMember]: ...

    def shifts(self) -> List[Shift]: ...

    def time_logs(self) -> List[TimeLog]: ...

    def labor_costs(self) -> List[LaborCost]: ...

    def tasks(self) -> List[Task]: ...

    def ingredients(self) -> List[Ingredient]: ...

    def recipes(self) -> List[RecipeComponent]: ...

    def stock_movements(self) -> List[StockMovement]: ...
