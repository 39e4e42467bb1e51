from savorsync.schemas.common import ALL_LOCATIONS, DateRange, Scope
from savorsync.schemas.order import MenuItem, OrderItem, Order, OrderChannel, OrderStatus, PaymentMethod
from savorsync.schemas.location import Location
from savorsync.schemas.labor import StaffMember, StaffRole, Shift, ShiftStatus, TimeLog, TimeLogStatus, LaborCost
from savorsync.schemas.task import Task, TaskCategory, TaskPriority, TaskStatus
from savorsync.schemas.inventory import Ingredient, RecipeComponent, StockMovement, StockDirection, StockChangeReason

__all__ = [
    "ALL_LOCATIONS", "DateRange", "Scope",
    "MenuItem", "OrderItem", "Order", "OrderChannel", "OrderStatus", "PaymentMethod",
    "Location",
    "StaffMember", "StaffRole", "Shift", "ShiftStatus", "TimeLog", "TimeLogStatus", "LaborCost",
    "Task", "TaskCategory", "TaskPriority", "TaskStatus",
    "Ingredient", "RecipeComponent", "StockMovement", "StockDirection", "StockChangeReason",
]
