"""
Mock Data Provider

Generates a realistic, reproducible restaurant dataset for demos and tests:
- Locations with monthly rent
- Staff across front- and back-of-house roles
- Shifts, time logs and labor costs
- Orders with day-of-week volume patterns
- Tasks with completion and quality outcomes
- Ingredient stock movements (sales, deliveries, waste)

Everything is derived from a seeded random generator and an explicit
``as_of`` timestamp, so two providers built with the same arguments return
identical records.
"""

from typing import Dict, List, Optional, Tuple
from datetime import date, datetime, time, timedelta
import logging
import random

from savorsync.config import get_settings
from savorsync.schemas.order import (
    MenuItem, Order, OrderItem, OrderChannel, OrderStatus, PaymentMethod
)
from savorsync.schemas.location import Location
from savorsync.schemas.labor import StaffMember, StaffRole, Shift, ShiftStatus, TimeLog, LaborCost
from savorsync.schemas.task import Task, TaskCategory, TaskPriority, TaskStatus
from savorsync.schemas.inventory import (
    Ingredient, RecipeComponent, StockMovement, StockDirection, StockChangeReason
)
from savorsync.services.labor import LaborCostCalculator

logger = logging.getLogger(__name__)


# (id, name, category, base price, unit cost)
MENU_ITEM_DATA = [
    ("item_001", "Margherita Pizza", "Pizza", 16.99, 4.50),
    ("item_002", "Pepperoni Pizza", "Pizza", 18.99, 5.20),
    ("item_003", "Caesar Salad", "Salads", 12.99, 3.80),
    ("item_004", "Grilled Chicken Sandwich", "Sandwiches", 14.99, 4.20),
    ("item_005", "Fish & Chips", "Main Course", 19.99, 6.50),
    ("item_006", "Pasta Carbonara", "Pasta", 17.99, 4.80),
    ("item_007", "Chicken Wings (12pc)", "Appetizers", 13.99, 4.10),
    ("item_008", "Chocolate Lava Cake", "Desserts", 8.99, 2.20),
    ("item_009", "Craft Beer", "Beverages", 6.99, 1.80),
    ("item_010", "Fresh Lemonade", "Beverages", 4.99, 1.20),
    ("item_011", "BBQ Burger", "Burgers", 15.99, 4.60),
    ("item_012", "Veggie Wrap", "Wraps", 11.99, 3.40),
]

LOCATION_DATA = [
    {"id": "loc_001", "name": "SavorSync Downtown", "city": "San Francisco", "monthly_rent": 15000.0},
    {"id": "loc_002", "name": "SavorSync Uptown", "city": "San Francisco", "monthly_rent": 9000.0},
    {"id": "loc_003", "name": "SavorSync Waterfront", "city": "Oakland", "monthly_rent": 12000.0},
]

FIRST_NAMES = [
    "Sarah", "Marcus", "Elena", "David", "Priya", "James", "Lucia", "Kevin",
    "Amara", "Tom", "Grace", "Omar", "Hannah", "Diego", "Mei", "Noah",
]

LAST_NAMES = [
    "Johnson", "Chen", "Rodriguez", "Kim", "Patel", "Nguyen", "Garcia", "Okafor",
    "Smith", "Rossi", "Brown", "Haddad", "Lee", "Torres", "Wang", "Miller",
]

# Staffing per location, with base hourly rate
ROLE_PLAN = [
    (StaffRole.MANAGER, 28.0),
    (StaffRole.SERVER, 15.0),
    (StaffRole.SERVER, 15.0),
    (StaffRole.BARTENDER, 17.0),
    (StaffRole.HOST, 14.5),
    (StaffRole.COOK, 21.0),
    (StaffRole.COOK, 20.0),
    (StaffRole.PREP, 17.5),
    (StaffRole.DISHWASHER, 15.5),
]

# (id, name, unit, unit cost)
INGREDIENT_DATA = [
    ("ing_001", "Mozzarella", "kg", 12.00),
    ("ing_002", "Pizza Dough", "kg", 3.00),
    ("ing_003", "Tomato Sauce", "l", 4.00),
    ("ing_004", "Chicken", "kg", 9.50),
    ("ing_005", "Romaine Lettuce", "kg", 5.00),
    ("ing_006", "Fish Fillet", "kg", 18.00),
    ("ing_007", "Potatoes", "kg", 1.20),
    ("ing_008", "Pasta", "kg", 2.50),
    ("ing_009", "Ground Beef", "kg", 11.00),
    ("ing_010", "Lemons", "kg", 3.50),
]

# (menu item, ingredient, quantity per unit sold)
RECIPE_DATA = [
    ("item_001", "ing_001", 0.15), ("item_001", "ing_002", 0.25), ("item_001", "ing_003", 0.10),
    ("item_002", "ing_001", 0.15), ("item_002", "ing_002", 0.25), ("item_002", "ing_003", 0.10),
    ("item_003", "ing_005", 0.20), ("item_003", "ing_004", 0.08),
    ("item_004", "ing_004", 0.18),
    ("item_005", "ing_006", 0.22), ("item_005", "ing_007", 0.30),
    ("item_006", "ing_008", 0.15),
    ("item_007", "ing_004", 0.50),
    ("item_010", "ing_010", 0.12),
    ("item_011", "ing_009", 0.20), ("item_011", "ing_007", 0.20),
    ("item_012", "ing_005", 0.05),
]

WASTE_REASONS = [
    StockChangeReason.SPOILAGE,
    StockChangeReason.SPOILAGE,
    StockChangeReason.OVER_PREP,
    StockChangeReason.MISTAKE,
    StockChangeReason.THEFT,
    StockChangeReason.OTHER,
]

TASK_TITLES = {
    TaskCategory.CLEANING: "Deep clean prep stations",
    TaskCategory.INVENTORY: "Count walk-in cooler",
    TaskCategory.CUSTOMER_SERVICE: "Follow up on guest feedback",
    TaskCategory.MAINTENANCE: "Check fryer oil and filters",
    TaskCategory.TRAINING: "Complete allergen training module",
    TaskCategory.COMPLIANCE: "Log fridge temperatures",
    TaskCategory.SALES: "Push weekly special",
    TaskCategory.OPERATIONS: "Prepare opening checklist",
}

TASK_DAYS = 30
OPENING_STOCK = 50.0


class MockDataProvider:
    """
    In-memory dataset generated on first access.

    Args:
        as_of: Reference "now"; nothing is generated after it
        seed: Random seed (defaults to settings.mock_seed)
        days: Days of order history ending at ``as_of`` (defaults to settings.mock_days)
    """

    def __init__(self, as_of: datetime, seed: Optional[int] = None, days: Optional[int] = None):
        settings = get_settings()
        self.as_of = as_of
        self.seed = settings.mock_seed if seed is None else seed
        self.days = settings.mock_days if days is None else days
        self.tax_rate = settings.tax_rate
        self._data: Optional[Dict[str, list]] = None

    # ------------------------------------------------------------------
    # DataProvider interface
    # ------------------------------------------------------------------

    def locations(self) -> List[Location]:
        return list(self._dataset()["locations"])

    def menu_items(self) -> List[MenuItem]:
        return list(self._dataset()["menu_items"])

    def orders(self) -> List[Order]:
        return list(self._dataset()["orders"])

    def staff(self) -> List[StaffMember]:
        return list(self._dataset()["staff"])

    def shifts(self) -> List[Shift]:
        return list(self._dataset()["shifts"])

    def time_logs(self) -> List[TimeLog]:
        return list(self._dataset()["time_logs"])

    def labor_costs(self) -> List[LaborCost]:
        return list(self._dataset()["labor_costs"])

    def tasks(self) -> List[Task]:
        return list(self._dataset()["tasks"])

    def ingredients(self) -> List[Ingredient]:
        return list(self._dataset()["ingredients"])

    def recipes(self) -> List[RecipeComponent]:
        return list(self._dataset()["recipes"])

    def stock_movements(self) -> List[StockMovement]:
        return list(self._dataset()["stock_movements"])

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _dataset(self) -> Dict[str, list]:
        if self._data is None:
            self._data = self._generate()
        return self._data

    def _at(self, day: date, hour: int, minute: int = 0) -> datetime:
        return datetime.combine(day, time(hour, minute), tzinfo=self.as_of.tzinfo)

    def _history_days(self, count: int) -> List[date]:
        """Calendar days ending at as_of, oldest first."""
        end = self.as_of.date()
        return [end - timedelta(days=offset) for offset in range(count - 1, -1, -1)]

    def _generate(self) -> Dict[str, list]:
        rng = random.Random(self.seed)

        locations = [Location(**data) for data in LOCATION_DATA]
        menu_items = [
            MenuItem(
                id=item_id, name=name, category=category, base_price=price,
                cost=cost, profit=round(price - cost, 2)
            )
            for item_id, name, category, price, cost in MENU_ITEM_DATA
        ]
        staff = self._create_staff(locations)
        shifts = self._create_shifts(rng, staff)
        orders = self._create_orders(rng, locations, menu_items, staff, shifts)

        calculator = LaborCostCalculator()
        time_logs = calculator.time_logs(shifts)
        labor_costs = calculator.labor_costs(time_logs, staff, orders)

        tasks = self._create_tasks(rng, locations, staff)
        ingredients = [
            Ingredient(id=ing_id, name=name, unit=unit, unit_cost=cost)
            for ing_id, name, unit, cost in INGREDIENT_DATA
        ]
        recipes = [
            RecipeComponent(menu_item_id=item_id, ingredient_id=ing_id, quantity=qty)
            for item_id, ing_id, qty in RECIPE_DATA
        ]
        movements = self._create_stock_movements(rng, locations, orders, recipes)

        logger.info(
            "Generated mock dataset (seed=%s): %d orders, %d shifts, %d tasks, %d stock movements",
            self.seed, len(orders), len(shifts), len(tasks), len(movements)
        )

        return {
            "locations": locations,
            "menu_items": menu_items,
            "staff": staff,
            "shifts": shifts,
            "time_logs": time_logs,
            "labor_costs": labor_costs,
            "orders": orders,
            "tasks": tasks,
            "ingredients": ingredients,
            "recipes": recipes,
            "stock_movements": movements,
        }

    def _create_staff(self, locations: List[Location]) -> List[StaffMember]:
        staff = []
        idx = 0
        for location in locations:
            for role, rate in ROLE_PLAN:
                staff.append(StaffMember(
                    id=f"staff_{idx + 1:03d}",
                    first_name=FIRST_NAMES[idx % len(FIRST_NAMES)],
                    last_name=LAST_NAMES[(idx * 7) % len(LAST_NAMES)],
                    role=role,
                    hourly_rate=rate,
                    location_id=location.id,
                ))
                idx += 1
        return staff

    def _shift_status(self, rng: random.Random, start: datetime, end: datetime) -> ShiftStatus:
        if start > self.as_of:
            return ShiftStatus.SCHEDULED
        if end > self.as_of:
            return ShiftStatus.IN_PROGRESS
        roll = rng.random()
        if roll < 0.03:
            return ShiftStatus.NO_SHOW
        if roll < 0.05:
            return ShiftStatus.CANCELLED
        return ShiftStatus.COMPLETED

    def _create_shifts(self, rng: random.Random, staff: List[StaffMember]) -> List[Shift]:
        shifts = []
        for day in self._history_days(self.days):
            for member in staff:
                # Roughly five days a week
                if rng.random() > 5 / 7:
                    continue
                start_hour = rng.choice([8, 10, 11, 14, 16])
                hours = rng.choice([4, 5, 6, 7, 8, 8, 8, 9, 10])
                break_minutes = 30 if hours >= 6 else 0
                start = self._at(day, start_hour)
                end = start + timedelta(hours=hours, minutes=break_minutes)

                shifts.append(Shift(
                    id=f"shift_{day:%Y%m%d}_{member.id}",
                    staff_id=member.id,
                    location_id=member.location_id,
                    date=day,
                    start_time=start,
                    end_time=end,
                    role=member.role,
                    status=self._shift_status(rng, start, end),
                    break_minutes=break_minutes,
                ))
        return shifts

    def _server_on_shift(
        self,
        rng: random.Random,
        shifts_by_day: Dict[Tuple[date, str], List[Tuple[Shift, StaffMember]]],
        location_id: str,
        moment: datetime
    ) -> Optional[StaffMember]:
        candidates = [
            member
            for shift, member in shifts_by_day.get((moment.date(), location_id), [])
            if member.is_front_of_house
            and shift.status in (ShiftStatus.COMPLETED, ShiftStatus.IN_PROGRESS)
            and shift.start_time <= moment <= shift.end_time
        ]
        return rng.choice(candidates) if candidates else None

    def _create_orders(
        self,
        rng: random.Random,
        locations: List[Location],
        menu_items: List[MenuItem],
        staff: List[StaffMember],
        shifts: List[Shift]
    ) -> List[Order]:
        staff_map = {member.id: member for member in staff}
        shifts_by_day: Dict[Tuple[date, str], List[Tuple[Shift, StaffMember]]] = {}
        for shift in shifts:
            shifts_by_day.setdefault((shift.date, shift.location_id), []).append(
                (shift, staff_map[shift.staff_id])
            )

        channels = list(OrderChannel)
        payment_methods = list(PaymentMethod)
        orders: List[Order] = []

        for day in self._history_days(self.days):
            # Python weekday(): Friday=4, Saturday=5, Sunday=6
            weekday = day.weekday()
            base_count = 45 if weekday in (4, 5) else 35 if weekday == 6 else 25
            order_count = int(base_count * (0.7 + rng.random() * 0.6))

            for order_idx in range(order_count):
                created_at = self._at(day, rng.randint(8, 21), rng.randint(0, 59))
                if created_at > self.as_of:
                    continue

                location = rng.choice(locations)
                channel = rng.choice(channels)
                order_id = f"order_{day:%Y%m%d}_{order_idx:03d}"

                items = []
                for line_idx in range(rng.randint(1, 5)):
                    menu_item = rng.choice(menu_items)
                    quantity = rng.randint(1, 3)
                    unit_price = round(menu_item.base_price + (rng.random() * 2 - 1), 2)
                    items.append(OrderItem(
                        id=f"{order_id}_item_{line_idx}",
                        menu_item=menu_item,
                        quantity=quantity,
                        unit_price=unit_price,
                        subtotal=round(unit_price * quantity, 2),
                    ))

                subtotal = sum(item.subtotal for item in items)
                tax_amount = subtotal * self.tax_rate
                # 20% of orders carry a 5-20% discount
                discount = subtotal * (rng.random() * 0.15 + 0.05) if rng.random() < 0.2 else 0.0
                tip = subtotal * (rng.random() * 0.15 + 0.10) if channel == OrderChannel.DINE_IN else 0.0
                delivery_fee = 3.99 + rng.random() * 2 if channel == OrderChannel.DELIVERY else 0.0
                total = subtotal + tax_amount - discount + tip + delivery_fee

                server = self._server_on_shift(rng, shifts_by_day, location.id, created_at)

                orders.append(Order(
                    id=order_id,
                    order_number=f"#{1000 + len(orders)}",
                    location_id=location.id,
                    location_name=location.name,
                    channel=channel,
                    status=OrderStatus.COMPLETED,
                    items=items,
                    subtotal=round(subtotal, 2),
                    tax_rate=self.tax_rate,
                    tax_amount=round(tax_amount, 2),
                    discount_amount=round(discount, 2),
                    tip_amount=round(tip, 2),
                    delivery_fee=round(delivery_fee, 2),
                    total_amount=round(total, 2),
                    payment_method=rng.choice(payment_methods),
                    created_at=created_at,
                    completed_at=created_at + timedelta(minutes=rng.randint(15, 60)),
                    staff_id=server.id if server else None,
                    staff_name=server.full_name if server else None,
                ))

        return orders

    def _create_tasks(
        self,
        rng: random.Random,
        locations: List[Location],
        staff: List[StaffMember]
    ) -> List[Task]:
        tasks = []
        categories = list(TaskCategory)
        priorities = list(TaskPriority)

        for day in self._history_days(min(TASK_DAYS, self.days)):
            for location in locations:
                location_staff = [member for member in staff if member.location_id == location.id]
                for task_idx in range(rng.randint(2, 4)):
                    category = rng.choice(categories)
                    due_date = self._at(day, 17)
                    estimated = rng.choice([15, 30, 45, 60, 90])

                    status = TaskStatus.PENDING
                    completed_at = None
                    actual = None
                    quality = None

                    if due_date <= self.as_of:
                        roll = rng.random()
                        if roll < 0.75:
                            status = TaskStatus.COMPLETED
                            # Most tasks finish before the deadline, some run late
                            completed_at = due_date + timedelta(minutes=rng.randint(-180, 60))
                            actual = max(5, int(estimated * rng.uniform(0.7, 1.4)))
                            if rng.random() < 0.8:
                                quality = float(rng.randint(5, 10))
                        elif roll < 0.87:
                            status = TaskStatus.OVERDUE
                        elif roll < 0.92:
                            status = TaskStatus.CANCELLED
                        else:
                            status = TaskStatus.IN_PROGRESS

                    tasks.append(Task(
                        id=f"task_{day:%Y%m%d}_{location.id}_{task_idx}",
                        title=TASK_TITLES[category],
                        category=category,
                        priority=rng.choice(priorities),
                        status=status,
                        assigned_to=rng.choice(location_staff).id if location_staff else None,
                        location_id=location.id,
                        due_date=due_date,
                        completed_at=completed_at,
                        estimated_duration=estimated,
                        actual_duration=actual,
                        quality_score=quality,
                    ))
        return tasks

    def _create_stock_movements(
        self,
        rng: random.Random,
        locations: List[Location],
        orders: List[Order],
        recipes: List[RecipeComponent]
    ) -> List[StockMovement]:
        components: Dict[str, List[RecipeComponent]] = {}
        for component in recipes:
            components.setdefault(component.menu_item_id, []).append(component)

        # Ingredient consumed by sales per (day, location)
        sold: Dict[Tuple[date, str], Dict[str, float]] = {}
        for order in orders:
            usage = sold.setdefault((order.created_at.date(), order.location_id), {})
            for line in order.items:
                for component in components.get(line.menu_item_id, ()):
                    usage[component.ingredient_id] = (
                        usage.get(component.ingredient_id, 0.0) + component.quantity * line.quantity
                    )

        stock = {
            (location.id, ing_id): OPENING_STOCK
            for location in locations
            for ing_id, _, _, _ in INGREDIENT_DATA
        }
        movements: List[StockMovement] = []

        def record(ing_id, location_id, direction, quantity, reason, moment):
            key = (location_id, ing_id)
            before = stock[key]
            after = before + quantity if direction == StockDirection.IN else before - quantity
            stock[key] = after
            movements.append(StockMovement(
                id=f"mv_{len(movements) + 1:06d}",
                ingredient_id=ing_id,
                location_id=location_id,
                direction=direction,
                quantity=round(quantity, 3),
                reason=reason,
                stock_before=round(before, 3),
                stock_after=round(after, 3),
                created_at=moment,
            ))

        for day_idx, day in enumerate(self._history_days(self.days)):
            for location in locations:
                if day_idx % 3 == 0:
                    for ing_id, _, _, _ in INGREDIENT_DATA:
                        record(ing_id, location.id, StockDirection.IN, rng.uniform(20, 40),
                               StockChangeReason.DELIVERY, self._at(day, 7))

                closing = self._at(day, 23)
                if closing > self.as_of:
                    closing = self.as_of
                for ing_id, quantity in sold.get((day, location.id), {}).items():
                    record(ing_id, location.id, StockDirection.OUT, quantity,
                           StockChangeReason.SALE, closing)
                    if rng.random() < 0.15:
                        record(ing_id, location.id, StockDirection.OUT,
                               quantity * rng.uniform(0.02, 0.15),
                               rng.choice(WASTE_REASONS), closing)

        return movements
