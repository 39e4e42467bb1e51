from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime
import enum


class OrderChannel(str, enum.Enum):
    DINE_IN = "dine-in"
    TAKEOUT = "takeout"
    DELIVERY = "delivery"
    CATERING = "catering"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    DIGITAL_WALLET = "digital_wallet"
    ONLINE = "online"


class MenuItem(BaseModel):
    id: str
    name: str
    category: str
    base_price: float
    cost: Optional[float] = None  # unit cost, when tracked
    profit: Optional[float] = None  # fixed profit per unit

    class Config:
        frozen = True


class OrderItem(BaseModel):
    id: str
    menu_item: MenuItem
    quantity: int
    unit_price: float
    subtotal: float

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v < 0:
            raise ValueError("quantity must not be negative")
        return v

    @property
    def menu_item_id(self) -> str:
        return self.menu_item.id

    class Config:
        frozen = True


class Order(BaseModel):
    id: str
    order_number: str = ""
    location_id: str
    location_name: str = ""
    channel: OrderChannel = OrderChannel.DINE_IN
    status: OrderStatus = OrderStatus.COMPLETED
    items: List[OrderItem] = []
    subtotal: float = 0.0
    tax_rate: float = 0.0
    tax_amount: float = 0.0
    discount_amount: float = 0.0
    tip_amount: float = 0.0
    delivery_fee: float = 0.0
    total_amount: float
    payment_method: PaymentMethod = PaymentMethod.CARD
    created_at: datetime
    completed_at: Optional[datetime] = None
    staff_id: Optional[str] = None
    staff_name: Optional[str] = None

    @field_validator("tax_amount", "discount_amount", "tip_amount", "delivery_fee")
    @classmethod
    def validate_charges(cls, v):
        if v < 0:
            raise ValueError("charges must not be negative")
        return v

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    class Config:
        frozen = True
