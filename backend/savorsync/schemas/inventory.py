from pydantic import BaseModel, field_validator
from datetime import datetime
import enum


class StockDirection(str, enum.Enum):
    IN = "in"
    OUT = "out"


class StockChangeReason(str, enum.Enum):
    SALE = "sale"
    SPOILAGE = "spoilage"
    OVER_PREP = "over_prep"
    MISTAKE = "mistake"
    THEFT = "theft"
    DELIVERY = "delivery"
    MANUAL_ADJUSTMENT = "manual_adjustment"
    TRANSFER = "transfer"
    OTHER = "other"


class Ingredient(BaseModel):
    id: str
    name: str
    unit: str = "unit"
    unit_cost: float

    class Config:
        frozen = True


class RecipeComponent(BaseModel):
    """Quantity of an ingredient consumed per unit of a menu item sold."""
    menu_item_id: str
    ingredient_id: str
    quantity: float

    class Config:
        frozen = True


class StockMovement(BaseModel):
    id: str
    ingredient_id: str
    location_id: str
    direction: StockDirection
    quantity: float
    reason: StockChangeReason
    stock_before: float = 0.0
    stock_after: float = 0.0
    created_at: datetime

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v < 0:
            raise ValueError("quantity must not be negative")
        return v

    class Config:
        frozen = True
