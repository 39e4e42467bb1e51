from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
import enum


class TaskCategory(str, enum.Enum):
    CLEANING = "cleaning"
    INVENTORY = "inventory"
    CUSTOMER_SERVICE = "customer_service"
    MAINTENANCE = "maintenance"
    TRAINING = "training"
    COMPLIANCE = "compliance"
    SALES = "sales"
    OPERATIONS = "operations"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Task(BaseModel):
    id: str
    title: str = ""
    category: TaskCategory
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    assigned_to: Optional[str] = None
    location_id: str
    due_date: datetime
    completed_at: Optional[datetime] = None
    estimated_duration: int  # minutes
    actual_duration: Optional[int] = None  # minutes
    quality_score: Optional[float] = None  # 1-10

    @field_validator("quality_score")
    @classmethod
    def validate_quality_score(cls, v):
        if v is not None and (v < 1 or v > 10):
            raise ValueError("quality_score must be between 1 and 10")
        return v

    @property
    def completed_on_time(self) -> bool:
        return (
            self.status == TaskStatus.COMPLETED
            and self.completed_at is not None
            and self.completed_at <= self.due_date
        )

    class Config:
        frozen = True
