from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime
import enum


class StaffRole(str, enum.Enum):
    SERVER = "server"
    BARTENDER = "bartender"
    HOST = "host"
    CASHIER = "cashier"
    BUSSER = "busser"
    COOK = "cook"
    PREP = "prep"
    DISHWASHER = "dishwasher"
    MANAGER = "manager"


# Roles that receive tips
FRONT_OF_HOUSE_ROLES = frozenset({
    StaffRole.SERVER,
    StaffRole.BARTENDER,
    StaffRole.HOST,
    StaffRole.CASHIER,
    StaffRole.BUSSER,
})


class ShiftStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    CANCELLED = "cancelled"


class TimeLogStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class StaffMember(BaseModel):
    id: str
    first_name: str
    last_name: str
    role: StaffRole
    hourly_rate: float
    location_id: str

    @field_validator("hourly_rate")
    @classmethod
    def validate_rate(cls, v):
        if v < 0:
            raise ValueError("hourly_rate must not be negative")
        return v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_front_of_house(self) -> bool:
        return self.role in FRONT_OF_HOUSE_ROLES

    class Config:
        frozen = True


class Shift(BaseModel):
    id: str
    staff_id: str
    location_id: str
    date: date
    start_time: datetime
    end_time: datetime
    role: StaffRole
    status: ShiftStatus = ShiftStatus.SCHEDULED
    break_minutes: int = 0

    @property
    def scheduled_hours(self) -> float:
        """Scheduled working hours (excluding break)."""
        total_minutes = (self.end_time - self.start_time).total_seconds() / 60
        return max(0.0, total_minutes - self.break_minutes) / 60

    def __repr__(self):
        return f"<Shift(id={self.id}, staff_id={self.staff_id}, date={self.date}, {self.start_time:%H:%M}-{self.end_time:%H:%M})>"

    class Config:
        frozen = True


class TimeLog(BaseModel):
    id: str
    shift_id: str
    staff_id: str
    location_id: str
    clock_in: datetime
    clock_out: Optional[datetime] = None
    break_minutes: int = 0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    status: TimeLogStatus = TimeLogStatus.OPEN

    @property
    def total_hours(self) -> float:
        return self.regular_hours + self.overtime_hours

    class Config:
        frozen = True


class LaborCost(BaseModel):
    id: str
    time_log_id: str
    staff_id: str
    location_id: str
    work_date: datetime  # clock-in of the underlying time log
    hourly_rate: float
    regular_pay: float
    overtime_pay: float
    tips: float = 0.0
    total_compensation: float

    class Config:
        frozen = True
