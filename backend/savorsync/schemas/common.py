from pydantic import BaseModel, model_validator
from typing import Optional
from datetime import datetime


# Location id meaning "no location filter"
ALL_LOCATIONS = "all"


class DateRange(BaseModel):
    start: datetime
    end: datetime  # inclusive
    label: str = ""

    @model_validator(mode="after")
    def validate_order(self):
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self

    @property
    def length(self):
        return self.end - self.start

    @property
    def days(self) -> int:
        """Number of calendar days touched by the range."""
        return (self.end.date() - self.start.date()).days + 1

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    class Config:
        frozen = True


class Scope(BaseModel):
    location_id: str = ALL_LOCATIONS
    date_range: Optional[DateRange] = None

    @property
    def is_all_locations(self) -> bool:
        return self.location_id == ALL_LOCATIONS

    class Config:
        frozen = True
