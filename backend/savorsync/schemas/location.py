from pydantic import BaseModel


class Location(BaseModel):
    id: str
    name: str
    city: str = ""
    is_active: bool = True
    monthly_rent: float = 0.0

    class Config:
        frozen = True
