"""Worker roster, working hours and break data models."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from booking_chain.schemas.contract_model import ContractModel
from booking_chain.utils import parse_hhmm

Weekday = Literal["sun", "mon", "tue", "wed", "thu", "fri", "sat"]

# date.weekday(): Monday == 0
WEEKDAY_KEYS: tuple[Weekday, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


class BreakRange(ContractModel):
    """A break within a day, "HH:mm" to "HH:mm"."""

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v.strip()

    @property
    def start_min(self) -> int:
        return parse_hhmm(self.start)

    @property
    def end_min(self) -> int:
        return parse_hhmm(self.end)


class TimeWindow(BaseModel):
    """Working window in minutes since midnight."""

    start_min: int
    end_min: int

    @property
    def is_empty(self) -> bool:
        return self.end_min <= self.start_min


class DayAvailability(ContractModel):
    """Opening hours for one weekday; ``open``/``close`` are None when closed."""

    day: Weekday
    open: Optional[str] = None
    close: Optional[str] = None
    breaks: list[BreakRange] = Field(default_factory=list)

    @field_validator("open", "close")
    @classmethod
    def validate_hhmm(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        parse_hhmm(v)
        return v.strip()

    @property
    def is_closed(self) -> bool:
        return self.open is None or self.close is None

    def window(self) -> TimeWindow:
        """Working window for the day; empty when closed."""
        if self.is_closed:
            return TimeWindow(start_min=0, end_min=0)
        return TimeWindow(start_min=parse_hhmm(self.open), end_min=parse_hhmm(self.close))


class Worker(ContractModel):
    """A staff member and the services they may perform."""

    id: str
    name: str
    active: bool = True
    services: list[str] = Field(default_factory=list)
    all_services_allowed: bool = False
    availability: list[DayAvailability] = Field(default_factory=list)

    @field_validator("services", mode="before")
    @classmethod
    def coerce_services(cls, v: Any) -> list[str]:
        if v is None:
            return []
        return [str(item).strip() for item in v if item is not None]

    @model_validator(mode="after")
    def check_identity(self) -> "Worker":
        if not self.id.strip():
            raise ValueError("worker id is required")
        return self

    def availability_for(self, weekday: Weekday) -> Optional[DayAvailability]:
        for entry in self.availability:
            if entry.day == weekday:
                return entry
        return None
