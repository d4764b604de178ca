import datetime as dt
from enum import Enum
from typing import Optional

from sqlmodel import Column, Field, SQLModel, String, CheckConstraint

from ..utils import utcnow


class AircraftStatus(str, Enum):
    AVAILABLE = "Available"
    MAINTENANCE = "Maintenance"
    RETIRED = "Retired"


def _next_maintenance() -> dt.datetime:
    return utcnow() + dt.timedelta(days=90)


class Aircraft(SQLModel, table=True):
    __tablename__ = "aircraft"
    id: Optional[int] = Field(default=None, primary_key=True)
    model: str = Field(max_length=100)
    seating_capacity: int = Field(nullable=False)
    status: str = Field(
        default=AircraftStatus.AVAILABLE.value,
        sa_column=Column(String(50), nullable=False, default=AircraftStatus.AVAILABLE.value),
    )
    registration: str = Field(default="", max_length=50)
    last_maintenance: dt.datetime = Field(default_factory=utcnow)
    next_maintenance: dt.datetime = Field(default_factory=_next_maintenance)
    created_at: dt.datetime = Field(default_factory=utcnow)

    __table_args__ = (
        CheckConstraint("status in ('Available', 'Maintenance', 'Retired')"),
        CheckConstraint("seating_capacity > 0"),
    )

    def __repr__(self):
        return f"id={self.id}, model={self.model}, seating_capacity={self.seating_capacity}, status={self.status}"


class AircraftCreate(SQLModel):
    model: str = Field(min_length=1, max_length=100)
    seatingCapacity: Optional[int] = Field(default=None, gt=0)
    registration: str = Field(default="", max_length=50)


class AircraftUpdate(SQLModel):
    model: Optional[str] = Field(default=None, max_length=100)
    seatingCapacity: Optional[int] = Field(default=None, gt=0)
    status: Optional[AircraftStatus] = None
    registration: Optional[str] = Field(default=None, max_length=50)
    lastMaintenance: Optional[dt.datetime] = None
    nextMaintenance: Optional[dt.datetime] = None


class AircraftResponse(SQLModel):
    aircraftID: int
    model: str
    seatingCapacity: int
    status: str
    registration: str
    lastMaintenance: dt.datetime
    nextMaintenance: dt.datetime


def aircraft_response(aircraft: Aircraft) -> AircraftResponse:
    return AircraftResponse(
        aircraftID=aircraft.id,
        model=aircraft.model,
        seatingCapacity=aircraft.seating_capacity,
        status=aircraft.status,
        registration=aircraft.registration,
        lastMaintenance=aircraft.last_maintenance,
        nextMaintenance=aircraft.next_maintenance,
    )
