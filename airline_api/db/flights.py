import datetime as dt
from enum import Enum
from typing import Optional

from sqlmodel import (
    Column,
    DateTime,
    Field,
    SQLModel,
    String,
    CheckConstraint,
    UniqueConstraint,
)

from ..utils import utcnow


class FlightStatus(str, Enum):
    SCHEDULED = "Scheduled"
    DELAYED = "Delayed"
    BOARDING = "Boarding"
    DEPARTED = "Departed"
    ARRIVED = "Arrived"
    CANCELLED = "Cancelled"


class SeatClass(str, Enum):
    FIRST = "First"
    BUSINESS = "Business"
    ECONOMY = "Economy"


class Flight(SQLModel, table=True):
    __tablename__ = "flights"
    id: str = Field(primary_key=True, max_length=10)
    flight_number: int = Field(nullable=False, index=True)
    departure_time: dt.datetime = Field(sa_column=Column(DateTime, nullable=False))
    arrival_time: dt.datetime = Field(sa_column=Column(DateTime, nullable=False))
    departure_location: str = Field(max_length=100)
    arrival_location: str = Field(max_length=100)
    status: str = Field(
        default=FlightStatus.SCHEDULED.value,
        sa_column=Column(String(50), nullable=False, default=FlightStatus.SCHEDULED.value),
    )
    available_seats: int = Field(nullable=False)
    base_price: float = Field(nullable=False)
    aircraft_id: int = Field(foreign_key="aircraft.id", index=True)
    created_at: dt.datetime = Field(default_factory=utcnow)

    __table_args__ = (
        CheckConstraint("available_seats >= 0", name="ck_flights_available_seats"),
        CheckConstraint(
            "status in ('Scheduled', 'Delayed', 'Boarding', 'Departed', 'Arrived', 'Cancelled')"
        ),
    )

    def __repr__(self):
        return f"id={self.id}, flight_number={self.flight_number}, departure_time={self.departure_time}, arrival_time={self.arrival_time}, aircraft_id={self.aircraft_id}, available_seats={self.available_seats}"


class Seat(SQLModel, table=True):
    __tablename__ = "seats"
    id: Optional[int] = Field(default=None, primary_key=True)
    seat_number: str = Field(max_length=10)
    seat_class: str = Field(sa_column=Column(String(20), nullable=False))
    price_multiplier: float = Field(default=1.0)
    flight_id: str = Field(foreign_key="flights.id", index=True)
    aircraft_id: int = Field(foreign_key="aircraft.id")

    __table_args__ = (
        UniqueConstraint("flight_id", "seat_number", name="uq_seats_flight_seat_number"),
        CheckConstraint("seat_class in ('First', 'Business', 'Economy')"),
    )


class FlightCreate(SQLModel):
    flightNumber: int = Field(gt=0, le=9999)
    departureTime: dt.datetime
    arrivalTime: dt.datetime
    departureLocation: str = Field(min_length=1, max_length=100)
    arrivalLocation: str = Field(min_length=1, max_length=100)
    basePrice: float = Field(ge=0)
    aircraftID: int


class FlightUpdate(SQLModel):
    departureTime: Optional[dt.datetime] = None
    arrivalTime: Optional[dt.datetime] = None
    departureLocation: Optional[str] = Field(default=None, max_length=100)
    arrivalLocation: Optional[str] = Field(default=None, max_length=100)
    status: Optional[FlightStatus] = None
    basePrice: Optional[float] = Field(default=None, ge=0)
    aircraftID: Optional[int] = None


class FlightSearch(SQLModel):
    departureLocation: Optional[str] = None
    arrivalLocation: Optional[str] = None
    departureDate: Optional[dt.date] = None
    passengers: int = Field(default=1, ge=1)
    maxPrice: Optional[float] = None


class FlightResponse(SQLModel):
    flightID: str
    flightNumber: int
    departureTime: dt.datetime
    arrivalTime: dt.datetime
    departureLocation: str
    arrivalLocation: str
    status: str
    availableSeats: int
    basePrice: float
    aircraftID: int
    aircraftModel: str
    durationMinutes: int


class SeatResponse(SQLModel):
    seatID: int
    seatNumber: str
    seatClass: str
    isAvailable: bool
    priceMultiplier: float
    flightID: str
    aircraftID: int


class AvailabilityResponse(SQLModel):
    isAvailable: bool


class SeatGenerationResponse(SQLModel):
    message: str
    seatsCreated: int


class SeatClearResponse(SQLModel):
    message: str
    seatsCleared: int
