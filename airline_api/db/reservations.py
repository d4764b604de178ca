import datetime as dt
from enum import Enum
from typing import Optional

from sqlmodel import (
    Column,
    Field,
    Index,
    SQLModel,
    String,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy import text

from ..utils import utcnow


class ReservationStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class TicketStatus(str, Enum):
    VALID = "Valid"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    REFUNDED = "Refunded"


_ACTIVE_RESERVATION = text("status != 'Cancelled'")


class Passenger(SQLModel, table=True):
    __tablename__ = "passengers"
    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: int = Field(foreign_key="customers.id", index=True)
    full_name: str = Field(max_length=100)
    passport_number: str = Field(max_length=50)
    age: int
    nationality: str = Field(max_length=50)
    gender: str = Field(default="", max_length=10)
    date_of_birth: Optional[dt.date] = None
    created_at: dt.datetime = Field(default_factory=utcnow)

    __table_args__ = (
        UniqueConstraint(
            "customer_id", "passport_number", name="uq_passengers_customer_passport"
        ),
    )


class Reservation(SQLModel, table=True):
    __tablename__ = "reservations"
    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: int = Field(foreign_key="customers.id", index=True)
    flight_id: str = Field(foreign_key="flights.id", index=True)
    passenger_id: int = Field(foreign_key="passengers.id")
    seat_id: int = Field(foreign_key="seats.id")
    booking_datetime: dt.datetime = Field(default_factory=utcnow)
    status: str = Field(
        default=ReservationStatus.PENDING.value,
        sa_column=Column(String(50), nullable=False, default=ReservationStatus.PENDING.value),
    )
    price: float = Field(nullable=False)
    created_at: dt.datetime = Field(default_factory=utcnow)

    __table_args__ = (
        CheckConstraint("status in ('Pending', 'Confirmed', 'Cancelled')"),
        # One active reservation per seat; cancelled rows do not count
        Index(
            "uq_reservations_active_seat",
            "flight_id",
            "seat_id",
            unique=True,
            sqlite_where=_ACTIVE_RESERVATION,
            postgresql_where=_ACTIVE_RESERVATION,
        ),
    )


class Ticket(SQLModel, table=True):
    __tablename__ = "tickets"
    id: str = Field(primary_key=True, max_length=20)
    reservation_id: int = Field(foreign_key="reservations.id", index=True)
    issue_date: dt.datetime = Field(default_factory=utcnow)
    ticket_status: str = Field(
        default=TicketStatus.VALID.value,
        sa_column=Column(String(50), nullable=False, default=TicketStatus.VALID.value),
    )
    ticket_type: str = Field(default="Electronic", max_length=20)
    created_at: dt.datetime = Field(default_factory=utcnow)

    __table_args__ = (CheckConstraint("ticket_status in ('Valid', 'Cancelled')"),)


class Payment(SQLModel, table=True):
    __tablename__ = "payments"
    id: str = Field(primary_key=True, max_length=50)
    reservation_id: int = Field(foreign_key="reservations.id", index=True)
    amount: float = Field(nullable=False)
    payment_date: dt.datetime = Field(default_factory=utcnow)
    status: str = Field(
        default=PaymentStatus.PENDING.value,
        sa_column=Column(String(50), nullable=False, default=PaymentStatus.PENDING.value),
    )
    payment_method: str = Field(default="Credit Card", max_length=50)
    transaction_reference: str = Field(default="", max_length=100)
    created_at: dt.datetime = Field(default_factory=utcnow)

    __table_args__ = (
        CheckConstraint("status in ('Pending', 'Completed', 'Refunded')"),
    )


class PassengerCreate(SQLModel):
    fullName: str = Field(min_length=1, max_length=100)
    passportNumber: str = Field(min_length=1, max_length=50)
    age: int = Field(ge=0, le=120)
    nationality: str = Field(min_length=1, max_length=50)
    gender: str = Field(default="", max_length=10)
    dateOfBirth: Optional[dt.date] = None


class PassengerResponse(SQLModel):
    passengerID: int
    fullName: str
    passportNumber: str
    age: int
    nationality: str
    gender: str
    dateOfBirth: Optional[dt.date] = None


class ReservationCreate(SQLModel):
    flightID: str = Field(min_length=1)
    passengerID: int
    seatID: int


class ReservationUpdate(SQLModel):
    seatID: Optional[int] = None


class ReservationResponse(SQLModel):
    reservationID: int
    customerID: int
    bookingDateTime: dt.datetime
    status: str
    price: float
    flightID: str
    flightNumber: int
    departureLocation: str
    arrivalLocation: str
    departureTime: dt.datetime
    arrivalTime: dt.datetime
    seatID: int
    seatNumber: str
    seatClass: str
    passengerID: int
    passengerName: str
    passportNumber: str


class TicketResponse(SQLModel):
    ticketID: str
    reservationID: int
    issueDate: dt.datetime
    ticketStatus: str
    ticketType: str


class PaymentCreate(SQLModel):
    reservationID: int
    paymentMethod: str = Field(min_length=1, max_length=50)
    # Accepted for form compatibility; no gateway is called
    cardNumber: Optional[str] = None
    cardHolderName: Optional[str] = None
    expiryDate: Optional[str] = None
    cvv: Optional[str] = None


class PaymentResponse(SQLModel):
    paymentID: str
    reservationID: int
    amount: float
    paymentDate: dt.datetime
    status: str
    paymentMethod: str
    transactionReference: str
