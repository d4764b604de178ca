from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..db.reservations import Passenger, PassengerCreate, PassengerResponse
from ..errors import ConflictError
from .account import get_customer


def passenger_response(passenger: Passenger) -> PassengerResponse:
    return PassengerResponse(
        passengerID=passenger.id,
        fullName=passenger.full_name,
        passportNumber=passenger.passport_number,
        age=passenger.age,
        nationality=passenger.nationality,
        gender=passenger.gender,
        dateOfBirth=passenger.date_of_birth,
    )


def get_customer_passengers(customer_id: int, session: Session) -> list[PassengerResponse]:
    get_customer(customer_id, session)
    passengers = session.exec(
        select(Passenger).where(Passenger.customer_id == customer_id).order_by(Passenger.id)
    ).all()
    return [passenger_response(p) for p in passengers]


def create_passenger(
    customer_id: int, data: PassengerCreate, session: Session
) -> PassengerResponse:
    """Register a traveller for a customer; passports are unique per customer"""
    get_customer(customer_id, session)

    existing = session.exec(
        select(Passenger).where(
            (Passenger.customer_id == customer_id)
            & (Passenger.passport_number == data.passportNumber)
        )
    ).first()
    if existing:
        logger.warning(f"Duplicate passport {data.passportNumber} for customer {customer_id}")
        raise ConflictError("Passenger with this passport number already exists")

    passenger = Passenger(
        customer_id=customer_id,
        full_name=data.fullName,
        passport_number=data.passportNumber,
        age=data.age,
        nationality=data.nationality,
        gender=data.gender,
        date_of_birth=data.dateOfBirth,
    )
    try:
        session.add(passenger)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError("Passenger with this passport number already exists") from e
    session.refresh(passenger)
    return passenger_response(passenger)
