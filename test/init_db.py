import datetime as dt
from typing import Dict

from sqlmodel import Session, select

from airline_api.db.flights import Flight, FlightCreate, Seat
from airline_api.db.reservations import PassengerCreate, ReservationCreate
from airline_api.db.users import RegisterRequest
from airline_api.services.account import register_customer
from airline_api.services.flight import create_flight
from airline_api.services.passenger import create_passenger
from airline_api.services.reservation import create_reservation

# Seeded fleet
BOEING_ID = 1
AIRBUS_ID = 2

DEPARTURE = dt.datetime(2030, 6, 1, 10, 0)


def create_test_customer(session: Session, email: str = "jane@example.com") -> int:
    """Register a customer account, return the customer id"""
    response = register_customer(
        RegisterRequest(
            name="Jane Doe",
            email=email,
            password="secret123",
            address="1 Main St",
            phoneNumber="555-0100",
        ),
        session,
    )
    return response.customerID


def create_test_passenger(session: Session, customer_id: int, passport: str = "X123") -> int:
    passenger = create_passenger(
        customer_id,
        PassengerCreate(
            fullName="Jane Doe",
            passportNumber=passport,
            age=34,
            nationality="British",
            gender="F",
        ),
        session,
    )
    return passenger.passengerID


def create_test_flight(
    session: Session,
    flight_number: int = 101,
    aircraft_id: int = BOEING_ID,
    departure: dt.datetime = DEPARTURE,
    hours: int = 2,
    base_price: float = 100.0,
) -> str:
    """Schedule a flight with its seat map, return the flight id"""
    flight = create_flight(
        FlightCreate(
            flightNumber=flight_number,
            departureTime=departure,
            arrivalTime=departure + dt.timedelta(hours=hours),
            departureLocation="London",
            arrivalLocation="Paris",
            basePrice=base_price,
            aircraftID=aircraft_id,
        ),
        session,
    )
    return flight.flightID


def seat_id(session: Session, flight_id: str, seat_number: str) -> int:
    seat = session.exec(
        select(Seat).where((Seat.flight_id == flight_id) & (Seat.seat_number == seat_number))
    ).one()
    return seat.id


def available_seats(session: Session, flight_id: str) -> int:
    session.expire_all()
    return session.get(Flight, flight_id).available_seats


def book(session: Session, customer_id: int, passenger_id: int, flight_id: str, seat_number: str):
    return create_reservation(
        customer_id,
        ReservationCreate(
            flightID=flight_id,
            passengerID=passenger_id,
            seatID=seat_id(session, flight_id, seat_number),
        ),
        session,
    )


def login(client, email: str, password: str) -> Dict[str, str]:
    """Get authorization headers with valid token"""
    token_response = client.post(
        "/api/auth/login",
        data={"username": email, "password": password, "grant_type": "password"},
    )
    assert token_response.status_code == 200
    token = token_response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
