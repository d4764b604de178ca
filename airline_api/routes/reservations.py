from fastapi import APIRouter, HTTPException

from ..db.reservations import (
    PassengerCreate,
    PassengerResponse,
    PaymentCreate,
    PaymentResponse,
    ReservationCreate,
    ReservationResponse,
    ReservationUpdate,
    TicketResponse,
)
from ..db.session import SessionDep
from ..errors import AirlineError
from ..services.passenger import create_passenger, get_customer_passengers
from ..services.payment import process_payment
from ..services.reservation import (
    cancel_reservation,
    create_reservation,
    get_reservation,
    list_customer_reservations,
    list_reservation_payments,
    list_reservation_tickets,
    update_reservation,
)

router = APIRouter(prefix="/api/reservations", tags=["reservations"])


# Payment endpoints
@router.post("/payments", status_code=200)
def process_payment_endpoint(payment: PaymentCreate, session: SessionDep) -> PaymentResponse:
    try:
        return process_payment(payment, session)
    except AirlineError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


# Passenger endpoints
@router.get("/customers/{customer_id}/passengers", status_code=200)
def get_passengers_endpoint(customer_id: int, session: SessionDep) -> list[PassengerResponse]:
    return get_customer_passengers(customer_id, session)


@router.post("/customers/{customer_id}/passengers", status_code=201)
def create_passenger_endpoint(
    customer_id: int, passenger: PassengerCreate, session: SessionDep
) -> PassengerResponse:
    try:
        return create_passenger(customer_id, passenger, session)
    except AirlineError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


# Reservation endpoints
@router.get("/customer/{customer_id}", status_code=200)
def get_customer_reservations_endpoint(
    customer_id: int, session: SessionDep
) -> list[ReservationResponse]:
    return list_customer_reservations(customer_id, session)


@router.post("/customer/{customer_id}", status_code=201)
def create_reservation_endpoint(
    customer_id: int, reservation: ReservationCreate, session: SessionDep
) -> ReservationResponse:
    try:
        return create_reservation(customer_id, reservation, session)
    except AirlineError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


@router.get("/{reservation_id}", status_code=200)
def get_reservation_endpoint(reservation_id: int, session: SessionDep) -> ReservationResponse:
    return get_reservation(reservation_id, session)


@router.put("/{reservation_id}", status_code=200)
def update_reservation_endpoint(
    reservation_id: int, reservation_update: ReservationUpdate, session: SessionDep
) -> ReservationResponse:
    # Missing reservation is a 404, every other failure a 400
    get_reservation(reservation_id, session)
    try:
        return update_reservation(reservation_id, reservation_update, session)
    except AirlineError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


@router.delete("/{reservation_id}", status_code=204)
def cancel_reservation_endpoint(reservation_id: int, session: SessionDep):
    cancel_reservation(reservation_id, session)


@router.get("/{reservation_id}/tickets", status_code=200)
def get_reservation_tickets_endpoint(
    reservation_id: int, session: SessionDep
) -> list[TicketResponse]:
    return list_reservation_tickets(reservation_id, session)


@router.get("/{reservation_id}/payments", status_code=200)
def get_reservation_payments_endpoint(
    reservation_id: int, session: SessionDep
) -> list[PaymentResponse]:
    return list_reservation_payments(reservation_id, session)
