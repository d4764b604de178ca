"""Reservation workflow: booking, seat changes and cancellation.

A reservation starts Pending, becomes Confirmed once paid (see payment.py)
and ends Cancelled when released. Every write path below is a single
transaction: seat counter, reservation row and tickets either all change or
none do.
"""
from typing import Optional

from loguru import logger
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..db.flights import Flight, FlightStatus, Seat
from ..db.reservations import (
    Passenger,
    Payment,
    PaymentResponse,
    PaymentStatus,
    Reservation,
    ReservationCreate,
    ReservationResponse,
    ReservationStatus,
    ReservationUpdate,
    Ticket,
    TicketResponse,
    TicketStatus,
)
from ..errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    RequestInvalidError,
)
from ..utils import generate_ticket_id
from .account import get_customer


def compute_price(base_price: float, price_multiplier: float) -> float:
    return round(base_price * price_multiplier, 2)


def _reservation_rows():
    return (
        select(Reservation, Flight, Seat, Passenger)
        .join(Flight, Reservation.flight_id == Flight.id)
        .join(Seat, Reservation.seat_id == Seat.id)
        .join(Passenger, Reservation.passenger_id == Passenger.id)
    )


def _to_response(reservation: Reservation, flight: Flight, seat: Seat, passenger: Passenger) -> ReservationResponse:
    return ReservationResponse(
        reservationID=reservation.id,
        customerID=reservation.customer_id,
        bookingDateTime=reservation.booking_datetime,
        status=reservation.status,
        price=reservation.price,
        flightID=flight.id,
        flightNumber=flight.flight_number,
        departureLocation=flight.departure_location,
        arrivalLocation=flight.arrival_location,
        departureTime=flight.departure_time,
        arrivalTime=flight.arrival_time,
        seatID=seat.id,
        seatNumber=seat.seat_number,
        seatClass=seat.seat_class,
        passengerID=passenger.id,
        passengerName=passenger.full_name,
        passportNumber=passenger.passport_number,
    )


def lock_reservation(reservation_id: int, session: Session) -> Reservation:
    reservation = session.exec(
        select(Reservation)
        .where(Reservation.id == reservation_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()
    if not reservation:
        raise NotFoundError("Reservation not found")
    return reservation


def seat_taken(
    flight_id: str,
    seat_id: int,
    session: Session,
    exclude_reservation_id: Optional[int] = None,
) -> bool:
    query = select(Reservation.id).where(
        (Reservation.flight_id == flight_id)
        & (Reservation.seat_id == seat_id)
        & (Reservation.status != ReservationStatus.CANCELLED.value)
    )
    if exclude_reservation_id is not None:
        query = query.where(Reservation.id != exclude_reservation_id)
    return session.exec(query).first() is not None


def _take_seat(flight_id: str, session: Session) -> None:
    # The WHERE clause keeps the counter non-negative under concurrent bookings
    result = session.exec(
        update(Flight)
        .where((Flight.id == flight_id) & (Flight.available_seats > 0))
        .values(available_seats=Flight.available_seats - 1)
    )
    if result.rowcount == 0:
        raise ConflictError("Flight is full")


def _release_seat(flight_id: str, session: Session) -> None:
    session.exec(
        update(Flight)
        .where(Flight.id == flight_id)
        .values(available_seats=Flight.available_seats + 1)
    )


def get_reservation(reservation_id: int, session: Session) -> ReservationResponse:
    row = session.exec(_reservation_rows().where(Reservation.id == reservation_id)).first()
    if not row:
        raise NotFoundError("Reservation not found")
    return _to_response(*row)


def list_customer_reservations(customer_id: int, session: Session) -> list[ReservationResponse]:
    get_customer(customer_id, session)
    rows = session.exec(
        _reservation_rows()
        .where(Reservation.customer_id == customer_id)
        .order_by(Reservation.booking_datetime.desc(), Reservation.id.desc())
    ).all()
    return [_to_response(*row) for row in rows]


def create_reservation(
    customer_id: int, request: ReservationCreate, session: Session
) -> ReservationResponse:
    """Book a seat for one of the customer's passengers.

    Inserts the Pending reservation, takes one seat off the flight and issues
    the ticket in a single transaction.
    """
    get_customer(customer_id, session)

    try:
        flight = session.get(Flight, request.flightID)
        if not flight:
            logger.warning(f"Flight not found: {request.flightID}")
            raise NotFoundError("Flight not found")
        if flight.status != FlightStatus.SCHEDULED.value:
            logger.warning(f"Flight {flight.id} status is not Scheduled: {flight.status}")
            raise InvalidStateError(f"Flight {flight.id} is {flight.status}")
        if flight.available_seats <= 0:
            logger.warning(f"No available seats on flight {flight.id}")
            raise ConflictError("Flight is full")

        seat = session.get(Seat, request.seatID)
        if not seat:
            logger.warning(f"Seat not found: {request.seatID}")
            raise NotFoundError("Seat not found")
        if seat.flight_id != flight.id:
            logger.warning(f"Seat {seat.id} does not belong to flight {flight.id}")
            raise RequestInvalidError(f"Seat {seat.id} does not belong to flight {flight.id}")
        if seat_taken(flight.id, seat.id, session):
            logger.warning(f"Seat already reserved for flight: {flight.id}, Seat: {seat.id}")
            raise ConflictError(f"Seat {seat.seat_number} is already reserved")

        passenger = session.exec(
            select(Passenger).where(
                (Passenger.id == request.passengerID)
                & (Passenger.customer_id == customer_id)
            )
        ).first()
        if not passenger:
            logger.warning(
                f"Passenger not found or doesn't belong to customer: "
                f"PassengerID={request.passengerID}, CustomerID={customer_id}"
            )
            raise NotFoundError("Passenger not found")

        reservation = Reservation(
            customer_id=customer_id,
            flight_id=flight.id,
            passenger_id=passenger.id,
            seat_id=seat.id,
            status=ReservationStatus.PENDING.value,
            price=compute_price(flight.base_price, seat.price_multiplier),
        )
        session.add(reservation)
        _take_seat(flight.id, session)
        session.flush()

        ticket = Ticket(
            id=generate_ticket_id(),
            reservation_id=reservation.id,
            ticket_status=TicketStatus.VALID.value,
            ticket_type="Electronic",
        )
        session.add(ticket)
        session.flush()

        if seat_taken(flight.id, seat.id, session, exclude_reservation_id=reservation.id):
            raise ConflictError(f"Seat {seat.seat_number} is already reserved")

        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Reservation rejected by database constraint: {e.orig}")
        raise ConflictError("Seat is already reserved") from e
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Reservation {reservation.id} created: flight {request.flightID}, "
        f"seat {request.seatID}, customer {customer_id}"
    )
    return get_reservation(reservation.id, session)


def update_reservation(
    reservation_id: int, request: ReservationUpdate, session: Session
) -> ReservationResponse:
    """Move a reservation to another seat on the same flight"""
    try:
        reservation = lock_reservation(reservation_id, session)
        if reservation.status == ReservationStatus.CANCELLED.value:
            raise InvalidStateError("Cancelled reservations cannot be changed")

        if request.seatID is not None and request.seatID != reservation.seat_id:
            new_seat = session.get(Seat, request.seatID)
            if not new_seat:
                raise NotFoundError("Seat not found")
            if new_seat.flight_id != reservation.flight_id:
                raise RequestInvalidError(
                    f"Seat {new_seat.id} does not belong to flight {reservation.flight_id}"
                )
            if seat_taken(
                reservation.flight_id, new_seat.id, session, exclude_reservation_id=reservation.id
            ):
                raise ConflictError(f"Seat {new_seat.seat_number} is already reserved")

            flight = session.get(Flight, reservation.flight_id)
            reservation.seat_id = new_seat.id
            reservation.price = compute_price(flight.base_price, new_seat.price_multiplier)
            session.add(reservation)
            session.commit()
            logger.info(f"Reservation {reservation_id} moved to seat {new_seat.seat_number}")
    except IntegrityError as e:
        session.rollback()
        raise ConflictError("Seat is already reserved") from e
    except Exception:
        session.rollback()
        raise

    return get_reservation(reservation_id, session)


def cancel_reservation(reservation_id: int, session: Session) -> None:
    """Cancel a reservation, void its tickets, refund payments and free the seat.

    Cancelling twice is a no-op: the seat is only released once.
    """
    try:
        reservation = lock_reservation(reservation_id, session)
        if reservation.status == ReservationStatus.CANCELLED.value:
            logger.info(f"Reservation {reservation_id} already cancelled")
            session.rollback()
            return

        tickets = session.exec(select(Ticket).where(Ticket.reservation_id == reservation_id)).all()
        for ticket in tickets:
            ticket.ticket_status = TicketStatus.CANCELLED.value
            session.add(ticket)

        payments = session.exec(
            select(Payment).where(
                (Payment.reservation_id == reservation_id)
                & (Payment.status == PaymentStatus.COMPLETED.value)
            )
        ).all()
        for payment in payments:
            payment.status = PaymentStatus.REFUNDED.value
            session.add(payment)

        reservation.status = ReservationStatus.CANCELLED.value
        session.add(reservation)
        _release_seat(reservation.flight_id, session)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Reservation {reservation_id} cancelled: {len(tickets)} ticket(s) voided, "
        f"{len(payments)} payment(s) refunded"
    )


def list_reservation_tickets(reservation_id: int, session: Session) -> list[TicketResponse]:
    if not session.get(Reservation, reservation_id):
        raise NotFoundError("Reservation not found")
    tickets = session.exec(
        select(Ticket).where(Ticket.reservation_id == reservation_id).order_by(Ticket.issue_date)
    ).all()
    return [
        TicketResponse(
            ticketID=ticket.id,
            reservationID=ticket.reservation_id,
            issueDate=ticket.issue_date,
            ticketStatus=ticket.ticket_status,
            ticketType=ticket.ticket_type,
        )
        for ticket in tickets
    ]


def payment_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        paymentID=payment.id,
        reservationID=payment.reservation_id,
        amount=payment.amount,
        paymentDate=payment.payment_date,
        status=payment.status,
        paymentMethod=payment.payment_method,
        transactionReference=payment.transaction_reference,
    )


def list_reservation_payments(reservation_id: int, session: Session) -> list[PaymentResponse]:
    if not session.get(Reservation, reservation_id):
        raise NotFoundError("Reservation not found")
    payments = session.exec(
        select(Payment).where(Payment.reservation_id == reservation_id).order_by(Payment.payment_date)
    ).all()
    return [payment_response(p) for p in payments]
