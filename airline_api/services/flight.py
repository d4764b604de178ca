import datetime as dt
from typing import Optional

from loguru import logger
from sqlalchemy import delete, update
from sqlmodel import Session, select

from ..db.aircraft import Aircraft, AircraftStatus
from ..db.flights import (
    Flight,
    FlightCreate,
    FlightResponse,
    FlightSearch,
    FlightStatus,
    FlightUpdate,
    Seat,
    SeatResponse,
)
from ..db.reservations import Reservation, ReservationStatus
from ..errors import ConflictError, InvalidStateError, NotFoundError, RequestInvalidError
from ..utils import generate_flight_id, to_naive_utc
from .seats import create_seats_for_flight, flight_has_seats


def intervals_overlap(
    start: dt.datetime, end: dt.datetime, other_start: dt.datetime, other_end: dt.datetime
) -> bool:
    """Half-open overlap test: touching boundaries do not conflict"""
    return start < other_end and end > other_start


def is_aircraft_available(
    aircraft_id: int,
    departure_time: dt.datetime,
    arrival_time: dt.datetime,
    session: Session,
    exclude_flight_id: Optional[str] = None,
) -> bool:
    """True when no non-cancelled flight of the aircraft overlaps the window"""
    departure_time = to_naive_utc(departure_time)
    arrival_time = to_naive_utc(arrival_time)
    query = select(Flight.id).where(
        (Flight.aircraft_id == aircraft_id)
        & (Flight.status != FlightStatus.CANCELLED.value)
        & (Flight.departure_time < arrival_time)
        & (Flight.arrival_time > departure_time)
    )
    if exclude_flight_id is not None:
        query = query.where(Flight.id != exclude_flight_id)
    conflict = session.exec(query).first()
    if conflict is not None:
        logger.debug(f"Aircraft {aircraft_id} busy: overlaps flight {conflict}")
    return conflict is None


def flight_response(flight: Flight, aircraft: Optional[Aircraft]) -> FlightResponse:
    duration = flight.arrival_time - flight.departure_time
    return FlightResponse(
        flightID=flight.id,
        flightNumber=flight.flight_number,
        departureTime=flight.departure_time,
        arrivalTime=flight.arrival_time,
        departureLocation=flight.departure_location,
        arrivalLocation=flight.arrival_location,
        status=flight.status,
        availableSeats=flight.available_seats,
        basePrice=flight.base_price,
        aircraftID=flight.aircraft_id,
        aircraftModel=aircraft.model if aircraft else "",
        durationMinutes=int(duration.total_seconds() // 60),
    )


def _flights_with_aircraft():
    return select(Flight, Aircraft).join(Aircraft, Flight.aircraft_id == Aircraft.id)


def list_flights(session: Session) -> list[FlightResponse]:
    rows = session.exec(_flights_with_aircraft().order_by(Flight.departure_time)).all()
    return [flight_response(flight, aircraft) for flight, aircraft in rows]


def get_flight(flight_id: str, session: Session) -> FlightResponse:
    row = session.exec(_flights_with_aircraft().where(Flight.id == flight_id)).first()
    if not row:
        raise NotFoundError("Flight not found")
    flight, aircraft = row
    return flight_response(flight, aircraft)


def search_flights(search: FlightSearch, session: Session) -> list[FlightResponse]:
    query = _flights_with_aircraft().where(
        (Flight.status == FlightStatus.SCHEDULED.value)
        & (Flight.available_seats >= search.passengers)
    )
    if search.departureLocation:
        query = query.where(Flight.departure_location.contains(search.departureLocation))
    if search.arrivalLocation:
        query = query.where(Flight.arrival_location.contains(search.arrivalLocation))
    if search.departureDate:
        start_of_day = dt.datetime.combine(search.departureDate, dt.time.min)
        end_of_day = start_of_day + dt.timedelta(days=1)
        query = query.where(
            (Flight.departure_time >= start_of_day) & (Flight.departure_time < end_of_day)
        )
    if search.maxPrice is not None:
        query = query.where(Flight.base_price <= search.maxPrice)

    rows = session.exec(query.order_by(Flight.departure_time)).all()
    return [flight_response(flight, aircraft) for flight, aircraft in rows]


def check_window(departure_time: dt.datetime, arrival_time: dt.datetime) -> None:
    if arrival_time <= departure_time:
        raise RequestInvalidError("Arrival time must be after departure time")


def _require_available(aircraft: Aircraft) -> None:
    if aircraft.status != AircraftStatus.AVAILABLE.value:
        raise InvalidStateError(f"Aircraft {aircraft.id} is {aircraft.status}")


def create_flight(data: FlightCreate, session: Session) -> FlightResponse:
    """Schedule a flight and generate its seat map in one transaction"""
    departure_time = to_naive_utc(data.departureTime)
    arrival_time = to_naive_utc(data.arrivalTime)
    check_window(departure_time, arrival_time)

    aircraft = session.get(Aircraft, data.aircraftID)
    if not aircraft:
        raise NotFoundError("Aircraft not found")
    _require_available(aircraft)
    if not is_aircraft_available(aircraft.id, departure_time, arrival_time, session):
        logger.warning(f"Aircraft {aircraft.id} is already committed between {departure_time} and {arrival_time}")
        raise ConflictError("Aircraft is not available for the requested time window")

    flight_id = generate_flight_id(data.flightNumber)
    if session.get(Flight, flight_id):
        raise ConflictError(f"Flight {flight_id} already exists")

    flight = Flight(
        id=flight_id,
        flight_number=data.flightNumber,
        departure_time=departure_time,
        arrival_time=arrival_time,
        departure_location=data.departureLocation,
        arrival_location=data.arrivalLocation,
        base_price=data.basePrice,
        aircraft_id=aircraft.id,
        available_seats=0,
        status=FlightStatus.SCHEDULED.value,
    )
    try:
        session.add(flight)
        session.flush()
        flight.available_seats = create_seats_for_flight(flight_id, aircraft, session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(flight)
    logger.info(f"Flight {flight_id} scheduled on aircraft {aircraft.id}")
    return flight_response(flight, aircraft)


def _replace_seat_map(flight: Flight, aircraft: Aircraft, session: Session) -> None:
    """Swap the flight onto another aircraft; only allowed before any booking"""
    if session.exec(select(Reservation.id).where(Reservation.flight_id == flight.id)).first() is not None:
        raise InvalidStateError(f"Flight {flight.id} has reservations, its aircraft cannot change")

    session.exec(delete(Seat).where(Seat.flight_id == flight.id))
    flight.aircraft_id = aircraft.id
    flight.available_seats = create_seats_for_flight(flight.id, aircraft, session)
    logger.info(f"Flight {flight.id} moved to aircraft {aircraft.id}, seat map replaced")


def update_flight(flight_id: str, data: FlightUpdate, session: Session) -> FlightResponse:
    flight = session.get(Flight, flight_id)
    if not flight:
        raise NotFoundError("Flight not found")

    departure_time = to_naive_utc(data.departureTime) if data.departureTime else flight.departure_time
    arrival_time = to_naive_utc(data.arrivalTime) if data.arrivalTime else flight.arrival_time
    aircraft_id = data.aircraftID if data.aircraftID is not None else flight.aircraft_id
    status = data.status.value if data.status is not None else flight.status
    check_window(departure_time, arrival_time)

    aircraft = session.get(Aircraft, aircraft_id)
    if not aircraft:
        raise NotFoundError("Aircraft not found")
    aircraft_changed = aircraft_id != flight.aircraft_id
    if aircraft_changed:
        _require_available(aircraft)

    # A cancelled flight holds no aircraft time, so reinstating it is checked like a move
    needs_check = status != FlightStatus.CANCELLED.value and (
        aircraft_changed
        or departure_time != flight.departure_time
        or arrival_time != flight.arrival_time
        or flight.status == FlightStatus.CANCELLED.value
    )
    if needs_check and not is_aircraft_available(
        aircraft_id, departure_time, arrival_time, session, exclude_flight_id=flight_id
    ):
        logger.warning(f"Rejected update of flight {flight_id}: aircraft {aircraft_id} busy")
        raise ConflictError("Aircraft is not available for the requested time window")

    try:
        if aircraft_changed:
            _replace_seat_map(flight, aircraft, session)
        flight.departure_time = departure_time
        flight.arrival_time = arrival_time
        flight.status = status
        if data.departureLocation:
            flight.departure_location = data.departureLocation
        if data.arrivalLocation:
            flight.arrival_location = data.arrivalLocation
        if data.basePrice is not None:
            flight.base_price = data.basePrice

        session.add(flight)
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(flight)
    logger.info(f"Flight {flight_id} updated")
    return flight_response(flight, aircraft)


def delete_flight(flight_id: str, session: Session) -> None:
    """Delete a flight, or cancel it when reservations reference it"""
    flight = session.get(Flight, flight_id)
    if not flight:
        raise NotFoundError("Flight not found")

    has_reservations = session.exec(
        select(Reservation.id).where(Reservation.flight_id == flight_id)
    ).first()
    try:
        if has_reservations is not None:
            flight.status = FlightStatus.CANCELLED.value
            session.add(flight)
            logger.info(f"Flight {flight_id} has reservations, marked Cancelled")
        else:
            session.exec(delete(Seat).where(Seat.flight_id == flight_id))
            session.delete(flight)
            logger.info(f"Flight {flight_id} deleted")
        session.commit()
    except Exception:
        session.rollback()
        raise


def reserved_seat_ids(flight_id: str, session: Session) -> set[int]:
    query = select(Reservation.seat_id).where(
        (Reservation.flight_id == flight_id)
        & (Reservation.status != ReservationStatus.CANCELLED.value)
    )
    return set(session.exec(query).all())


def list_flight_seats(flight_id: str, session: Session) -> list[SeatResponse]:
    if not session.get(Flight, flight_id):
        raise NotFoundError("Flight not found")

    taken = reserved_seat_ids(flight_id, session)
    seats = session.exec(select(Seat).where(Seat.flight_id == flight_id).order_by(Seat.id)).all()
    return [
        SeatResponse(
            seatID=seat.id,
            seatNumber=seat.seat_number,
            seatClass=seat.seat_class,
            isAvailable=seat.id not in taken,
            priceMultiplier=seat.price_multiplier,
            flightID=seat.flight_id,
            aircraftID=seat.aircraft_id,
        )
        for seat in seats
    ]


def generate_flight_seats(flight_id: str, session: Session) -> int:
    flight = session.get(Flight, flight_id)
    if not flight:
        raise NotFoundError("Flight not found")
    if flight_has_seats(flight_id, session):
        raise ConflictError("Seats already exist for this flight")
    aircraft = session.get(Aircraft, flight.aircraft_id)
    if not aircraft:
        raise NotFoundError("Aircraft not found")

    try:
        created = create_seats_for_flight(flight_id, aircraft, session)
        flight.available_seats = created
        session.add(flight)
        session.commit()
    except Exception:
        session.rollback()
        raise
    return created


def clear_all_seats(session: Session) -> int:
    """Remove every seat map; refused while any reservation points at a seat"""
    if session.exec(select(Reservation.id)).first() is not None:
        raise InvalidStateError("Cannot clear seats while reservations exist")

    try:
        cleared = session.exec(delete(Seat)).rowcount
        session.exec(update(Flight).values(available_seats=0))
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.warning(f"Cleared {cleared} seats from all flights")
    return cleared
