from loguru import logger
from sqlmodel import Session, select

from ..config import (
    DEFAULT_SEAT_LAYOUT,
    PRICE_MULTIPLIERS,
    SEAT_LAYOUTS,
    SEAT_LETTERS,
    SeatLayout,
)
from ..db.aircraft import Aircraft
from ..db.flights import Seat, SeatClass


def layout_for(aircraft: Aircraft) -> SeatLayout:
    return SEAT_LAYOUTS.get(aircraft.model, DEFAULT_SEAT_LAYOUT)


def layout_capacity(model: str) -> int:
    """Seats produced by the layout of an aircraft model"""
    return SEAT_LAYOUTS.get(model, DEFAULT_SEAT_LAYOUT).total_rows * len(SEAT_LETTERS)


def _cabin_rows(layout: SeatLayout):
    """Yield (row, seat class) for every row, First cabin first"""
    row = 0
    for seat_class, rows in (
        (SeatClass.FIRST, layout.first_rows),
        (SeatClass.BUSINESS, layout.business_rows),
        (SeatClass.ECONOMY, layout.economy_rows),
    ):
        for _ in range(rows):
            row += 1
            yield row, seat_class


def generate_seat_map(flight_id: str, aircraft: Aircraft) -> list[Seat]:
    """Build (without persisting) the full seat map of a flight"""
    seats = []
    for row, seat_class in _cabin_rows(layout_for(aircraft)):
        for letter in SEAT_LETTERS:
            seats.append(
                Seat(
                    seat_number=f"{row}{letter}",
                    seat_class=seat_class.value,
                    price_multiplier=PRICE_MULTIPLIERS[seat_class.value],
                    flight_id=flight_id,
                    aircraft_id=aircraft.id,
                )
            )
    return seats


def flight_has_seats(flight_id: str, session: Session) -> bool:
    return session.exec(select(Seat.id).where(Seat.flight_id == flight_id)).first() is not None


def create_seats_for_flight(flight_id: str, aircraft: Aircraft, session: Session) -> int:
    """Add the seat map of a flight to the session.

    Returns the number of seats added, 0 when the flight already has seats.
    The caller owns the commit.
    """
    if flight_has_seats(flight_id, session):
        logger.info(f"Seats already exist for flight {flight_id}, skipping generation")
        return 0

    seats = generate_seat_map(flight_id, aircraft)
    session.add_all(seats)
    logger.info(f"Generated {len(seats)} seats for flight {flight_id} ({aircraft.model})")
    return len(seats)
