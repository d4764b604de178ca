import pytest
from sqlmodel import select

from airline_api.db.aircraft import Aircraft
from airline_api.db.flights import Seat
from airline_api.errors import ConflictError, NotFoundError
from airline_api.services.flight import generate_flight_seats
from airline_api.services.seats import (
    create_seats_for_flight,
    generate_seat_map,
    layout_capacity,
    layout_for,
)
from init_db import BOEING_ID, create_test_flight


def _by_number(seats):
    return {seat.seat_number: seat for seat in seats}


def test_boeing_seat_map_layout():
    aircraft = Aircraft(id=BOEING_ID, model="Boeing 737-800", seating_capacity=210)
    seats = generate_seat_map("BT0101", aircraft)

    assert len(seats) == 210
    by_number = _by_number(seats)
    assert len(by_number) == 210
    for row in range(1, 36):
        expected = "First" if row <= 3 else "Business" if row <= 8 else "Economy"
        for letter in "ABCDEF":
            assert by_number[f"{row}{letter}"].seat_class == expected
    assert by_number["1A"].price_multiplier == 3.0
    assert by_number["4C"].price_multiplier == 2.0
    assert by_number["35F"].price_multiplier == 1.0
    assert all(seat.flight_id == "BT0101" for seat in seats)
    assert all(seat.aircraft_id == BOEING_ID for seat in seats)


def test_unknown_model_uses_default_layout():
    aircraft = Aircraft(id=7, model="Embraer 190", seating_capacity=180)
    layout = layout_for(aircraft)
    seats = generate_seat_map("BT0200", aircraft)

    assert (layout.first_rows, layout.business_rows, layout.economy_rows) == (2, 4, 24)
    assert len(seats) == 180
    by_number = _by_number(seats)
    assert by_number["2F"].seat_class == "First"
    assert by_number["3A"].seat_class == "Business"
    assert by_number["7A"].seat_class == "Economy"
    assert "31A" not in by_number


def test_seat_map_is_deterministic():
    aircraft = Aircraft(id=2, model="Airbus A320", seating_capacity=180)
    first = [(s.seat_number, s.seat_class) for s in generate_seat_map("BT0001", aircraft)]
    second = [(s.seat_number, s.seat_class) for s in generate_seat_map("BT0001", aircraft)]
    assert first == second


def test_flight_creation_generates_seats(session):
    flight_id = create_test_flight(session)

    seats = session.exec(select(Seat).where(Seat.flight_id == flight_id)).all()
    assert len(seats) == 210


def test_seat_generation_is_idempotent(session):
    flight_id = create_test_flight(session)
    aircraft = session.get(Aircraft, BOEING_ID)

    assert create_seats_for_flight(flight_id, aircraft, session) == 0
    session.commit()
    seats = session.exec(select(Seat).where(Seat.flight_id == flight_id)).all()
    assert len(seats) == 210


def test_explicit_generation_refuses_existing_seat_map(session):
    flight_id = create_test_flight(session)

    with pytest.raises(ConflictError):
        generate_flight_seats(flight_id, session)
    with pytest.raises(NotFoundError):
        generate_flight_seats("BT9999", session)


def test_seeded_fleet_matches_layouts(session):
    for aircraft in session.exec(select(Aircraft)).all():
        assert aircraft.seating_capacity == layout_capacity(aircraft.model)
        assert len(generate_seat_map("BT0001", aircraft)) == aircraft.seating_capacity
    assert layout_capacity("Embraer 190") == 180
