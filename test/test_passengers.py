import datetime as dt

import pytest

from airline_api.db.reservations import PassengerCreate
from airline_api.errors import ConflictError, NotFoundError
from airline_api.services.passenger import create_passenger, get_customer_passengers
from init_db import create_test_customer, create_test_passenger


def test_create_and_list_passengers(session):
    customer_id = create_test_customer(session)
    passenger = create_passenger(
        customer_id,
        PassengerCreate(
            fullName="John Smith",
            passportNumber="P998877",
            age=40,
            nationality="Irish",
            gender="M",
            dateOfBirth=dt.date(1990, 2, 3),
        ),
        session,
    )
    create_test_passenger(session, customer_id, passport="X123")

    passengers = get_customer_passengers(customer_id, session)

    assert [p.passportNumber for p in passengers] == ["P998877", "X123"]
    assert passengers[0].passengerID == passenger.passengerID
    assert passengers[0].dateOfBirth == dt.date(1990, 2, 3)


def test_duplicate_passport_for_same_customer(session):
    customer_id = create_test_customer(session)
    create_test_passenger(session, customer_id, passport="X123")

    with pytest.raises(ConflictError):
        create_test_passenger(session, customer_id, passport="X123")
    assert len(get_customer_passengers(customer_id, session)) == 1


def test_same_passport_for_different_customers(session):
    first = create_test_customer(session, email="first@example.com")
    second = create_test_customer(session, email="second@example.com")

    create_test_passenger(session, first, passport="X123")
    create_test_passenger(session, second, passport="X123")

    assert len(get_customer_passengers(second, session)) == 1


def test_unknown_customer(session):
    with pytest.raises(NotFoundError):
        create_test_passenger(session, 999)
    with pytest.raises(NotFoundError):
        get_customer_passengers(999, session)
