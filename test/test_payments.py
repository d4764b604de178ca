import pytest

from airline_api.db.reservations import PaymentCreate
from airline_api.errors import InvalidStateError, NotFoundError
from airline_api.services.payment import process_payment
from airline_api.services.reservation import (
    cancel_reservation,
    get_reservation,
    list_reservation_payments,
)
from init_db import book, create_test_customer, create_test_flight, create_test_passenger


@pytest.fixture
def reservation(session):
    customer_id = create_test_customer(session)
    passenger_id = create_test_passenger(session, customer_id)
    flight_id = create_test_flight(session, base_price=250.0)
    return book(session, customer_id, passenger_id, flight_id, "6D")


def _pay(reservation_id: int, session, method: str = "Credit Card"):
    return process_payment(
        PaymentCreate(
            reservationID=reservation_id,
            paymentMethod=method,
            cardNumber="4111111111111111",
            cardHolderName="Jane Doe",
        ),
        session,
    )


def test_payment_confirms_reservation(session, reservation):
    payment = _pay(reservation.reservationID, session)

    assert payment.status == "Completed"
    assert payment.amount == 500.0
    assert payment.paymentMethod == "Credit Card"
    assert payment.paymentID.startswith("PAY")
    assert payment.transactionReference.startswith("TXN")
    assert get_reservation(reservation.reservationID, session).status == "Confirmed"
    assert [p.paymentID for p in list_reservation_payments(reservation.reservationID, session)] == [
        payment.paymentID
    ]


def test_reservation_is_paid_once(session, reservation):
    _pay(reservation.reservationID, session)

    with pytest.raises(InvalidStateError):
        _pay(reservation.reservationID, session)
    assert len(list_reservation_payments(reservation.reservationID, session)) == 1


def test_cancelled_reservation_cannot_be_paid(session, reservation):
    cancel_reservation(reservation.reservationID, session)

    with pytest.raises(InvalidStateError):
        _pay(reservation.reservationID, session)
    assert list_reservation_payments(reservation.reservationID, session) == []


def test_unknown_reservation(session):
    with pytest.raises(NotFoundError):
        _pay(4242, session)
    with pytest.raises(NotFoundError):
        list_reservation_payments(4242, session)
