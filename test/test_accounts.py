import pytest

from airline_api import config
from airline_api.db.aircraft import AircraftCreate, AircraftUpdate
from airline_api.db.users import CustomerUpdate, RegisterRequest, UserRole
from airline_api.db.reservations import PaymentCreate
from airline_api.errors import ConflictError, InvalidStateError, NotFoundError, RequestInvalidError
from airline_api.services.account import (
    authenticate,
    create_customer,
    customer_summary,
    deactivate_customer,
    delete_customer,
    delete_user,
    get_customer_profile,
    list_customers,
    list_users,
    register_customer,
    update_customer,
    update_user_role,
)
from airline_api.services.aircraft import (
    create_aircraft,
    delete_aircraft,
    list_aircraft,
    update_aircraft,
)
from airline_api.services.flight import (
    clear_all_seats,
    delete_flight,
    generate_flight_seats,
    get_flight,
    list_flight_seats,
    list_flights,
)
from airline_api.services.payment import process_payment
from airline_api.services.reservation import cancel_reservation
from init_db import (
    AIRBUS_ID,
    book,
    create_test_customer,
    create_test_flight,
    create_test_passenger,
)


def test_seeded_admin_can_log_in(session):
    response = authenticate(config.admin_email, config.admin_password, session)

    assert response is not None
    assert response.role == "Admin"
    assert response.customerID is None
    assert authenticate(config.admin_email, "wrong-password", session) is None


def test_register_creates_customer_profile(session):
    customer_id = create_test_customer(session)

    profile = get_customer_profile(customer_id, session)
    assert profile.email == "jane@example.com"
    assert profile.address == "1 Main St"
    assert profile.isActive

    response = authenticate("jane@example.com", "secret123", session)
    assert response.customerID == customer_id
    assert response.role == "Customer"


def test_register_duplicate_email(session):
    create_test_customer(session)

    with pytest.raises(ConflictError):
        register_customer(
            RegisterRequest(name="Other", email="jane@example.com", password="secret456"),
            session,
        )


def test_update_customer(session):
    customer_id = create_test_customer(session)
    create_test_customer(session, email="taken@example.com")

    updated = update_customer(
        customer_id, CustomerUpdate(phoneNumber="555-0199", name="Jane Roe"), session
    )
    assert updated.phoneNumber == "555-0199"
    assert updated.name == "Jane Roe"

    with pytest.raises(ConflictError):
        update_customer(customer_id, CustomerUpdate(email="taken@example.com"), session)
    with pytest.raises(NotFoundError):
        update_customer(999, CustomerUpdate(name="Nobody"), session)


def test_deactivate_customer(session):
    customer_id = create_test_customer(session)
    passenger_id = create_test_passenger(session, customer_id)
    flight_id = create_test_flight(session)
    reservation = book(session, customer_id, passenger_id, flight_id, "9A")

    with pytest.raises(InvalidStateError):
        deactivate_customer(customer_id, session)

    cancel_reservation(reservation.reservationID, session)
    deactivate_customer(customer_id, session)

    assert not get_customer_profile(customer_id, session).isActive
    assert authenticate("jane@example.com", "secret123", session) is None


def test_update_user_role(session):
    customer_id = create_test_customer(session)
    user_id = get_customer_profile(customer_id, session).userID

    updated = update_user_role(user_id, UserRole.STAFF, session)

    assert updated.role == "Staff"
    assert {u.email: u.role for u in list_users(session)}["jane@example.com"] == "Staff"
    with pytest.raises(NotFoundError):
        update_user_role(999, UserRole.ADMIN, session)


def test_aircraft_lifecycle(session):
    aircraft = create_aircraft(
        AircraftCreate(model="Embraer 190", registration="BT-003"), session
    )
    assert aircraft.status == "Available"
    assert aircraft.seatingCapacity == 180
    assert [a.model for a in list_aircraft(session)][-1] == "Embraer 190"

    delete_aircraft(aircraft.aircraftID, session)
    assert len(list_aircraft(session)) == 2
    with pytest.raises(NotFoundError):
        delete_aircraft(aircraft.aircraftID, session)


def test_aircraft_with_active_flights_cannot_be_deleted(session):
    create_test_flight(session, aircraft_id=AIRBUS_ID)

    with pytest.raises(InvalidStateError):
        delete_aircraft(AIRBUS_ID, session)
    assert len(list_aircraft(session)) == 2


def test_aircraft_capacity_matches_seat_layout(session):
    with pytest.raises(RequestInvalidError):
        create_aircraft(AircraftCreate(model="Embraer 190", seatingCapacity=100), session)

    aircraft = create_aircraft(
        AircraftCreate(model="Boeing 737-800", seatingCapacity=210, registration="BT-004"), session
    )
    assert aircraft.seatingCapacity == 210

    with pytest.raises(RequestInvalidError):
        update_aircraft(aircraft.aircraftID, AircraftUpdate(seatingCapacity=200), session)

    updated = update_aircraft(aircraft.aircraftID, AircraftUpdate(model="Airbus A320"), session)
    assert updated.seatingCapacity == 180


def test_aircraft_layout_is_fixed_once_flights_exist(session):
    flight_id = create_test_flight(session, aircraft_id=AIRBUS_ID)

    with pytest.raises(InvalidStateError):
        update_aircraft(AIRBUS_ID, AircraftUpdate(model="Boeing 737-800"), session)
    assert get_flight(flight_id, session).availableSeats == 180


def test_aircraft_with_cancelled_flights_cannot_be_deleted(session):
    customer_id = create_test_customer(session)
    passenger_id = create_test_passenger(session, customer_id)
    flight_id = create_test_flight(session, aircraft_id=AIRBUS_ID)
    book(session, customer_id, passenger_id, flight_id, "9A")
    delete_flight(flight_id, session)
    assert get_flight(flight_id, session).status == "Cancelled"

    with pytest.raises(InvalidStateError):
        delete_aircraft(AIRBUS_ID, session)
    assert len(list_aircraft(session)) == 2
    assert [f.flightID for f in list_flights(session)] == [flight_id]


def test_create_and_list_customers(session):
    created = create_customer(
        RegisterRequest(name="Sam Poe", email="sam@example.com", password="secret789"), session
    )
    create_test_customer(session)

    assert created.isActive
    assert created.email == "sam@example.com"
    assert [c.email for c in list_customers(session)] == ["sam@example.com", "jane@example.com"]
    with pytest.raises(ConflictError):
        create_customer(
            RegisterRequest(name="Copy", email="sam@example.com", password="secret789"), session
        )


def test_delete_customer_removes_login(session):
    customer_id = create_test_customer(session)
    create_test_passenger(session, customer_id)

    delete_customer(customer_id, session)

    assert list_customers(session) == []
    assert authenticate("jane@example.com", "secret123", session) is None
    with pytest.raises(NotFoundError):
        delete_customer(customer_id, session)


def test_customer_with_reservations_cannot_be_deleted(session):
    customer_id = create_test_customer(session)
    passenger_id = create_test_passenger(session, customer_id)
    flight_id = create_test_flight(session)
    reservation = book(session, customer_id, passenger_id, flight_id, "9A")
    cancel_reservation(reservation.reservationID, session)

    # Cancelled bookings still keep their tickets and payments
    with pytest.raises(InvalidStateError):
        delete_customer(customer_id, session)
    user_id = get_customer_profile(customer_id, session).userID
    with pytest.raises(InvalidStateError):
        delete_user(user_id, session)
    assert len(list_customers(session)) == 1


def test_delete_user(session):
    customer_id = create_test_customer(session)
    user_id = get_customer_profile(customer_id, session).userID
    admin_id = next(u.userID for u in list_users(session) if u.role == "Admin")

    with pytest.raises(InvalidStateError):
        delete_user(admin_id, session)

    delete_user(user_id, session)
    assert [u.userID for u in list_users(session)] == [admin_id]
    with pytest.raises(NotFoundError):
        get_customer_profile(customer_id, session)
    with pytest.raises(NotFoundError):
        delete_user(user_id, session)


def test_customer_summary(session):
    customer_id = create_test_customer(session)
    passenger_id = create_test_passenger(session, customer_id)
    create_test_passenger(session, customer_id, passport="Y456")
    flight_id = create_test_flight(session, base_price=100.0)
    paid = book(session, customer_id, passenger_id, flight_id, "4A")
    book(session, customer_id, passenger_id, flight_id, "9A")
    refunded = book(session, customer_id, passenger_id, flight_id, "9B")
    for reservation in (paid, refunded):
        process_payment(
            PaymentCreate(reservationID=reservation.reservationID, paymentMethod="Cash"), session
        )
    cancel_reservation(refunded.reservationID, session)

    summary = customer_summary(customer_id, session)

    assert summary.customer.customerID == customer_id
    assert summary.statistics.totalReservations == 3
    assert summary.statistics.activeReservations == 1
    assert summary.statistics.totalPassengers == 2
    assert summary.statistics.totalSpent == 200.0
    with pytest.raises(NotFoundError):
        customer_summary(999, session)


def test_clear_all_seats(session):
    flight_id = create_test_flight(session)

    assert clear_all_seats(session) == 210
    assert list_flight_seats(flight_id, session) == []
    assert get_flight(flight_id, session).availableSeats == 0

    assert generate_flight_seats(flight_id, session) == 210
    assert get_flight(flight_id, session).availableSeats == 210


def test_clear_all_seats_refused_with_reservations(session):
    customer_id = create_test_customer(session)
    passenger_id = create_test_passenger(session, customer_id)
    flight_id = create_test_flight(session)
    book(session, customer_id, passenger_id, flight_id, "9A")

    with pytest.raises(InvalidStateError):
        clear_all_seats(session)
    assert len(list_flight_seats(flight_id, session)) == 210
