from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.dependencies import admin_dependency
from ..db.flights import (
    AvailabilityResponse,
    FlightCreate,
    FlightResponse,
    FlightSearch,
    FlightUpdate,
    SeatResponse,
)
from ..db.session import SessionDep
from ..services.flight import (
    check_window,
    create_flight,
    delete_flight,
    get_flight,
    is_aircraft_available,
    list_flight_seats,
    list_flights,
    search_flights,
    update_flight,
)
from ..utils import to_naive_utc

router = APIRouter(prefix="/api/flights", tags=["flights"])


@router.get("", status_code=200)
def get_flights_endpoint(session: SessionDep) -> list[FlightResponse]:
    return list_flights(session)


@router.post("/search", status_code=200)
def search_flights_endpoint(search: FlightSearch, session: SessionDep) -> list[FlightResponse]:
    return search_flights(search, session)


@router.get("/aircraft/{aircraft_id}/availability", status_code=200)
def aircraft_availability_endpoint(
    aircraft_id: int,
    session: SessionDep,
    departureTime: datetime = Query(...),
    arrivalTime: datetime = Query(...),
    excludeFlightId: Optional[str] = Query(default=None),
) -> AvailabilityResponse:
    check_window(to_naive_utc(departureTime), to_naive_utc(arrivalTime))
    available = is_aircraft_available(
        aircraft_id, departureTime, arrivalTime, session, exclude_flight_id=excludeFlightId
    )
    return AvailabilityResponse(isAvailable=available)


@router.get("/{flight_id}", status_code=200)
def get_flight_endpoint(flight_id: str, session: SessionDep) -> FlightResponse:
    return get_flight(flight_id, session)


@router.get("/{flight_id}/seats", status_code=200)
def get_flight_seats_endpoint(flight_id: str, session: SessionDep) -> list[SeatResponse]:
    return list_flight_seats(flight_id, session)


@router.post("", status_code=201)
def create_flight_endpoint(
    flight_create: FlightCreate,
    session: SessionDep,
    user_info: dict = Depends(admin_dependency),
) -> FlightResponse:
    del user_info
    return create_flight(flight_create, session)


@router.put("/{flight_id}", status_code=200)
def update_flight_endpoint(
    flight_id: str,
    flight_update: FlightUpdate,
    session: SessionDep,
    user_info: dict = Depends(admin_dependency),
) -> FlightResponse:
    del user_info
    return update_flight(flight_id, flight_update, session)


@router.delete("/{flight_id}", status_code=204)
def delete_flight_endpoint(
    flight_id: str, session: SessionDep, user_info: dict = Depends(admin_dependency)
):
    del user_info
    delete_flight(flight_id, session)
