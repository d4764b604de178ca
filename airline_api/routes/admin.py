from fastapi import APIRouter, Depends, HTTPException

from ..auth.dependencies import admin_dependency
from ..db.aircraft import AircraftCreate, AircraftResponse, AircraftUpdate
from ..db.flights import SeatClearResponse, SeatGenerationResponse
from ..db.session import SessionDep
from ..db.users import CustomerResponse, OpenUser, RoleUpdate
from ..errors import ConflictError
from ..services.account import (
    delete_customer,
    delete_user,
    list_customers,
    list_users,
    update_user_role,
)
from ..services.aircraft import (
    create_aircraft,
    delete_aircraft,
    get_aircraft,
    list_aircraft,
    update_aircraft,
)
from ..services.flight import clear_all_seats, generate_flight_seats

# Every route here requires an Admin token
router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(admin_dependency)],
)


# Aircraft endpoints
@router.get("/aircraft", status_code=200)
def get_aircraft_list_endpoint(session: SessionDep) -> list[AircraftResponse]:
    return list_aircraft(session)


@router.post("/aircraft", status_code=201)
def create_aircraft_endpoint(aircraft: AircraftCreate, session: SessionDep) -> AircraftResponse:
    return create_aircraft(aircraft, session)


@router.get("/aircraft/{aircraft_id}", status_code=200)
def get_aircraft_endpoint(aircraft_id: int, session: SessionDep) -> AircraftResponse:
    return get_aircraft(aircraft_id, session)


@router.put("/aircraft/{aircraft_id}", status_code=200)
def update_aircraft_endpoint(
    aircraft_id: int, aircraft_update: AircraftUpdate, session: SessionDep
) -> AircraftResponse:
    return update_aircraft(aircraft_id, aircraft_update, session)


@router.delete("/aircraft/{aircraft_id}", status_code=204)
def delete_aircraft_endpoint(aircraft_id: int, session: SessionDep):
    delete_aircraft(aircraft_id, session)


# Seat map endpoints
@router.post("/flights/{flight_id}/seats", status_code=200)
def generate_seats_endpoint(flight_id: str, session: SessionDep) -> SeatGenerationResponse:
    try:
        created = generate_flight_seats(flight_id, session)
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    return SeatGenerationResponse(
        message=f"Seats generated for flight {flight_id}", seatsCreated=created
    )


@router.delete("/seats", status_code=200)
def clear_seats_endpoint(session: SessionDep) -> SeatClearResponse:
    cleared = clear_all_seats(session)
    return SeatClearResponse(message=f"Cleared {cleared} seats from database", seatsCleared=cleared)


# User endpoints
@router.get("/users", status_code=200)
def get_users_endpoint(session: SessionDep) -> list[OpenUser]:
    return list_users(session)


@router.put("/users/{user_id}/role", status_code=200)
def update_user_role_endpoint(
    user_id: int, role_update: RoleUpdate, session: SessionDep
) -> OpenUser:
    return update_user_role(user_id, role_update.role, session)


@router.delete("/users/{user_id}", status_code=204)
def delete_user_endpoint(user_id: int, session: SessionDep):
    """Admins cannot be deleted, nor users whose customer has reservations"""
    delete_user(user_id, session)


# Customer endpoints
@router.get("/customers", status_code=200)
def get_customers_endpoint(session: SessionDep) -> list[CustomerResponse]:
    return list_customers(session)


@router.delete("/customers/{customer_id}", status_code=204)
def delete_customer_endpoint(customer_id: int, session: SessionDep):
    delete_customer(customer_id, session)
