from typing import Optional

from loguru import logger
from sqlmodel import Session, select

from ..db.aircraft import (
    Aircraft,
    AircraftCreate,
    AircraftResponse,
    AircraftStatus,
    AircraftUpdate,
    aircraft_response,
)
from ..db.flights import Flight
from ..errors import InvalidStateError, NotFoundError, RequestInvalidError
from ..utils import to_naive_utc
from .seats import layout_capacity


def list_aircraft(session: Session) -> list[AircraftResponse]:
    return [aircraft_response(a) for a in session.exec(select(Aircraft).order_by(Aircraft.id)).all()]


def get_aircraft(aircraft_id: int, session: Session) -> AircraftResponse:
    aircraft = session.get(Aircraft, aircraft_id)
    if not aircraft:
        raise NotFoundError("Aircraft not found")
    return aircraft_response(aircraft)


def _seating_capacity(model: str, requested: Optional[int]) -> int:
    """Capacity always equals the number of seats the model's layout generates"""
    capacity = layout_capacity(model)
    if requested is not None and requested != capacity:
        raise RequestInvalidError(
            f"Seating capacity of {model} must be {capacity} to match its seat layout"
        )
    return capacity


def _has_flights(aircraft_id: int, session: Session) -> bool:
    return session.exec(select(Flight.id).where(Flight.aircraft_id == aircraft_id)).first() is not None


def create_aircraft(data: AircraftCreate, session: Session) -> AircraftResponse:
    aircraft = Aircraft(
        model=data.model,
        seating_capacity=_seating_capacity(data.model, data.seatingCapacity),
        registration=data.registration,
        status=AircraftStatus.AVAILABLE.value,
    )
    session.add(aircraft)
    session.commit()
    session.refresh(aircraft)
    logger.info(f"Aircraft {aircraft.id} ({aircraft.model}) registered")
    return aircraft_response(aircraft)


def update_aircraft(aircraft_id: int, data: AircraftUpdate, session: Session) -> AircraftResponse:
    aircraft = session.get(Aircraft, aircraft_id)
    if not aircraft:
        raise NotFoundError("Aircraft not found")

    model = data.model or aircraft.model
    if data.seatingCapacity is not None or model != aircraft.model:
        capacity = _seating_capacity(model, data.seatingCapacity)
        # Existing seat maps were cut from the old layout
        if capacity != aircraft.seating_capacity and _has_flights(aircraft_id, session):
            raise InvalidStateError("Cannot change the seat layout of an aircraft with flights")
        aircraft.model = model
        aircraft.seating_capacity = capacity
    if data.status is not None:
        aircraft.status = data.status.value
    if data.registration:
        aircraft.registration = data.registration
    if data.lastMaintenance is not None:
        aircraft.last_maintenance = to_naive_utc(data.lastMaintenance)
    if data.nextMaintenance is not None:
        aircraft.next_maintenance = to_naive_utc(data.nextMaintenance)

    session.add(aircraft)
    session.commit()
    session.refresh(aircraft)
    return aircraft_response(aircraft)


def delete_aircraft(aircraft_id: int, session: Session) -> None:
    aircraft = session.get(Aircraft, aircraft_id)
    if not aircraft:
        raise NotFoundError("Aircraft not found")

    # Cancelled flights keep their aircraft reference
    if _has_flights(aircraft_id, session):
        raise InvalidStateError("Cannot delete aircraft that flights still reference")

    try:
        session.delete(aircraft)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info(f"Aircraft {aircraft_id} deleted")
