from loguru import logger
from sqlmodel import Session, select

from .. import config
from .aircraft import Aircraft, AircraftStatus
from .users import User, UserRole, pwd_context


# Capacities match the configured seat layouts
DEFAULT_FLEET = [
    {"model": "Boeing 737-800", "seating_capacity": 210, "registration": "BT-001"},
    {"model": "Airbus A320", "seating_capacity": 180, "registration": "BT-002"},
]


def database_has_data(session: Session) -> bool:
    """Check if database already contains seed data"""
    if session.exec(select(User)).first():
        return True
    if session.exec(select(Aircraft)).first():
        return True
    return False


def create_admin(session: Session):
    session.add(
        User(
            name="Admin User",
            email=config.admin_email,
            hashed_password=pwd_context.hash(config.admin_password),
            role=UserRole.ADMIN.value,
        )
    )


def create_fleet(session: Session):
    for aircraft in DEFAULT_FLEET:
        session.add(Aircraft(status=AircraftStatus.AVAILABLE.value, **aircraft))


def seed_database(session: Session):
    if database_has_data(session):
        return

    create_admin(session)
    create_fleet(session)
    session.commit()
    logger.info(f"Seeded admin user {config.admin_email} and {len(DEFAULT_FLEET)} aircraft")
