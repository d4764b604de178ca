from typing import Optional

from loguru import logger
from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..auth.token import create_jwt, token_expiry
from ..db.api_responses import AuthResponse
from ..db.reservations import Passenger, Payment, PaymentStatus, Reservation, ReservationStatus
from ..db.users import (
    Customer,
    CustomerResponse,
    CustomerStatistics,
    CustomerSummary,
    CustomerUpdate,
    OpenUser,
    RegisterRequest,
    User,
    UserRole,
)
from ..errors import ConflictError, InvalidStateError, NotFoundError


def get_customer(customer_id: int, session: Session) -> Customer:
    customer = session.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def _customer_for_user(user_id: int, session: Session) -> Optional[Customer]:
    return session.exec(select(Customer).where(Customer.user_id == user_id)).first()


def _auth_response(user: User, customer: Optional[Customer]) -> AuthResponse:
    expiry = token_expiry()
    access_token = create_jwt(
        data={"sub": user.email, "id": user.id, "role": user.role},  # JWT subject identifier
    )
    return AuthResponse(
        access_token=access_token,
        token_type="bearer",
        userID=user.id,
        customerID=customer.id if customer else None,
        name=user.name,
        email=user.email,
        role=user.role,
        tokenExpiry=expiry.replace(tzinfo=None),
    )


def _create_account(request: RegisterRequest, session: Session) -> tuple[User, Customer]:
    """Create a Customer-role user and its customer profile"""
    if session.exec(select(User).where(User.email == request.email)).first():
        raise ConflictError("User with this email already exists")

    user = request.create_hashed()
    try:
        session.add(user)
        session.flush()
        customer = Customer(
            user_id=user.id,
            address=request.address,
            phone_number=request.phoneNumber,
        )
        session.add(customer)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError("User with this email already exists") from e
    except Exception:
        session.rollback()
        raise

    session.refresh(user)
    session.refresh(customer)
    logger.info(f"Registered customer {customer.id} for user {user.id}")
    return user, customer


def register_customer(request: RegisterRequest, session: Session) -> AuthResponse:
    user, customer = _create_account(request, session)
    return _auth_response(user, customer)


def create_customer(request: RegisterRequest, session: Session) -> CustomerResponse:
    user, customer = _create_account(request, session)
    return customer_response(customer, user)


def authenticate(email: str, password: str, session: Session) -> Optional[AuthResponse]:
    user = session.exec(select(User).where(User.email == email)).first()
    if not user or not user.is_active or not user.verify_password(password):
        logger.warning(f"Failed login for {email}")
        return None
    return _auth_response(user, _customer_for_user(user.id, session))


def open_user(user: User, session: Session) -> OpenUser:
    customer = _customer_for_user(user.id, session)
    return OpenUser(
        userID=user.id,
        customerID=customer.id if customer else None,
        name=user.name,
        email=user.email,
        role=user.role,
        isActive=user.is_active,
        createdAt=user.created_at,
    )


def get_user(user_id: int, session: Session) -> OpenUser:
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise NotFoundError("User not found")
    return open_user(user, session)


def list_users(session: Session) -> list[OpenUser]:
    users = session.exec(select(User).order_by(User.id)).all()
    return [open_user(user, session) for user in users]


def update_user_role(user_id: int, role: UserRole, session: Session) -> OpenUser:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    user.role = role.value
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"User {user_id} role set to {user.role}")
    return open_user(user, session)


def customer_response(customer: Customer, user: User) -> CustomerResponse:
    return CustomerResponse(
        customerID=customer.id,
        userID=user.id,
        name=user.name,
        email=user.email,
        address=customer.address,
        phoneNumber=customer.phone_number,
        createdAt=customer.created_at,
        isActive=user.is_active,
    )


def get_customer_profile(customer_id: int, session: Session) -> CustomerResponse:
    customer = get_customer(customer_id, session)
    user = session.get(User, customer.user_id)
    return customer_response(customer, user)


def update_customer(customer_id: int, data: CustomerUpdate, session: Session) -> CustomerResponse:
    customer = get_customer(customer_id, session)
    user = session.get(User, customer.user_id)

    if data.email and data.email != user.email:
        taken = session.exec(
            select(User).where((User.email == data.email) & (User.id != user.id))
        ).first()
        if taken:
            raise ConflictError("Email already exists")
        user.email = data.email
    if data.name:
        user.name = data.name
    if data.address:
        customer.address = data.address
    if data.phoneNumber:
        customer.phone_number = data.phoneNumber
    if data.isActive is not None:
        user.is_active = data.isActive

    session.add(user)
    session.add(customer)
    session.commit()
    session.refresh(user)
    session.refresh(customer)
    return customer_response(customer, user)


def deactivate_customer(customer_id: int, session: Session) -> None:
    customer = get_customer(customer_id, session)
    active = session.exec(
        select(Reservation.id).where(
            (Reservation.customer_id == customer_id)
            & (Reservation.status != ReservationStatus.CANCELLED.value)
        )
    ).first()
    if active is not None:
        raise InvalidStateError("Cannot delete customer with active reservations")

    user = session.get(User, customer.user_id)
    user.is_active = False
    session.add(user)
    session.commit()
    logger.info(f"Customer {customer_id} deactivated")


def _has_reservations(customer_id: int, session: Session) -> bool:
    query = select(Reservation.id).where(Reservation.customer_id == customer_id)
    return session.exec(query).first() is not None


def _remove_customer(customer: Customer, session: Session) -> None:
    """Stage deletion of a customer profile and its passengers"""
    session.exec(delete(Passenger).where(Passenger.customer_id == customer.id))
    session.delete(customer)
    session.flush()


def list_customers(session: Session) -> list[CustomerResponse]:
    rows = session.exec(
        select(Customer, User).join(User, Customer.user_id == User.id).order_by(Customer.id)
    ).all()
    return [customer_response(customer, user) for customer, user in rows]


def delete_customer(customer_id: int, session: Session) -> None:
    """Remove a customer together with its login; refused once it has booked anything"""
    customer = get_customer(customer_id, session)
    if _has_reservations(customer_id, session):
        raise InvalidStateError("Cannot delete customer with existing reservations")

    user = session.get(User, customer.user_id)
    try:
        _remove_customer(customer, session)
        session.delete(user)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info(f"Customer {customer_id} and user {user.id} deleted")


def delete_user(user_id: int, session: Session) -> None:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.role == UserRole.ADMIN.value:
        raise InvalidStateError("Cannot delete admin users")

    customer = _customer_for_user(user_id, session)
    if customer and _has_reservations(customer.id, session):
        raise InvalidStateError("Cannot delete user with existing reservations")

    try:
        if customer:
            _remove_customer(customer, session)
        session.delete(user)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info(f"User {user_id} deleted")


def _count(query, session: Session) -> int:
    return session.exec(select(func.count()).select_from(query.subquery())).one()


def customer_summary(customer_id: int, session: Session) -> CustomerSummary:
    profile = get_customer_profile(customer_id, session)
    reservations = select(Reservation.id).where(Reservation.customer_id == customer_id)
    spent = session.exec(
        select(func.coalesce(func.sum(Payment.amount), 0.0))
        .select_from(Payment)
        .join(Reservation, Payment.reservation_id == Reservation.id)
        .where(
            (Reservation.customer_id == customer_id)
            & (Payment.status == PaymentStatus.COMPLETED.value)
        )
    ).one()
    return CustomerSummary(
        customer=profile,
        statistics=CustomerStatistics(
            totalReservations=_count(reservations, session),
            activeReservations=_count(
                reservations.where(Reservation.status == ReservationStatus.CONFIRMED.value), session
            ),
            totalPassengers=_count(
                select(Passenger.id).where(Passenger.customer_id == customer_id), session
            ),
            totalSpent=round(float(spent), 2),
        ),
    )
