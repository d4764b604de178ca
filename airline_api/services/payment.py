from loguru import logger
from sqlmodel import Session

from ..db.reservations import (
    Payment,
    PaymentCreate,
    PaymentResponse,
    PaymentStatus,
    ReservationStatus,
)
from ..errors import InvalidStateError
from ..utils import generate_payment_id, generate_transaction_reference
from .reservation import lock_reservation, payment_response


def process_payment(request: PaymentCreate, session: Session) -> PaymentResponse:
    """Capture payment for a Pending reservation and confirm it.

    There is no gateway: the capture always succeeds and the transaction
    reference is generated locally. Card fields are ignored.
    """
    try:
        reservation = lock_reservation(request.reservationID, session)
        if reservation.status != ReservationStatus.PENDING.value:
            logger.warning(
                f"Payment refused for reservation {reservation.id}: status is {reservation.status}"
            )
            raise InvalidStateError(
                f"Reservation {reservation.id} is {reservation.status}, expected Pending"
            )

        payment = Payment(
            id=generate_payment_id(),
            reservation_id=reservation.id,
            amount=reservation.price,
            status=PaymentStatus.COMPLETED.value,
            payment_method=request.paymentMethod,
            transaction_reference=generate_transaction_reference(),
        )
        session.add(payment)
        reservation.status = ReservationStatus.CONFIRMED.value
        session.add(reservation)
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(payment)
    logger.info(f"Payment {payment.id} completed, reservation {request.reservationID} confirmed")
    return payment_response(payment)
