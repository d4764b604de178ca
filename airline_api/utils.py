import datetime as dt
import uuid


def utcnow() -> dt.datetime:
    """Naive UTC timestamp, the form every datetime column is stored in"""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(dt.timezone.utc).replace(tzinfo=None)


def _generate_reference(prefix: str, suffix_length: int) -> str:
    stamp = utcnow().strftime("%y%m%d%H%M%S")
    suffix = uuid.uuid4().hex[:suffix_length].upper()
    return f"{prefix}{stamp}{suffix}"


def generate_ticket_id() -> str:
    return _generate_reference("TKT", 5)


def generate_payment_id() -> str:
    return _generate_reference("PAY", 6)


def generate_transaction_reference() -> str:
    return _generate_reference("TXN", 8)


def generate_flight_id(flight_number: int) -> str:
    return f"BT{flight_number:04d}"
