import os
from typing import NamedTuple


database_url = os.environ.get("DATABASE_URL", "sqlite:///./airline.db")

algo = os.environ.get("ALGORITHM", "HS256")
secret_key = os.environ.get("SECRET_KEY", "change-me-in-production")
token_lifetime = int(os.environ.get("TOKEN_LIFETIME", "1440"))

log_level = os.environ.get("LOG_LEVEL", "INFO")
log_file = os.environ.get("LOG_FILE")

seed_data = os.environ.get("SEED_DATA", "1").lower() in ("1", "true", "yes")
admin_email = os.environ.get("ADMIN_EMAIL", "admin@btair.com")
admin_password = os.environ.get("ADMIN_PASSWORD", "admin123")

cors_origins = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


class SeatLayout(NamedTuple):
    """Number of rows per cabin class, in cabin order."""

    first_rows: int
    business_rows: int
    economy_rows: int

    @property
    def total_rows(self) -> int:
        return self.first_rows + self.business_rows + self.economy_rows


SEAT_LETTERS = ("A", "B", "C", "D", "E", "F")

PRICE_MULTIPLIERS = {
    "First": 3.0,
    "Business": 2.0,
    "Economy": 1.0,
}

# Keyed by aircraft model.
SEAT_LAYOUTS = {
    "Boeing 737-800": SeatLayout(first_rows=3, business_rows=5, economy_rows=27),
    "Airbus A320": SeatLayout(first_rows=2, business_rows=4, economy_rows=24),
}

DEFAULT_SEAT_LAYOUT = SeatLayout(first_rows=2, business_rows=4, economy_rows=24)
