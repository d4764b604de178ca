import datetime as dt
from typing import Optional

from sqlmodel import SQLModel


class Token(SQLModel):
    access_token: str
    token_type: str


# - POST api/auth/login, POST api/auth/register
# response
# {
#   "access_token": "eyJhbGciOi...",
#   "token_type": "bearer",
#   "userID": 2,
#   "customerID": 1,
#   "name": "Jane Doe",
#   "email": "jane@example.com",
#   "role": "Customer",
#   "tokenExpiry": "2030-01-02T10:00:00"
# }
class AuthResponse(Token):
    userID: int
    customerID: Optional[int] = None
    name: str
    email: str
    role: str
    tokenExpiry: dt.datetime


class TokenValidationRequest(SQLModel):
    token: str


class TokenValidationResponse(SQLModel):
    isValid: bool
