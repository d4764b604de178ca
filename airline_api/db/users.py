import datetime as dt
from enum import Enum
from typing import Optional

from passlib.context import CryptContext
from sqlmodel import Column, Field, SQLModel, String, CheckConstraint

from ..utils import utcnow

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, Enum):
    CUSTOMER = "Customer"
    STAFF = "Staff"
    ADMIN = "Admin"


class User(SQLModel, table=True):
    """Database model for User accounts"""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(unique=True, index=True, max_length=150)
    hashed_password: str = Field(min_length=1, description="Hashed password")
    role: str = Field(
        default=UserRole.CUSTOMER.value,
        sa_column=Column(String(20), nullable=False, default=UserRole.CUSTOMER.value),
    )
    is_active: bool = Field(default=True)
    created_at: dt.datetime = Field(default_factory=utcnow)

    __table_args__ = (CheckConstraint("role in ('Customer', 'Staff', 'Admin')"),)

    def verify_password(self, plain_password: str) -> bool:
        """Verify a plain password against the stored hash"""
        return pwd_context.verify(plain_password, self.hashed_password)


class Customer(SQLModel, table=True):
    __tablename__ = "customers"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, unique=True, foreign_key="users.id")
    address: str = Field(max_length=200)
    phone_number: str = Field(max_length=20)
    created_at: dt.datetime = Field(default_factory=utcnow)


class OpenUser(SQLModel):
    userID: int
    customerID: Optional[int] = None
    name: str
    email: str
    role: str
    isActive: bool
    createdAt: dt.datetime


class RegisterRequest(SQLModel):
    """Model for creating a new customer account (includes password)"""

    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=150)
    password: str = Field(min_length=6, description="Plaintext password to be hashed")
    address: str = Field(default="", max_length=200)
    phoneNumber: str = Field(default="", max_length=20)

    def create_hashed(self) -> User:
        """Create a User instance with hashed password"""
        return User(
            name=self.name,
            email=self.email,
            hashed_password=pwd_context.hash(self.password),
            role=UserRole.CUSTOMER.value,
        )


class CustomerResponse(SQLModel):
    customerID: int
    userID: int
    name: str
    email: str
    address: str
    phoneNumber: str
    createdAt: dt.datetime
    isActive: bool


class CustomerStatistics(SQLModel):
    totalReservations: int
    activeReservations: int
    totalPassengers: int
    totalSpent: float


# - GET api/customers/{customer_id}/summary
class CustomerSummary(SQLModel):
    customer: CustomerResponse
    statistics: CustomerStatistics


class CustomerUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=150)
    address: Optional[str] = Field(default=None, max_length=200)
    phoneNumber: Optional[str] = Field(default=None, max_length=20)
    isActive: Optional[bool] = None


class RoleUpdate(SQLModel):
    role: UserRole
