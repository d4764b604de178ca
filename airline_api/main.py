from typing import Annotated, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, OAuth2PasswordRequestForm
from loguru import logger
from sqlmodel import Session, select

from . import config
from .auth.dependencies import auth_dependency, security
from .auth.token import get_user_from_token, token_is_valid
from .db.api_responses import AuthResponse, TokenValidationRequest, TokenValidationResponse
from .db.seed import seed_database
from .db.session import create_db_and_tables, engine, SessionDep
from .db.users import OpenUser, RegisterRequest, User
from .errors import AirlineError, register_exception_handlers
from .log import setup_logging
from .routes import admin, customers, flights, reservations
from .services.account import authenticate, get_user, open_user, register_customer


@asynccontextmanager
async def lifespan(application: FastAPI):
    del application
    setup_logging()
    create_db_and_tables()
    if config.seed_data:
        with Session(engine) as session:
            seed_database(session)
    logger.info("Airline reservation API started")
    yield


app = FastAPI(title="Airline Reservation API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(flights.router)
app.include_router(reservations.router)
app.include_router(customers.router)
app.include_router(admin.router)


@app.post("/api/auth/login", response_model=AuthResponse)
def login_for_access_token_endpoint(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: SessionDep,
):
    """
    Authenticate user by email and return access token
    """
    response = authenticate(form_data.username, form_data.password, db)
    if response is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return response


@app.post(
    "/api/auth/register",
    status_code=201,
    summary="Create a new customer account",
    responses={
        201: {"description": "Customer created successfully"},
        400: {"description": "Invalid input or email already exists"},
    },
)
def register_endpoint(register_request: RegisterRequest, db: SessionDep) -> AuthResponse:
    """
    Create a customer account and return an access token for it
    """
    try:
        return register_customer(register_request, db)
    except AirlineError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


@app.get("/api/auth/me", status_code=200)
def get_current_user_endpoint(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: SessionDep,
) -> OpenUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None:
        raise HTTPException(401, "Not authenticated")
    email = get_user_from_token(token.credentials)
    if email is None:
        raise credentials_exception

    user = db.exec(select(User).where(User.email == email)).first()
    if user is None or not user.is_active:
        raise credentials_exception
    return open_user(user, db)


@app.get("/api/auth/user/{user_id}", status_code=200)
def get_user_endpoint(
    user_id: int, db: SessionDep, user_info: dict = Depends(auth_dependency)
) -> OpenUser:
    del user_info
    return get_user(user_id, db)


@app.post("/api/auth/validate-token", status_code=200)
def validate_token_endpoint(request: TokenValidationRequest) -> TokenValidationResponse:
    return TokenValidationResponse(isValid=token_is_valid(request.token))
