from datetime import timedelta, datetime, timezone

import jwt
from fastapi import HTTPException
from loguru import logger

from .. import config


# JWT validation
def validate_jwt(token: str) -> dict:
    try:
        payload = jwt.decode(
            token,
            config.secret_key,
            algorithms=[config.algo],
            options={"verify_exp": True},
        )
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        raise HTTPException(status_code=401, detail="Bad Token")


def token_expiry(expires_delta: timedelta | None = None) -> datetime:
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.token_lifetime)
    return datetime.now(timezone.utc) + expires_delta


def create_jwt(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": token_expiry(expires_delta)})
    encoded_jwt = jwt.encode(to_encode, config.secret_key, algorithm=config.algo)
    return encoded_jwt


def get_user_from_token(token: str) -> str:
    payload = validate_jwt(token)
    username: str = payload.get("sub")
    return username


def token_is_valid(token: str) -> bool:
    try:
        validate_jwt(token)
    except HTTPException:
        return False
    return True
