from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..db.users import UserRole
from .token import validate_jwt


security = HTTPBearer(auto_error=False)


def auth_dependency(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    if credentials is None:
        raise HTTPException(401, "Not authenticated")
    return validate_jwt(credentials.credentials)


def admin_dependency(user_info: dict = Depends(auth_dependency)) -> dict:
    if user_info.get("role") != UserRole.ADMIN.value:
        raise HTTPException(403, "Administrator role required")
    return user_info
