# qrmenu/core/auth.py
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from datetime import datetime, timedelta, timezone
from typing import Dict
import logging
import jwt

from .config import Settings
from .dependencies import get_app_settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

security = HTTPBearer(auto_error=False)


class AuthError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def create_access_token(username: str, settings: Settings) -> str:
    """Issue a signed admin token carrying only the username"""
    expires_at = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
    return jwt.encode({"username": username, "exp": expires_at}, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_token(token: str, settings: Settings) -> Dict:
    """Verify JWT token and return payload."""
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured")
        raise AuthError("Authentication is not configured")

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid admin token: {str(e)}")
        raise AuthError("Invalid authentication token")

    if not payload.get("username"):
        raise AuthError("Invalid token data")
    return payload


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Security(security),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Username of the admin presenting a valid bearer token"""
    if credentials is None or not credentials.credentials:
        raise AuthError("No authentication token provided")

    payload = verify_token(credentials.credentials, settings)
    return payload["username"]
