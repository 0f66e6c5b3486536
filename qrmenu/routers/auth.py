# qrmenu/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
import logging
import secrets

from qrmenu.core.auth import create_access_token, get_current_admin
from qrmenu.core.config import Settings
from qrmenu.core.dependencies import get_app_settings
from qrmenu.models.auth import HealthCheck, LoginRequest, TokenResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, settings: Settings = Depends(get_app_settings)):
    """Exchange the admin username and password for a bearer token"""
    if not credentials.username or not credentials.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password are required"
        )

    if not settings.admin_username or not settings.admin_password or not settings.jwt_secret:
        logger.error("Admin credentials are not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error"
        )

    username_ok = secrets.compare_digest(credentials.username.encode(), settings.admin_username.encode())
    password_ok = secrets.compare_digest(credentials.password.encode(), settings.admin_password.encode())
    if not (username_ok and password_ok):
        logger.warning(f"Failed admin login for user: {credentials.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    logger.info(f"Admin logged in: {credentials.username}")
    return TokenResponse(token=create_access_token(credentials.username, settings))


@router.get("/me")
async def current_admin(username: str = Depends(get_current_admin)):
    """Return the username of the token holder"""
    return {"username": username}


@router.get("/health", response_model=HealthCheck)
async def auth_health():
    """Check if auth service is working"""
    return HealthCheck(
        status="healthy",
        message="Authentication service is running."
    )
