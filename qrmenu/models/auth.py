# qrmenu/models/auth.py
from pydantic import BaseModel
from typing import Optional


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    token: str


class HealthCheck(BaseModel):
    status: str
    message: str
