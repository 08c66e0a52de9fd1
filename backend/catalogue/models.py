from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# Request bodies: fields are optional so a missing one is a 400, not a 422
class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# Stored user record
class User(BaseModel):
    name: str
    email: str
    password: str
    createdAt: datetime


class TokenClaims(BaseModel):
    email: str
    iat: Optional[int] = None
    exp: Optional[int] = None
