from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from catalogue.models import TokenClaims

ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=1)

# 🔐 PASSWORD HASHING
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return pwd_context.hash(password[:72])


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password[:72], hashed)


# 🎟️ TOKENS
class TokenResult(BaseModel):
    """Outcome of a token check: ``claims`` on success, ``error`` otherwise."""

    claims: Optional[TokenClaims] = None
    error: Optional[str] = None  # "expired" | "invalid"

    @property
    def ok(self) -> bool:
        return self.claims is not None


def create_access_token(email: str, secret: str, expires_in: timedelta = TOKEN_TTL) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str) -> TokenResult:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "email"]},
        )
    except jwt.ExpiredSignatureError:
        return TokenResult(error="expired")
    except jwt.InvalidTokenError:
        return TokenResult(error="invalid")
    try:
        return TokenResult(claims=TokenClaims(**payload))
    except ValidationError:
        return TokenResult(error="invalid")
