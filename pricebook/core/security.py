# pricebook/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError as PydanticValidationError

from pricebook.core.config import (
    JWT_ACCESS_SECRET_KEY,
    JWT_ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
)
from pricebook.core.exceptions import AuthenticationError

# =====================================================
# PASSWORDS
# =====================================================
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    # profiles created outside sign-up may carry no usable hash
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


# =====================================================
# SESSION TOKENS
# =====================================================
class AccessClaims(BaseModel):
    """Claims carried by a session token; ``sub`` is the profile id."""

    sub: str
    email: str
    type: str
    exp: datetime


def create_access_token(
    user_id: str,
    email: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    issued = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    return jwt.encode(
        {
            "sub": user_id,
            "email": email,
            "type": "access",
            "iat": issued,
            "exp": issued + lifetime,
        },
        JWT_ACCESS_SECRET_KEY,
        algorithm=JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> AccessClaims:
    try:
        raw = jwt.decode(token, JWT_ACCESS_SECRET_KEY, algorithms=[JWT_ALGORITHM])
        claims = AccessClaims.model_validate(raw)
    except (JWTError, PydanticValidationError):
        raise AuthenticationError("Invalid or expired token")

    if claims.type != "access":
        raise AuthenticationError("Invalid token type")

    return claims
