"""
Security Utility - password hashing and JWT signing.

Provides:
- Password hashing with bcrypt (passlib)
- TokenCodec: sign/verify for one kind of JWT (access or refresh)
"""

import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from jose import JWTError, jwt
from passlib.context import CryptContext

from portal.core.config import get_settings

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash. A missing hash never matches."""
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


class TokenError(Exception):
    """Raised when a token fails signature, expiry or type checks."""


class TokenCodec:
    """
    Signs and verifies one kind of JWT.

    Every token carries `sub`, `type`, `iat`, `exp` and a random `jti`, so
    two tokens minted for the same subject in the same second still differ.
    """

    def __init__(self, secret: str, ttl: timedelta, token_type: str, algorithm: str = "HS256"):
        self.secret = secret
        self.ttl = ttl
        self.token_type = token_type
        self.algorithm = algorithm

    def sign(self, subject: str, claims: dict = None) -> str:
        now = datetime.now(timezone.utc)
        to_encode = dict(claims or {})
        to_encode.update({
            "sub": str(subject),
            "type": self.token_type,
            "iat": now,
            "exp": now + self.ttl,
            "jti": uuid.uuid4().hex,
        })
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        """Decode token; raise TokenError on any failure."""
        if not token:
            raise TokenError("Token missing")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise TokenError(str(e)) from e
        if payload.get("type") != self.token_type:
            raise TokenError(f"Expected {self.token_type} token")
        if not payload.get("sub"):
            raise TokenError("Token has no subject")
        return payload


@lru_cache()
def get_access_codec() -> TokenCodec:
    settings = get_settings()
    return TokenCodec(
        secret=settings.access_token_secret,
        ttl=timedelta(minutes=settings.access_token_expire_minutes),
        token_type=ACCESS,
        algorithm=settings.jwt_algorithm,
    )


@lru_cache()
def get_refresh_codec() -> TokenCodec:
    settings = get_settings()
    return TokenCodec(
        secret=settings.refresh_token_secret,
        ttl=timedelta(days=settings.refresh_token_expire_days),
        token_type=REFRESH,
        algorithm=settings.jwt_algorithm,
    )
