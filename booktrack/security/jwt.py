from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, Field, ValidationError


class JWTSettings(BaseModel):
    secret_key: str = Field(default="change-me", alias="JWT_SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_exp_minutes: int = Field(default=60 * 24, alias="JWT_ACCESS_TOKEN_EXPIRE_MINUTES")
    issuer: Optional[str] = Field(default="booktrack", alias="JWT_ISSUER")
    audience: Optional[str] = Field(default=None, alias="JWT_AUDIENCE")

    @property
    def access_token_expires_delta(self) -> timedelta:
        return timedelta(minutes=self.access_token_exp_minutes)

    model_config = {"populate_by_name": True}


class TokenPayload(BaseModel):
    subject: str = Field(alias="sub")
    issued_at: Optional[int] = Field(default=None, alias="iat")
    expires_at: int = Field(alias="exp")
    issuer: Optional[str] = Field(default=None, alias="iss")
    audience: Optional[str] = Field(default=None, alias="aud")

    model_config = {"populate_by_name": True}

    @property
    def user_id(self) -> int:
        return int(self.subject)


class InvalidTokenError(Exception):
    """Raised when a JWT cannot be decoded or validated."""


class TokenExpiredError(InvalidTokenError):
    """Raised when a JWT is well-formed but past its expiry."""


@lru_cache
def get_jwt_settings() -> JWTSettings:
    """Load JWT configuration from environment variables."""
    return JWTSettings(
        secret_key=os.getenv("JWT_SECRET_KEY", "change-me"),
        algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        access_token_exp_minutes=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24))),
        issuer=os.getenv("JWT_ISSUER", "booktrack"),
        audience=os.getenv("JWT_AUDIENCE"),
    )


def create_access_token(*, subject: int | str, settings: JWTSettings) -> str:
    """Generate an encoded access token for a user id."""
    now = datetime.now(timezone.utc)
    expiration = now + settings.access_token_expires_delta
    payload = {
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int(expiration.timestamp()),
    }
    if settings.issuer:
        payload["iss"] = settings.issuer
    if settings.audience:
        payload["aud"] = settings.audience

    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str, settings: JWTSettings) -> TokenPayload:
    """Decode and validate an encoded JWT."""
    decode_kwargs = {
        "algorithms": [settings.algorithm],
        "options": {"verify_aud": settings.audience is not None},
    }
    if settings.audience:
        decode_kwargs["audience"] = settings.audience
    if settings.issuer:
        decode_kwargs["issuer"] = settings.issuer

    try:
        payload = jwt.decode(token, settings.secret_key, **decode_kwargs)
    except ExpiredSignatureError as exc:
        raise TokenExpiredError("Token has expired") from exc
    except JWTError as exc:
        raise InvalidTokenError("Invalid token") from exc

    try:
        token_payload = TokenPayload.model_validate(payload)
    except ValidationError as exc:
        raise InvalidTokenError("Invalid token") from exc
    if not token_payload.subject.isdigit():
        raise InvalidTokenError("Invalid token")
    return token_payload
