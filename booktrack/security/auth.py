from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from booktrack.security.jwt import (
    InvalidTokenError,
    JWTSettings,
    TokenExpiredError,
    decode_token,
    get_jwt_settings,
)

BEARER_PREFIX = "Bearer "


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_user_id(
    request: Request,
    settings: JWTSettings = Depends(get_jwt_settings),
) -> int:
    """Resolve the bearer token to the id of the authenticated user."""
    header = request.headers.get("authorization")
    if not header:
        raise _unauthorized("NO_TOKEN", "Authorization token is required")

    if not header.startswith(BEARER_PREFIX):
        raise _unauthorized("INVALID_TOKEN_FORMAT", 'Authorization header must start with "Bearer "')

    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise _unauthorized("NO_TOKEN", "Authorization token is required")

    try:
        payload = decode_token(token, settings)
    except TokenExpiredError as exc:
        raise _unauthorized("TOKEN_EXPIRED", "Token has expired") from exc
    except InvalidTokenError as exc:
        raise _unauthorized("INVALID_TOKEN", "Invalid token") from exc

    return payload.user_id
