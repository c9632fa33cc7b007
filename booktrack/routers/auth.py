from __future__ import annotations

from fastapi import APIRouter, Depends, status

from booktrack.schemas.response import ApiResponse
from booktrack.schemas.user import AuthOut, UserCreate, UserLogin, UserOut
from booktrack.security.auth import require_user_id
from booktrack.services.auth_service import AuthService, get_auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[AuthOut],
)
def register(payload: UserCreate, service: AuthService = Depends(get_auth_service)) -> ApiResponse[AuthOut]:
    """Register a new account and return a token for it."""
    result = service.register(payload)
    return ApiResponse(message="User registered successfully", data=result)


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse[AuthOut],
)
def login(payload: UserLogin, service: AuthService = Depends(get_auth_service)) -> ApiResponse[AuthOut]:
    """Exchange email and password for a bearer token."""
    result = service.login(email=payload.email, password=payload.password)
    return ApiResponse(message="Login successful", data=result)


@router.get("/verify", response_model=ApiResponse[UserOut])
def verify(
    user_id: int = Depends(require_user_id),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserOut]:
    """Return profile information for the token's user."""
    return ApiResponse(data=service.verify(user_id))
