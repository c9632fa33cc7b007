from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from booktrack.crud.user import get_user_by_email, get_user_by_id
from booktrack.db.session import get_session
from booktrack.models.user import User
from booktrack.schemas.user import (
    AuthOut,
    UserCreate,
    UserOut,
    create_user_model,
    user_to_schema,
)
from booktrack.security.hash import hash_password, verify_password
from booktrack.security.jwt import JWTSettings, create_access_token, get_jwt_settings

logger = logging.getLogger(__name__)


def _email_exists() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"code": "EMAIL_EXISTS", "message": "Email already exists"},
    )


class AuthService:
    """Business logic for registration, login and token verification."""

    def __init__(self, session: Session, settings: JWTSettings) -> None:
        self.session = session
        self.settings = settings

    def register(self, data: UserCreate) -> AuthOut:
        if get_user_by_email(data.email, self.session):
            raise _email_exists()

        user = create_user_model(data, password_hash=hash_password(data.password))
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            # lost a race against a concurrent registration for the same email
            self.session.rollback()
            raise _email_exists() from exc
        self.session.refresh(user)

        logger.info("Registered user %s", user.user_id)
        return self._auth_result(user)

    def login(self, email: str, password: str) -> AuthOut:
        user = get_user_by_email(email, self.session)
        if not user or not verify_password(password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "INVALID_CREDENTIALS", "message": "Invalid email or password"},
            )

        return self._auth_result(user)

    def verify(self, user_id: int) -> UserOut:
        user = get_user_by_id(user_id, self.session)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "USER_NOT_FOUND", "message": "User not found"},
            )
        return user_to_schema(user)

    def _auth_result(self, user: User) -> AuthOut:
        token = create_access_token(subject=user.user_id, settings=self.settings)
        return AuthOut(user_id=user.user_id, email=user.email, full_name=user.full_name, token=token)


def get_auth_service(
    session: Session = Depends(get_session),
    settings: JWTSettings = Depends(get_jwt_settings),
) -> AuthService:
    return AuthService(session=session, settings=settings)
