from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from booktrack.models.user import User


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    """Exact match; request schemas hand over emails already lower-cased."""
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def get_user_by_id(user_id: int, db: Session) -> Optional[User]:
    return db.get(User, user_id)
