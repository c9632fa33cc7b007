from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booktrack.models.user import Base, User


class ReadingStatus(str, enum.Enum):
    WANT_TO_READ = "want_to_read"
    CURRENTLY_READING = "currently_reading"
    FINISHED = "finished"


_STATUS_VALUES = ", ".join(f"'{status.value}'" for status in ReadingStatus)


class Book(Base):
    """SQLAlchemy model representing a title tracked by one user."""

    __tablename__ = "books"
    # reading_status stays a plain string column so unknown filter values match nothing
    __table_args__ = (
        CheckConstraint(f"reading_status IN ({_STATUS_VALUES})", name="ck_books_reading_status"),
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_books_rating"),
    )

    book_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    genre: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    publication_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reading_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ReadingStatus.WANT_TO_READ.value,
    )
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    owner: Mapped[User] = relationship("User", back_populates="books")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Book(book_id={self.book_id!r}, title={self.title!r}, author={self.author!r})"
