from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from booktrack.models.book import Book, ReadingStatus
from booktrack.schemas.book import BookStatistics, BookSummary, StatusCounts, StatusSummary

logger = logging.getLogger(__name__)

TOP_GENRES = 10
RECENT_BOOKS = 5


def _count_status(status: ReadingStatus):
    return func.count(case((Book.reading_status == status.value, 1)))


def get_status_counts(db: Session, user_id: int) -> StatusSummary:
    """Total and per-status counts from a single conditional aggregation."""
    stmt = select(
        func.count().label("total_books"),
        _count_status(ReadingStatus.WANT_TO_READ).label("want_to_read"),
        _count_status(ReadingStatus.CURRENTLY_READING).label("currently_reading"),
        _count_status(ReadingStatus.FINISHED).label("finished"),
    ).where(Book.user_id == user_id)
    row = db.execute(stmt).one()
    return StatusSummary(
        total_books=row.total_books,
        want_to_read=row.want_to_read,
        currently_reading=row.currently_reading,
        finished=row.finished,
    )


def get_genre_counts(db: Session, user_id: int, limit: int = TOP_GENRES) -> dict[str, int]:
    """Most common genres, largest first. Ties at the cut-off fall in database order."""
    book_count = func.count().label("count")
    stmt = (
        select(Book.genre, book_count)
        .where(Book.user_id == user_id, Book.genre.is_not(None))
        .group_by(Book.genre)
        .order_by(book_count.desc())
        .limit(limit)
    )
    return {genre: count for genre, count in db.execute(stmt)}


def _round_rating(value) -> Optional[float]:
    if value is None:
        return None
    rounded = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(rounded)


def get_rating_summary(db: Session, user_id: int) -> tuple[Optional[float], int]:
    """Average of non-null ratings (``None`` when nothing is rated) and the rated count."""
    stmt = select(func.avg(Book.rating), func.count(Book.rating)).where(Book.user_id == user_id)
    average, rated_books = db.execute(stmt).one()
    return _round_rating(average), rated_books


def get_recent_books(db: Session, user_id: int, limit: int = RECENT_BOOKS) -> list[BookSummary]:
    stmt = (
        select(Book.book_id, Book.title, Book.author, Book.created_at)
        .where(Book.user_id == user_id)
        .order_by(Book.created_at.desc(), Book.book_id.desc())
        .limit(limit)
    )
    return [
        BookSummary(book_id=row.book_id, title=row.title, author=row.author, created_at=row.created_at)
        for row in db.execute(stmt)
    ]


def get_statistics(db: Session, user_id: int) -> BookStatistics:
    """Recompute the collection summary for one user.

    The four aggregates are independent reads; a failure in any of them
    propagates and no partial report is returned.
    """
    logger.debug("Computing statistics for user %s", user_id)
    status_counts = get_status_counts(db, user_id)
    by_genre = get_genre_counts(db, user_id)
    average_rating, rated_books = get_rating_summary(db, user_id)
    recently_added = get_recent_books(db, user_id)

    return BookStatistics(
        total_books=status_counts.total_books,
        by_status=StatusCounts(
            want_to_read=status_counts.want_to_read,
            currently_reading=status_counts.currently_reading,
            finished=status_counts.finished,
        ),
        by_genre=by_genre,
        average_rating=average_rating,
        rated_books=rated_books,
        recently_added=recently_added,
    )
