"""Book persistence: list query construction, pagination and row-level writes.

``BookListParams.from_raw`` turns untrusted filter input into bounded values
without ever raising, and ``build_book_list_query`` turns those values into a
pair of statements (rows and count) that share one ordered predicate list.
Every client-supplied value reaches the database as a bound parameter; the
only identifiers placed in SQL come from ``SORTABLE_COLUMNS``.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import ColumnElement, Select, bindparam, delete, func, or_, select
from sqlalchemy.orm import Session

from booktrack.models.book import Book
from booktrack.schemas.book import Pagination

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "title": Book.title,
    "author": Book.author,
    "created_at": Book.created_at,
    "publication_year": Book.publication_year,
    "rating": Book.rating,
}
DEFAULT_SORT_COLUMN = "created_at"
DEFAULT_SORT_ORDER = "DESC"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# keeps (page - 1) * limit inside a signed 64-bit OFFSET
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _parse_int(value: Any, default: int) -> int:
    """Leading integer of ``value`` ("10.5" -> 10, "7 books" -> 7), else ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else default


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value if value else None


@dataclass(frozen=True)
class BookListParams:
    """Normalised list filters. Build with ``from_raw`` for client input."""

    status: Optional[str] = None
    search: Optional[str] = None
    sort_by: str = DEFAULT_SORT_COLUMN
    sort_order: str = DEFAULT_SORT_ORDER
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_raw(
        cls,
        *,
        status: Any = None,
        search: Any = None,
        sort_by: Any = None,
        sort_order: Any = None,
        page: Any = None,
        limit: Any = None,
    ) -> "BookListParams":
        sort_column = sort_by if isinstance(sort_by, str) and sort_by in SORTABLE_COLUMNS else DEFAULT_SORT_COLUMN
        direction = "ASC" if isinstance(sort_order, str) and sort_order.upper() == "ASC" else "DESC"
        page_size = min(max(1, _parse_int(limit, DEFAULT_PAGE_SIZE)), MAX_PAGE_SIZE)
        page_number = min(max(1, _parse_int(page, 1)), MAX_PAGE)
        return cls(
            status=_optional_text(status),
            search=_optional_text(search),
            sort_by=sort_column,
            sort_order=direction,
            page=page_number,
            limit=page_size,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class BookListQuery:
    params: BookListParams
    conditions: tuple[ColumnElement[bool], ...]
    rows: Select
    count: Select


@dataclass
class BookPage:
    books: list[Book]
    pagination: Pagination


def build_conditions(user_id: int, params: BookListParams) -> tuple[ColumnElement[bool], ...]:
    """Ordered WHERE predicates; the owner predicate always comes first."""
    conditions: list[ColumnElement[bool]] = [Book.user_id == bindparam("user_id", user_id)]

    # status is compared as-is; an unknown value simply matches no rows
    if params.status:
        conditions.append(Book.reading_status == bindparam("status", params.status))

    if params.search:
        pattern = bindparam("search", f"%{params.search}%")
        conditions.append(or_(Book.title.ilike(pattern), Book.author.ilike(pattern)))

    return tuple(conditions)


def build_book_list_query(user_id: int, params: BookListParams) -> BookListQuery:
    conditions = build_conditions(user_id, params)

    sort_column = SORTABLE_COLUMNS[params.sort_by]
    if params.sort_order == "ASC":
        ordering = (sort_column.asc(), Book.book_id.asc())
    else:
        ordering = (sort_column.desc(), Book.book_id.desc())

    rows = (
        select(Book)
        .where(*conditions)
        .order_by(*ordering)
        .limit(params.limit)
        .offset(params.offset)
    )
    count = select(func.count()).select_from(Book).where(*conditions)
    return BookListQuery(params=params, conditions=conditions, rows=rows, count=count)


def paginate(total_books: int, params: BookListParams) -> Pagination:
    return Pagination(
        current_page=params.page,
        total_pages=math.ceil(total_books / params.limit),
        total_books=total_books,
        books_per_page=params.limit,
    )


def list_books(db: Session, user_id: int, params: BookListParams) -> BookPage:
    """Run the row and count statements for one page of a user's books."""
    query = build_book_list_query(user_id, params)
    logger.debug("Listing books for user %s with %s", user_id, params)

    books = list(db.execute(query.rows).scalars())
    total_books = db.execute(query.count).scalar_one()
    return BookPage(books=books, pagination=paginate(total_books, params))


def get_book_by_id(db: Session, book_id: int) -> Optional[Book]:
    return db.get(Book, book_id)


def create_book(db: Session, user_id: int, values: dict[str, Any]) -> Book:
    book = Book(user_id=user_id, **values)
    db.add(book)
    db.commit()
    db.refresh(book)
    return book


def update_book(db: Session, book: Book, values: dict[str, Any]) -> Book:
    for field, value in values.items():
        setattr(book, field, value)
    book.updated_at = func.now()
    db.commit()
    db.refresh(book)
    return book


def delete_book(db: Session, book_id: int) -> bool:
    result = db.execute(delete(Book).where(Book.book_id == book_id))
    db.commit()
    return result.rowcount > 0
