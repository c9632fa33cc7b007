from __future__ import annotations

from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from booktrack.crud import book as book_crud
from booktrack.crud import statistics as statistics_crud
from booktrack.crud.book import BookListParams, BookPage
from booktrack.db.session import get_session
from booktrack.models.book import Book
from booktrack.schemas.book import BookCreate, BookStatistics, BookUpdate, StatusSummary


class BookService:
    """Business logic layer for a user's book collection.

    The query and statistics helpers trust the user id they are given;
    ownership of single books is enforced here.
    """

    def __init__(self, db: Session):
        self.db = db

    def _parse_book_id(self, raw_id: str) -> int:
        try:
            return int(raw_id)
        except (TypeError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "INVALID_ID", "message": "Book ID must be a valid number"},
            ) from None

    def get_owned_book(self, raw_id: str, user_id: int, action: str = "access") -> Book:
        book = book_crud.get_book_by_id(self.db, self._parse_book_id(raw_id))
        if not book:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "BOOK_NOT_FOUND", "message": "Book not found"},
            )
        if book.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "FORBIDDEN", "message": f"You do not have permission to {action} this book"},
            )
        return book

    def create_book(self, user_id: int, payload: BookCreate) -> Book:
        try:
            return book_crud.create_book(self.db, user_id, payload.to_row())
        except IntegrityError:
            self.db.rollback()
            raise

    def list_books(self, user_id: int, params: BookListParams) -> BookPage:
        return book_crud.list_books(self.db, user_id, params)

    def status_summary(self, user_id: int) -> StatusSummary:
        return statistics_crud.get_status_counts(self.db, user_id)

    def get_statistics(self, user_id: int) -> BookStatistics:
        return statistics_crud.get_statistics(self.db, user_id)

    def update_book(self, raw_id: str, user_id: int, payload: BookUpdate) -> Book:
        book = self.get_owned_book(raw_id, user_id, action="update")
        try:
            return book_crud.update_book(self.db, book, payload.to_row())
        except IntegrityError:
            self.db.rollback()
            raise

    def delete_book(self, raw_id: str, user_id: int) -> bool:
        book = self.get_owned_book(raw_id, user_id, action="delete")
        return book_crud.delete_book(self.db, book.book_id)


def get_book_service(db: Session = Depends(get_session)) -> BookService:
    return BookService(db)
