from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from booktrack.models.book import ReadingStatus

MIN_PUBLICATION_YEAR = 1000


def max_publication_year() -> int:
    return date.today().year + 1


class BookBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    genre: Optional[str] = Field(default=None, max_length=100)
    publication_year: Optional[int] = Field(default=None, alias="publicationYear")
    reading_status: ReadingStatus = Field(alias="readingStatus")
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = Field(default=None, max_length=2000)

    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)

    @field_validator("genre", "publication_year", "rating", "notes", mode="before")
    @classmethod
    def blank_as_missing(cls, value: object) -> object:
        # empty strings and zero mean "not provided" for optional fields
        if isinstance(value, str) and not value.strip():
            return None
        if value == 0 and not isinstance(value, bool):
            return None
        return value

    @field_validator("publication_year")
    @classmethod
    def validate_publication_year(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return value
        upper = max_publication_year()
        if not MIN_PUBLICATION_YEAR <= value <= upper:
            raise ValueError(f"Publication year must be between {MIN_PUBLICATION_YEAR} and {upper}")
        return value

    def to_row(self) -> dict:
        """Column values for an insert or full replacement."""
        data = self.model_dump()
        data["reading_status"] = self.reading_status.value
        return data


class BookCreate(BookBase):
    pass


class BookUpdate(BookBase):
    """PUT replaces every editable field."""


class BookOut(BaseModel):
    book_id: int = Field(alias="bookId")
    user_id: int = Field(alias="userId")
    title: str
    author: str
    genre: Optional[str] = None
    publication_year: Optional[int] = Field(default=None, alias="publicationYear")
    reading_status: ReadingStatus = Field(alias="readingStatus")
    rating: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class BookSummary(BaseModel):
    book_id: int = Field(alias="bookId")
    title: str
    author: str
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class Pagination(BaseModel):
    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    total_books: int = Field(alias="totalBooks")
    books_per_page: int = Field(alias="booksPerPage")

    model_config = ConfigDict(populate_by_name=True)


class StatusCounts(BaseModel):
    want_to_read: int = Field(alias="wantToRead")
    currently_reading: int = Field(alias="currentlyReading")
    finished: int

    model_config = ConfigDict(populate_by_name=True)


class StatusSummary(StatusCounts):
    """Status counts flattened next to the total, as embedded in the book list."""

    total_books: int = Field(alias="totalBooks")


class BookStatistics(BaseModel):
    total_books: int = Field(alias="totalBooks")
    by_status: StatusCounts = Field(alias="byStatus")
    by_genre: dict[str, int] = Field(alias="byGenre")
    average_rating: Optional[float] = Field(alias="averageRating")
    rated_books: int = Field(alias="ratedBooks")
    recently_added: list[BookSummary] = Field(alias="recentlyAdded")

    model_config = ConfigDict(populate_by_name=True)


class BookListOut(BaseModel):
    books: list[BookOut]
    pagination: Pagination
    statistics: StatusSummary
