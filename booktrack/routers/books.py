from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from booktrack.crud.book import BookListParams
from booktrack.schemas.book import BookCreate, BookListOut, BookOut, BookStatistics, BookUpdate
from booktrack.schemas.response import ApiResponse
from booktrack.security.auth import require_user_id
from booktrack.services.book_service import BookService, get_book_service

router = APIRouter(prefix="/books", tags=["books"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[BookOut],
)
def create_book(
    payload: BookCreate,
    user_id: int = Depends(require_user_id),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookOut]:
    """Add a book to the caller's collection."""
    book = service.create_book(user_id=user_id, payload=payload)
    return ApiResponse(message="Book added successfully", data=BookOut.model_validate(book))


@router.get(
    "",
    response_model=ApiResponse[BookListOut],
)
def list_books(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    user_id: int = Depends(require_user_id),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookListOut]:
    """Return one page of the caller's books plus their status counts.

    Query values are taken as raw strings; out-of-range or malformed values
    fall back to defaults instead of failing the request.
    """
    params = BookListParams.from_raw(
        status=status_filter,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    result = service.list_books(user_id=user_id, params=params)
    summary = service.status_summary(user_id=user_id)
    return ApiResponse(
        data=BookListOut(
            books=[BookOut.model_validate(book) for book in result.books],
            pagination=result.pagination,
            statistics=summary,
        )
    )


@router.get(
    "/statistics",
    response_model=ApiResponse[BookStatistics],
)
def get_statistics(
    user_id: int = Depends(require_user_id),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookStatistics]:
    """Summarise the caller's collection."""
    return ApiResponse(data=service.get_statistics(user_id=user_id))


@router.get(
    "/{book_id}",
    response_model=ApiResponse[BookOut],
)
def get_book(
    book_id: str,
    user_id: int = Depends(require_user_id),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookOut]:
    book = service.get_owned_book(book_id, user_id)
    return ApiResponse(data=BookOut.model_validate(book))


@router.put(
    "/{book_id}",
    response_model=ApiResponse[BookOut],
)
def update_book(
    book_id: str,
    payload: BookUpdate,
    user_id: int = Depends(require_user_id),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookOut]:
    """Replace every editable field of an owned book."""
    book = service.update_book(book_id, user_id, payload)
    return ApiResponse(message="Book updated successfully", data=BookOut.model_validate(book))


@router.delete(
    "/{book_id}",
    response_model=ApiResponse[None],
)
def delete_book(
    book_id: str,
    user_id: int = Depends(require_user_id),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[None]:
    service.delete_book(book_id, user_id)
    return ApiResponse(message="Book deleted successfully")
