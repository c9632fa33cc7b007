from .book import (
    BookCreate,
    BookListOut,
    BookOut,
    BookStatistics,
    BookSummary,
    BookUpdate,
    Pagination,
    StatusCounts,
    StatusSummary,
)
from .response import ApiResponse, ErrorBody, ErrorResponse
from .user import (
    AuthOut,
    UserCreate,
    UserLogin,
    UserOut,
    create_user_model,
    user_to_schema,
)

__all__ = [
    "ApiResponse",
    "AuthOut",
    "BookCreate",
    "BookListOut",
    "BookOut",
    "BookStatistics",
    "BookSummary",
    "BookUpdate",
    "ErrorBody",
    "ErrorResponse",
    "Pagination",
    "StatusCounts",
    "StatusSummary",
    "UserCreate",
    "UserLogin",
    "UserOut",
    "create_user_model",
    "user_to_schema",
]
