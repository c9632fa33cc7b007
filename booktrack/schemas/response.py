from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope shared by every endpoint."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[list[dict[str, Any]]] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorBody
