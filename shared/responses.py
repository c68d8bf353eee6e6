from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """The ``{success, message?, data?, error?}`` envelope every route returns."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None


def ok(data=None, message: Optional[str] = None) -> dict:
    return {"success": True, "message": message, "data": data}
