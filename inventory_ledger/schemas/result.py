from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ActionResult(BaseModel, Generic[T]):
    """Uniform response envelope: ``data`` on success, ``error``/``code`` otherwise."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[str] = None
    details: Optional[List[Any]] = None

    @classmethod
    def ok(cls, data: T) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: Optional[str] = None, details=None) -> "ActionResult[T]":
        return cls(success=False, error=error, code=code, details=details)
