"""Result<T> pattern — validation rules return this; services turn failures into typed errors."""
from __future__ import annotations
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Result(Generic[T]):
    def __init__(self, is_success: bool, value: Optional[T] = None, error: Optional[str] = None):
        self.is_success = is_success
        self.value = value
        self.error = error

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "Result[T]":
        return cls(is_success=False, error=error)

    def unwrap_or_raise(self, make_error: Callable[[str], Exception]) -> T:
        """Return the value, or raise ``make_error(error)`` on failure."""
        if not self.is_success:
            raise make_error(self.error or "")
        return self.value  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self.is_success:
            return f"Result.ok({self.value!r})"
        return f"Result.fail({self.error!r})"
