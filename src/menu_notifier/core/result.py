"""Explicit success/failure return value for use cases."""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from menu_notifier.core.errors import DomainError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a domain error, never both."""
    
    value: Optional[T] = None
    error: Optional[DomainError] = None
    
    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)
    
    @classmethod
    def fail(cls, error: DomainError) -> "Result[T]":
        return cls(error=error)
    
    @property
    def is_ok(self) -> bool:
        return self.error is None
    
    @property
    def is_error(self) -> bool:
        return self.error is not None
    
    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
    
    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        if self.error is not None:
            return Result.fail(self.error)
        return Result.ok(fn(self.value))  # type: ignore[arg-type]
    
    def get_or_else(self, default: T) -> T:
        return default if self.error is not None else self.value  # type: ignore[return-value]
