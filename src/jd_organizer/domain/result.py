"""Result pattern for single-item operations.

Moves, rollbacks and path resolution report their outcome as a ``Result``:
either a ``Success`` wrapping the value or a ``Failure`` wrapping the typed
``OrganizerError``. Expected branches such as a skipped move are successful
values, so callers are forced to look at both sides.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar('T')  # Success type
E = TypeVar('E', bound=Exception)  # Error type


class Result(ABC, Generic[T, E]):
    """Either a successful value or an error."""

    @abstractmethod
    def is_success(self) -> bool:
        ...

    @abstractmethod
    def is_failure(self) -> bool:
        ...

    @abstractmethod
    def value(self) -> T:
        """Get the success value.

        Raises:
            ValueError: If the result is a failure.
        """
        ...

    @abstractmethod
    def error(self) -> E:
        """Get the error.

        Raises:
            ValueError: If the result is a success.
        """
        ...


@dataclass(frozen=True, slots=True)
class Success(Result[T, E]):
    """Represents a successful operation with a value."""
    _value: T

    def __repr__(self) -> str:
        return f"Success({self._value!r})"

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def value(self) -> T:
        return self._value

    def error(self) -> E:
        raise ValueError("Cannot get error from Success result")


@dataclass(frozen=True, slots=True)
class Failure(Result[T, E]):
    """Represents a failed operation with an error."""
    _error: E

    def __repr__(self) -> str:
        return f"Failure({self._error!r})"

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def value(self) -> T:
        raise ValueError(f"Cannot get value from Failure result: {self._error}")

    def error(self) -> E:
        return self._error


def success(value: T) -> Result[T, Any]:
    """Create a Success result."""
    return Success(value)


def failure(error: E) -> Result[Any, E]:
    """Create a Failure result."""
    return Failure(error)
