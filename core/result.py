"""
Result type for the snapshot fetch and parse boundary.

Network and schema failures are expected outcomes there, so they are returned
as values instead of raised:

    from core.result import Ok, Err, Result

    result = client.fetch_snapshot("800123456")
    if result.is_ok():
        snapshot = result.unwrap()
    else:
        print(result.error.message)

    snapshot = client.fetch_raw("800123456").and_then(parse_snapshot)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Chained success type
F = TypeVar("F")  # Mapped error type


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result holding ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def map_err(self, func: Callable[[Any], F]) -> "Ok[T]":
        return self

    def and_then(self, func: Callable[[T], "Result[U, Any]"]) -> "Result[U, Any]":
        """Chain another Result-returning step, e.g. fetch then parse."""
        return func(self.value)

    @property
    def error(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result holding ``error`` (a message or a FetchError)."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raises ValueError; check is_ok() first."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def map_err(self, func: Callable[[E], F]) -> "Err[F]":
        """Transform the error value.

        Example:
            >>> Err("timeout").map_err(lambda e: f"Enka.Network: {e}")
            Err('Enka.Network: timeout')
        """
        return Err(func(self.error))

    def and_then(self, func: Callable[[Any], "Result[U, E]"]) -> "Err[E]":
        return self

    @property
    def value(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
