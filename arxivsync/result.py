"""Success/failure container threaded through every fallible operation.

Collaborators never let exceptions escape their public methods. They return
``Ok(value)`` or ``Err(error)`` instead, and callers branch on ``.success``.
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def success(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]


def ok(value: T = None) -> Ok[T]:
    return Ok(value)


def err(error: E) -> Err[E]:
    return Err(error)


def map_result(result: "Result[T, E]", fn: Callable[[T], U]) -> "Result[U, E]":
    """Apply *fn* to the value of a success, pass failures through."""
    if isinstance(result, Ok):
        return Ok(fn(result.value))
    return result


def and_then(
    result: "Result[T, E]", fn: Callable[[T], "Result[U, E]"],
) -> "Result[U, E]":
    """Chain a result-returning step onto a success."""
    if isinstance(result, Ok):
        return fn(result.value)
    return result


def unwrap(result: "Result[T, E]") -> T:
    if isinstance(result, Ok):
        return result.value
    raise ValueError(f"Called unwrap on an error result: {result.error!r}")
