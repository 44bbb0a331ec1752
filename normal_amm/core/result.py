"""Tagged outcomes for every solver operation.

Solver functions never raise on bad input and never hand back NaN or an
infinity as an answer. They return Ok(value) or Err(error) and callers
branch with ``match``:

    match invariant(state):
        case Err(e):
            ...
        case Ok(k):
            ...
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, NoReturn, final


@final
@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A computed value."""

    value: T

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the value, staying Ok."""
        return Ok(f(self.value))

    def bind[U, E](self, f: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
        """Feed the value to a step that can itself fail."""
        return f(self.value)

    def map_err(self, f: Callable[[Any], Any]) -> Ok[T]:  # noqa: ARG002
        """Nothing to transform: returns self."""
        return self

    def unwrap(self) -> T:
        """The computed value."""
        return self.value

    def unwrap_or(self, default: T) -> T:  # noqa: ARG002
        """The computed value; the default is unused."""
        return self.value


@final
@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed computation. Never carries a partial result."""

    error: E

    def map(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        """Nothing to transform: returns self."""
        return self

    def bind(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        """``f`` is not called."""
        return self

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        """Transform the error, e.g. to add context."""
        return Err(f(self.error))

    def unwrap(self) -> NoReturn:
        """Raise RuntimeError naming the error."""
        raise RuntimeError(f"Called unwrap on Err: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        """The default, since no value was computed."""
        return default


type Result[T, E] = Ok[T] | Err[E]


def unwrap[T](result: Ok[T] | Err[Any]) -> T:
    """Value of an Ok; RuntimeError on Err. For tests and the CLI edge."""
    match result:
        case Ok(value):
            return value
        case Err(error):
            raise RuntimeError(f"unwrap on Err: {error}")
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")


def sequence[T, E](results: Iterable[Ok[T] | Err[E]]) -> Ok[list[T]] | Err[E]:
    """All values in order, or the first Err met."""
    values: list[T] = []
    for r in results:
        match r:
            case Err():
                return r
            case Ok(value):
                values.append(value)
    return Ok(values)
