"""Error values carried by Err; solver functions do not raise.

Each error is a frozen dataclass that pattern-matches on its class,
serializes through to_dict() and compares by value. Errors carry no
timestamps, so evaluating the same input twice gives equal outcomes,
errors included.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final


@dataclass(frozen=True, slots=True)
class SolverError:
    """Base error value; one subclass per failure kind."""

    message: str
    code: str
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> SolverError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "code": self.code,
            "source": self.source,
        }


@final
@dataclass(frozen=True, slots=True)
class FieldViolation:
    """Describes a single field that is outside its domain."""

    path: str  # e.g. "state.reserve_x_per_unit_liquidity"
    constraint: str  # e.g. "must be in (0, 1)"
    actual_value: str  # e.g. "1.0"


@final
@dataclass(frozen=True, slots=True)
class DomainError(SolverError):
    """An input lies outside the domain of the trading function."""

    fields: tuple[FieldViolation, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            **SolverError.to_dict(self),
            "fields": [
                {"path": f.path, "constraint": f.constraint, "actual_value": f.actual_value}
                for f in self.fields
            ],
        }


@final
@dataclass(frozen=True, slots=True)
class InvalidBracketError(SolverError):
    """The search bracket is malformed or does not straddle a sign change."""

    lower: float
    upper: float
    f_lower: float
    f_upper: float

    def to_dict(self) -> dict[str, object]:
        return {
            **SolverError.to_dict(self),
            "lower": self.lower,
            "upper": self.upper,
            "f_lower": repr(self.f_lower),
            "f_upper": repr(self.f_upper),
        }


@final
@dataclass(frozen=True, slots=True)
class NonConvergenceError(SolverError):
    """The iteration budget ran out before the bracket shrank to epsilon."""

    iterations: int
    distance: float
    epsilon: float
    last_estimate: float

    def to_dict(self) -> dict[str, object]:
        return {
            **SolverError.to_dict(self),
            "iterations": self.iterations,
            "distance": self.distance,
            "epsilon": self.epsilon,
            "last_estimate": self.last_estimate,
        }


@final
@dataclass(frozen=True, slots=True)
class ReferenceEvaluationError(SolverError):
    """The external reference evaluator failed at a sweep point."""

    x: float

    def to_dict(self) -> dict[str, object]:
        return {**SolverError.to_dict(self), "x": self.x}


def domain_err(
    source: str, *violations: FieldViolation, message: str = "",
) -> DomainError:
    """Build a DomainError whose message lists every violated field."""
    text = message or "; ".join(f"{v.path} {v.constraint}, got {v.actual_value}" for v in violations)
    return DomainError(message=text, code="DOMAIN", source=source, fields=violations)
