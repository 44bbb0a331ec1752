"""Bisection root finder.

Given a continuous f and a bracket [lower, upper] across which f changes
sign, repeatedly halve the bracket, keeping the half where the sign change
lives, until it is no wider than epsilon or the iteration budget is spent.

Outcomes
--------
Ok[BisectionResult]       bracket shrank to <= epsilon
Err[DomainError]          malformed BisectionSpec (lower >= upper, epsilon <= 0, ...)
Err[InvalidBracketError]  f(lower) and f(upper) share a sign, or f is NaN
Err[NonConvergenceError]  max_iterations reached with the bracket still wide

Infinite endpoint values are accepted: f(lower) = -inf, f(upper) = +inf is
a perfectly good sign change, and the reserve searches rely on it because
the inverse normal CDF diverges at both ends of (0, 1).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import final

from normal_amm.core.errors import (
    DomainError,
    FieldViolation,
    InvalidBracketError,
    NonConvergenceError,
    domain_err,
)
from normal_amm.core.result import Err, Ok

logger = logging.getLogger(__name__)

DEFAULT_EPSILON: float = 0.0001
DEFAULT_MAX_ITERATIONS: int = 1000

_SOURCE = "bisection.bisect"

type BisectionOutcome = (
    Ok[BisectionResult] | Err[DomainError | InvalidBracketError | NonConvergenceError]
)


@final
@dataclass(frozen=True, slots=True)
class BisectionSpec:
    """Parameters of a single root search. Created fresh per search."""

    lower: float
    upper: float
    epsilon: float = DEFAULT_EPSILON
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    @staticmethod
    def create(
        lower: float,
        upper: float,
        epsilon: float = DEFAULT_EPSILON,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> Ok[BisectionSpec] | Err[DomainError]:
        spec = BisectionSpec(
            lower=lower, upper=upper, epsilon=epsilon, max_iterations=max_iterations,
        )
        violations = _spec_violations(spec)
        if violations:
            return Err(domain_err("bisection.BisectionSpec.create", *violations))
        return Ok(spec)


@final
@dataclass(frozen=True, slots=True)
class BisectionResult:
    """A converged search: the last midpoint and how it was reached."""

    root: float
    iterations: int
    distance: float


def _spec_violations(spec: BisectionSpec) -> tuple[FieldViolation, ...]:
    out: list[FieldViolation] = []
    if not math.isfinite(spec.lower):
        out.append(FieldViolation("spec.lower", "must be finite", repr(spec.lower)))
    if not math.isfinite(spec.upper):
        out.append(FieldViolation("spec.upper", "must be finite", repr(spec.upper)))
    if not out and spec.lower >= spec.upper:
        out.append(FieldViolation(
            "spec.upper", f"must be > lower ({spec.lower!r})", repr(spec.upper),
        ))
    if not (math.isfinite(spec.epsilon) and spec.epsilon > 0.0):
        out.append(FieldViolation("spec.epsilon", "must be finite and > 0", repr(spec.epsilon)))
    if spec.max_iterations < 0:
        out.append(FieldViolation("spec.max_iterations", "must be >= 0", repr(spec.max_iterations)))
    return tuple(out)


def _straddles(a: float, b: float) -> bool:
    """True when a * b <= 0, decided on signs so that 0 * inf cannot yield NaN."""
    if a == 0.0 or b == 0.0:
        return True
    return (a < 0.0) != (b < 0.0)


def bisect(f: Callable[[float], float], spec: BisectionSpec) -> BisectionOutcome:
    """Find x in [spec.lower, spec.upper] with f(x) ~= 0.

    The estimate starts at the bracket midpoint, so a bracket that is
    already within epsilon returns its midpoint after zero iterations.
    """
    violations = _spec_violations(spec)
    if violations:
        return Err(domain_err(_SOURCE, *violations))

    lo, hi = spec.lower, spec.upper
    f_lo, f_hi = f(lo), f(hi)
    if math.isnan(f_lo) or math.isnan(f_hi) or not _straddles(f_lo, f_hi):
        return Err(InvalidBracketError(
            message=f"no sign change across [{lo!r}, {hi!r}]: f = ({f_lo!r}, {f_hi!r})",
            code="BRACKET", source=_SOURCE,
            lower=lo, upper=hi, f_lower=f_lo, f_upper=f_hi,
        ))

    root = (lo + hi) / 2.0
    distance = hi - lo
    iterations = 0
    while distance > spec.epsilon and iterations < spec.max_iterations:
        root = (lo + hi) / 2.0
        f_root = f(root)
        if math.isnan(f_root):
            return Err(InvalidBracketError(
                message=f"f({root!r}) is NaN inside [{lo!r}, {hi!r}]",
                code="BRACKET", source=_SOURCE,
                lower=lo, upper=hi, f_lower=f_lo, f_upper=f_root,
            ))
        if _straddles(f_root, f_lo):
            hi = root
        else:
            lo, f_lo = root, f_root
        distance = hi - lo
        iterations += 1

    if distance > spec.epsilon:
        logger.debug(
            "bisection stopped at distance %r above epsilon %r after %d iterations",
            distance, spec.epsilon, iterations,
        )
        return Err(NonConvergenceError(
            message=(
                f"distance {distance!r} still above epsilon {spec.epsilon!r} "
                f"after {iterations} iterations"
            ),
            code="CONVERGENCE", source=_SOURCE,
            iterations=iterations, distance=distance,
            epsilon=spec.epsilon, last_estimate=root,
        ))

    logger.debug(
        "found root %r at distance %r less than epsilon %r in %d iterations",
        root, distance, spec.epsilon, iterations,
    )
    return Ok(BisectionResult(root=root, iterations=iterations, distance=distance))


def find_root(
    f: Callable[[float], float],
    lower: float,
    upper: float,
    epsilon: float = DEFAULT_EPSILON,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Ok[float] | Err[DomainError | InvalidBracketError | NonConvergenceError]:
    """Shorthand for bisect() returning just the root."""
    spec = BisectionSpec(lower=lower, upper=upper, epsilon=epsilon, max_iterations=max_iterations)
    return bisect(f, spec).map(lambda r: r.root)
