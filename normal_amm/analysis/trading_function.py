"""Trading-function error analysis: float model versus a reference evaluator.

Sweeps x across (0, 1), asks both the float model and the reference for
y given x, and records the difference reference - model at each point. The
result is plain data; writing it to disk or plotting it is left to the
caller.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import final

from normal_amm.analysis.protocols import ReferenceCurve
from normal_amm.core.errors import (
    DomainError,
    FieldViolation,
    ReferenceEvaluationError,
    domain_err,
)
from normal_amm.core.result import Err, Ok
from normal_amm.solver.curve import SECONDS_PER_YEAR, CurveState, solve_y_given_x

logger = logging.getLogger(__name__)

ANALYSIS_STEP: float = 0.001

# Known-good regression state: invariant(CANONICAL_CURVE) = 7.427392034742297e-14.
CANONICAL_CURVE = CurveState(
    reserve_x_per_unit_liquidity=0.308537538726,
    reserve_y_per_unit_liquidity=0.308537538726,
    strike_price=1.0,
    volatility=1.0,
    time_remaining_seconds=SECONDS_PER_YEAR,
    invariant=0.0,
)


@final
@dataclass(frozen=True, slots=True)
class DataPoint:
    """One sweep point."""

    x: float
    y_reference: float
    y_model: float

    @property
    def error(self) -> float:
        return self.y_reference - self.y_model


@final
@dataclass(frozen=True, slots=True)
class TradingFunctionAnalysis:
    """Every sweep point, in increasing x."""

    state: CurveState
    step: float
    points: tuple[DataPoint, ...]

    def xs(self) -> tuple[float, ...]:
        return tuple(p.x for p in self.points)

    def errors(self) -> tuple[float, ...]:
        return tuple(p.error for p in self.points)

    def max_abs_error(self) -> float:
        return max((abs(e) for e in self.errors()), default=0.0)

    def to_rows(self) -> list[dict[str, float]]:
        """Flat records for an exporter (CSV, dataframe, JSON)."""
        return [
            {"x": p.x, "y_reference": p.y_reference, "y_model": p.y_model, "error": p.error}
            for p in self.points
        ]


def analyze_trading_function(
    reference: ReferenceCurve,
    state: CurveState = CANONICAL_CURVE,
    step: float = ANALYSIS_STEP,
) -> Ok[TradingFunctionAnalysis] | Err[DomainError | ReferenceEvaluationError]:
    """Diff y-given-x between the float model and ``reference``.

    x runs over step, 2*step, ... while x < 1; x = 0 is skipped because it
    is outside the domain of both implementations. Stops at the first Err
    from either side.
    """
    source = "trading_function.analyze_trading_function"
    if not (math.isfinite(step) and 0.0 < step < 1.0):
        return Err(domain_err(source, FieldViolation("step", "must be in (0, 1)", repr(step))))

    started = time.perf_counter()
    points: list[DataPoint] = []
    i = 1
    x = step
    while x < 1.0:
        probe = dataclasses.replace(state, reserve_x_per_unit_liquidity=x)
        match solve_y_given_x(probe):
            case Err(e):
                return Err(e.with_context(source))  # type: ignore[arg-type]
            case Ok(y_model):
                pass
        match reference.approximate_y_given_x(probe):
            case Err(msg):
                return Err(ReferenceEvaluationError(
                    message=f"reference failed at x={x!r}: {msg}",
                    code="REFERENCE", source=source, x=x,
                ))
            case Ok(y_reference):
                pass
        points.append(DataPoint(x=x, y_reference=y_reference, y_model=y_model))
        i += 1
        x = i * step

    analysis = TradingFunctionAnalysis(state=state, step=step, points=tuple(points))
    logger.info(
        "trading function analysis: %d points, max |error| %r, took %.3f seconds",
        len(points), analysis.max_abs_error(), time.perf_counter() - started,
    )
    return Ok(analysis)


def coordinate_bounds(series: Sequence[Sequence[float]]) -> Ok[tuple[float, float]] | Err[str]:
    """(min, max) over every value of every series, for sizing plot axes."""
    flat = [v for s in series for v in s]
    if not flat:
        return Err("coordinate_bounds: no values")
    if any(math.isnan(v) for v in flat):
        return Err("coordinate_bounds: NaN in series")
    return Ok((min(flat), max(flat)))
