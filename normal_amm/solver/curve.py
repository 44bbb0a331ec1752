"""Normal-distribution trading function: invariant and reserve solving.

Reserves are per unit of liquidity. With K the strike price, sigma the
volatility and tau the time remaining (seconds), write
``s = sigma * sqrt(tau / SECONDS_PER_YEAR)`` for the vol-time. Then

    k = Phi^-1(y/K) - Phi^-1(1-x) + s          (invariant)
    y = K * Phi(Phi^-1(1-x) - s + k)           (y given x)
    x = 1 - Phi(Phi^-1(y/K) + s - k)           (x given y)

Domain
------
    - 0 < x < 1, and 1 - x < 1 in float arithmetic
    - 0 < y/K < 1 wherever Phi^-1(y/K) is evaluated
    - K > 0; sigma >= 0; tau >= 0; k finite

Every public function checks the constraints it depends on and returns
Err[DomainError] instead of letting Phi^-1 produce an infinity or NaN.
Probing a different reserve goes through the private scalar functions
below, which take the varying reserve as a plain argument; no state is
copied or mutated.

Functions
---------
    invariant                : CurveState -> Ok[float] | Err
    solve_y_given_x          : CurveState -> Ok[float] | Err
    solve_x_given_y          : CurveState -> Ok[float] | Err
    approximate_other_reserve: CurveState x bool x float -> Ok[float] | Err
    approximate_amount_out   : CurveState x bool x float -> Ok[float] | Err
    coordinates              : CurveState x float -> Ok[CurveCoordinates] | Err
"""

from __future__ import annotations

import math
from collections.abc import Iterator
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
from normal_amm.solver.bisection import (
    DEFAULT_EPSILON,
    DEFAULT_MAX_ITERATIONS,
    BisectionSpec,
    bisect,
)
from normal_amm.solver.normal import std_normal_cdf, std_normal_inverse_cdf

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Seconds per year as used by the contracts.
SECONDS_PER_YEAR: float = 31_556_953.0

# Offset applied to the target invariant in reserve searches: swapping x in
# aims just above the pre-trade invariant, swapping y in just below it.
INVARIANT_NUDGE: float = 1e-18

DEFAULT_COORDINATE_STEP: float = 0.01

type SearchError = DomainError | InvalidBracketError | NonConvergenceError


# ---------------------------------------------------------------------------
# CurveState
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class CurveState:
    """Snapshot of one curve, already descaled to floats."""

    reserve_x_per_unit_liquidity: float  # (0, 1)
    reserve_y_per_unit_liquidity: float  # [0, strike_price]
    strike_price: float  # > 0
    volatility: float  # >= 0, annualized
    time_remaining_seconds: float  # >= 0
    invariant: float = 0.0

    @staticmethod
    def create(
        reserve_x_per_unit_liquidity: float,
        reserve_y_per_unit_liquidity: float,
        strike_price: float,
        volatility: float,
        time_remaining_seconds: float,
        invariant: float = 0.0,
    ) -> Ok[CurveState] | Err[DomainError]:
        """Validate every field and construct.

        y may sit on either end of [0, K] here; operations that evaluate
        Phi^-1(y/K) additionally require it strictly inside.
        """
        state = CurveState(
            reserve_x_per_unit_liquidity=reserve_x_per_unit_liquidity,
            reserve_y_per_unit_liquidity=reserve_y_per_unit_liquidity,
            strike_price=strike_price,
            volatility=volatility,
            time_remaining_seconds=time_remaining_seconds,
            invariant=invariant,
        )
        violations = (
            *_parameter_violations(state),
            *_x_violations(reserve_x_per_unit_liquidity, "state.reserve_x_per_unit_liquidity"),
            *_y_closed_violations(state),
        )
        if violations:
            return Err(domain_err("curve.CurveState.create", *violations))
        return Ok(state)

    @property
    def vol_time(self) -> float:
        """sigma * sqrt(tau / year)."""
        return _vol_time(self.volatility, self.time_remaining_seconds)


# ---------------------------------------------------------------------------
# Domain checks
# ---------------------------------------------------------------------------


def _parameter_violations(state: CurveState) -> tuple[FieldViolation, ...]:
    out: list[FieldViolation] = []
    k = state.strike_price
    if not (math.isfinite(k) and k > 0.0):
        out.append(FieldViolation("state.strike_price", "must be finite and > 0", repr(k)))
    sigma = state.volatility
    if not (math.isfinite(sigma) and sigma >= 0.0):
        out.append(FieldViolation("state.volatility", "must be finite and >= 0", repr(sigma)))
    tau = state.time_remaining_seconds
    if not (math.isfinite(tau) and tau >= 0.0):
        out.append(FieldViolation(
            "state.time_remaining_seconds", "must be finite and >= 0", repr(tau),
        ))
    if not math.isfinite(state.invariant):
        out.append(FieldViolation("state.invariant", "must be finite", repr(state.invariant)))
    return tuple(out)


def _x_violations(x: float, path: str) -> tuple[FieldViolation, ...]:
    # the second test rejects x so small that 1 - x rounds to 1.
    if not (math.isfinite(x) and 0.0 < x < 1.0) or not (1.0 - x < 1.0):
        return (FieldViolation(path, "must be in (0, 1)", repr(x)),)
    return ()


def _y_ratio_violations(y: float, strike: float, path: str) -> tuple[FieldViolation, ...]:
    if not (math.isfinite(strike) and strike > 0.0):
        return ()  # reported by _parameter_violations
    ratio = y / strike if math.isfinite(y) else math.nan
    if not (0.0 < ratio < 1.0):
        return (FieldViolation(path, f"/ strike_price must be in (0, 1) (strike {strike!r})", repr(y)),)
    return ()


def _y_closed_violations(state: CurveState) -> tuple[FieldViolation, ...]:
    y, k = state.reserve_y_per_unit_liquidity, state.strike_price
    if not math.isfinite(y) or y < 0.0 or (math.isfinite(k) and y > k):
        return (FieldViolation(
            "state.reserve_y_per_unit_liquidity", f"must be in [0, {k!r}]", repr(y),
        ),)
    return ()


def _checked(value: float, source: str, path: str) -> Ok[float] | Err[DomainError]:
    """Last line of defence: a valid input must not produce a non-finite output."""
    if not math.isfinite(value):
        return Err(domain_err(source, FieldViolation(path, "evaluated to a non-finite value", repr(value))))
    return Ok(value)


# ---------------------------------------------------------------------------
# Scalar evaluation (no validation, IEEE semantics)
# ---------------------------------------------------------------------------


def _vol_time(volatility: float, time_remaining_seconds: float) -> float:
    return volatility * math.sqrt(time_remaining_seconds / SECONDS_PER_YEAR)


def _invariant_at(x: float, y: float, strike: float, vol_time: float) -> float:
    term_x = std_normal_inverse_cdf(1.0 - x)
    term_y = std_normal_inverse_cdf(y / strike)
    return term_y - term_x + vol_time


def _y_given_x_at(x: float, strike: float, vol_time: float) -> float:
    return strike * std_normal_cdf(std_normal_inverse_cdf(1.0 - x) - vol_time)


# ---------------------------------------------------------------------------
# Trading function
# ---------------------------------------------------------------------------


def invariant(state: CurveState) -> Ok[float] | Err[DomainError]:
    """k = Phi^-1(y/K) - Phi^-1(1-x) + sigma*sqrt(tau)."""
    source = "curve.invariant"
    violations = (
        *_parameter_violations(state),
        *_x_violations(state.reserve_x_per_unit_liquidity, "state.reserve_x_per_unit_liquidity"),
        *_y_ratio_violations(
            state.reserve_y_per_unit_liquidity, state.strike_price,
            "state.reserve_y_per_unit_liquidity",
        ),
    )
    if violations:
        return Err(domain_err(source, *violations))
    k = _invariant_at(
        state.reserve_x_per_unit_liquidity, state.reserve_y_per_unit_liquidity,
        state.strike_price, state.vol_time,
    )
    return _checked(k, source, "invariant")


def solve_y_given_x(state: CurveState) -> Ok[float] | Err[DomainError]:
    """y = K * Phi(Phi^-1(1-x) - sigma*sqrt(tau)), taking k = 0.

    The y reserve of the state is not read.
    """
    source = "curve.solve_y_given_x"
    violations = (
        *_parameter_violations(state),
        *_x_violations(state.reserve_x_per_unit_liquidity, "state.reserve_x_per_unit_liquidity"),
    )
    if violations:
        return Err(domain_err(source, *violations))
    y = _y_given_x_at(state.reserve_x_per_unit_liquidity, state.strike_price, state.vol_time)
    return _checked(y, source, "reserve_y_per_unit_liquidity")


def solve_x_given_y(state: CurveState) -> Ok[float] | Err[DomainError]:
    """x = 1 - Phi(Phi^-1(y/K) + sigma*sqrt(tau) - k), k the state's current invariant."""
    source = "curve.solve_x_given_y"
    match invariant(state):
        case Err(e):
            return Err(e.with_context(source))  # type: ignore[arg-type]
        case Ok(k):
            pass
    term_y = std_normal_inverse_cdf(state.reserve_y_per_unit_liquidity / state.strike_price)
    x = 1.0 - std_normal_cdf(term_y + state.vol_time - k)
    return _checked(x, source, "reserve_x_per_unit_liquidity")


# ---------------------------------------------------------------------------
# Trade approximation
# ---------------------------------------------------------------------------


def approximate_other_reserve(
    state: CurveState,
    sell_asset: bool,
    known_reserve: float,
    *,
    nudge: float = INVARIANT_NUDGE,
    epsilon: float = DEFAULT_EPSILON,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Ok[float] | Err[SearchError]:
    """Solve for the reserve that holds the invariant after a trade.

    sell_asset=True: x moves to ``known_reserve``; search y in [0, K] for
    invariant(x', y) = state.invariant + nudge,
    to within epsilon * K.

    sell_asset=False: y moves to ``known_reserve``; search x in [0, 1] for
    invariant(x, y') = state.invariant - nudge.

    The target is the state's stored invariant (the pre-trade level), not
    one recomputed from its reserves. Bisection failures come back as Err.
    """
    source = "curve.approximate_other_reserve"
    violations = list(_parameter_violations(state))
    if not math.isfinite(nudge):
        violations.append(FieldViolation("nudge", "must be finite", repr(nudge)))
    if sell_asset:
        violations.extend(_x_violations(known_reserve, "known_reserve"))
    else:
        violations.extend(_y_ratio_violations(known_reserve, state.strike_price, "known_reserve"))
    if violations:
        return Err(domain_err(source, *violations))

    strike, vol_time = state.strike_price, state.vol_time
    if sell_asset:
        target = state.invariant + nudge

        def residual(y: float) -> float:
            return _invariant_at(known_reserve, y, strike, vol_time) - target

        # epsilon is relative to the bracket; y lives on [0, K]
        bracket = BisectionSpec(0.0, strike, epsilon * strike, max_iterations)
    else:
        target = state.invariant - nudge

        def residual(x: float) -> float:
            return _invariant_at(x, known_reserve, strike, vol_time) - target

        bracket = BisectionSpec(0.0, 1.0, epsilon, max_iterations)

    match bisect(residual, bracket):
        case Err(e):
            return Err(e.with_context(source))  # type: ignore[arg-type]
        case Ok(found):
            return Ok(found.root)


def approximate_amount_out(
    state: CurveState,
    sell_asset: bool,
    amount_in: float,
    *,
    nudge: float = INVARIANT_NUDGE,
    epsilon: float = DEFAULT_EPSILON,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Ok[float] | Err[SearchError]:
    """Amount of the opposite asset released when ``amount_in`` is swapped in.

    sell_asset=True adds to x and returns y - y'; otherwise adds to y and
    returns x - x'.
    """
    source = "curve.approximate_amount_out"
    violations = [
        *_x_violations(state.reserve_x_per_unit_liquidity, "state.reserve_x_per_unit_liquidity"),
        *_y_closed_violations(state),
    ]
    if not (math.isfinite(amount_in) and amount_in >= 0.0):
        violations.append(FieldViolation("amount_in", "must be finite and >= 0", repr(amount_in)))
    if sell_asset:
        reserve_in = state.reserve_x_per_unit_liquidity + amount_in
        violations.extend(_x_violations(reserve_in, "reserve_x_per_unit_liquidity + amount_in"))
    else:
        reserve_in = state.reserve_y_per_unit_liquidity + amount_in
        violations.extend(_y_ratio_violations(
            reserve_in, state.strike_price, "reserve_y_per_unit_liquidity + amount_in",
        ))
    if violations:
        return Err(domain_err(source, *violations))

    match approximate_other_reserve(
        state, sell_asset, reserve_in,
        nudge=nudge, epsilon=epsilon, max_iterations=max_iterations,
    ):
        case Err(e):
            return Err(e.with_context(source))  # type: ignore[arg-type]
        case Ok(reserve_out):
            pass
    if sell_asset:
        return Ok(state.reserve_y_per_unit_liquidity - reserve_out)
    return Ok(state.reserve_x_per_unit_liquidity - reserve_out)


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class CurveCoordinates:
    """Points (x, y) on the k = 0 curve for x = 0, step, 2*step, ... < 1.

    Lazy and restartable: every iteration recomputes from the stored
    parameters. At x = 0 the closed form gives its limit y = K.
    """

    strike_price: float
    vol_time: float
    step: float

    def __iter__(self) -> Iterator[tuple[float, float]]:
        i = 0
        x = 0.0
        while x < 1.0:
            yield x, _y_given_x_at(x, self.strike_price, self.vol_time)
            i += 1
            x = i * self.step


def coordinates(
    state: CurveState, step: float = DEFAULT_COORDINATE_STEP,
) -> Ok[CurveCoordinates] | Err[DomainError]:
    """Sweep of the trading function for plotting; reserves of the state are ignored."""
    violations = list(_parameter_violations(state))
    if not (math.isfinite(step) and 0.0 < step <= 1.0):
        violations.append(FieldViolation("step", "must be in (0, 1]", repr(step)))
    if violations:
        return Err(domain_err("curve.coordinates", *violations))
    return Ok(CurveCoordinates(
        strike_price=state.strike_price, vol_time=state.vol_time, step=step,
    ))
