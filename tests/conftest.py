"""Hypothesis strategies and pytest fixtures for the curve model.

Strategies stay inside the region where the float model is well
conditioned: x away from 0 and 1, moderate strike and vol-time.
"""

from __future__ import annotations

from hypothesis import HealthCheck, settings
from hypothesis import strategies as st
from hypothesis.strategies import SearchStrategy

from normal_amm.core.result import unwrap
from normal_amm.solver.curve import SECONDS_PER_YEAR, CurveState, solve_y_given_x

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.load_profile("dev")


# ===================================================================
# PRIMITIVE STRATEGIES
# ===================================================================


def interior_reserves(low: float = 0.05, high: float = 0.95) -> SearchStrategy[float]:
    """x reserves comfortably inside (0, 1)."""
    return st.floats(min_value=low, max_value=high, allow_nan=False, allow_infinity=False)


def strike_prices() -> SearchStrategy[float]:
    return st.floats(min_value=0.5, max_value=2.0, allow_nan=False, allow_infinity=False)


def volatilities() -> SearchStrategy[float]:
    return st.floats(min_value=0.1, max_value=2.0, allow_nan=False, allow_infinity=False)


def durations() -> SearchStrategy[float]:
    """Time remaining in seconds, one day to one year."""
    return st.floats(
        min_value=86_400.0, max_value=SECONDS_PER_YEAR,
        allow_nan=False, allow_infinity=False,
    )


# ===================================================================
# CURVE STRATEGIES
# ===================================================================


@st.composite
def curve_states(draw: st.DrawFn) -> CurveState:
    """A state sitting on its own k = 0 curve."""
    base = CurveState(
        reserve_x_per_unit_liquidity=draw(interior_reserves()),
        reserve_y_per_unit_liquidity=0.0,
        strike_price=draw(strike_prices()),
        volatility=draw(volatilities()),
        time_remaining_seconds=draw(durations()),
    )
    y = unwrap(solve_y_given_x(base))
    return unwrap(CurveState.create(
        reserve_x_per_unit_liquidity=base.reserve_x_per_unit_liquidity,
        reserve_y_per_unit_liquidity=y,
        strike_price=base.strike_price,
        volatility=base.volatility,
        time_remaining_seconds=base.time_remaining_seconds,
    ))
