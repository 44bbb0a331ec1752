"""Tests for normal_amm.analysis — float model versus reference sweep."""

from __future__ import annotations

import dataclasses
import logging
import math

import pytest

from normal_amm.analysis.protocols import WadRoundTripReference
from normal_amm.analysis.trading_function import (
    ANALYSIS_STEP,
    CANONICAL_CURVE,
    DataPoint,
    TradingFunctionAnalysis,
    analyze_trading_function,
    coordinate_bounds,
)
from normal_amm.core.errors import DomainError, ReferenceEvaluationError
from normal_amm.core.result import Err, Ok, unwrap
from normal_amm.solver.curve import CurveState, invariant, solve_y_given_x


class _ShiftedReference:
    """Model answer plus a constant offset."""

    def __init__(self, offset: float) -> None:
        self.offset = offset

    def approximate_y_given_x(self, state: CurveState) -> Ok[float] | Err[str]:
        return solve_y_given_x(state).map(lambda y: y + self.offset).map_err(lambda e: e.message)


class _FailingReference:
    """Fails for every x above a threshold."""

    def __init__(self, threshold: float) -> None:
        self.threshold = threshold

    def approximate_y_given_x(self, state: CurveState) -> Ok[float] | Err[str]:
        if state.reserve_x_per_unit_liquidity > self.threshold:
            return Err("executor reverted")
        return solve_y_given_x(state).map_err(lambda e: e.message)


# ---------------------------------------------------------------------------
# Canonical state
# ---------------------------------------------------------------------------


class TestCanonicalCurve:
    def test_invariant_regression_value(self) -> None:
        assert unwrap(invariant(CANONICAL_CURVE)) == pytest.approx(7.427392034742297e-14, abs=1e-15)

    def test_default_step(self) -> None:
        assert ANALYSIS_STEP == 0.001


# ---------------------------------------------------------------------------
# analyze_trading_function
# ---------------------------------------------------------------------------


class TestAnalyzeTradingFunction:
    def test_sweep_grid_skips_zero(self) -> None:
        analysis = unwrap(analyze_trading_function(WadRoundTripReference(), step=0.1))
        assert len(analysis.points) == 9
        assert analysis.xs()[0] == 0.1
        assert all(0.0 < x < 1.0 for x in analysis.xs())

    def test_default_sweep(self) -> None:
        analysis = unwrap(analyze_trading_function(WadRoundTripReference()))
        assert len(analysis.points) == 999
        assert analysis.state == CANONICAL_CURVE

    def test_wad_round_trip_error_is_tiny(self) -> None:
        analysis = unwrap(analyze_trading_function(WadRoundTripReference(), step=0.05))
        assert analysis.max_abs_error() <= 1e-17

    def test_error_is_reference_minus_model(self) -> None:
        analysis = unwrap(analyze_trading_function(_ShiftedReference(1e-3), step=0.25))
        for e in analysis.errors():
            assert e == pytest.approx(1e-3)

    def test_uses_given_state(self) -> None:
        state = dataclasses.replace(CANONICAL_CURVE, strike_price=2.0)
        analysis = unwrap(analyze_trading_function(_ShiftedReference(0.0), state, 0.5))
        (point,) = analysis.points
        assert point.y_model == unwrap(solve_y_given_x(dataclasses.replace(state, reserve_x_per_unit_liquidity=0.5)))

    def test_reference_failure(self) -> None:
        match analyze_trading_function(_FailingReference(0.5), step=0.1):
            case Err(ReferenceEvaluationError() as e):
                assert 0.5 < e.x < 0.7
                assert "executor reverted" in e.message
                assert e.code == "REFERENCE"
            case other:
                pytest.fail(f"expected ReferenceEvaluationError, got {other}")

    def test_model_failure_carries_context(self) -> None:
        state = dataclasses.replace(CANONICAL_CURVE, strike_price=0.0)
        match analyze_trading_function(WadRoundTripReference(), state, 0.1):
            case Err(DomainError() as e):
                assert e.message.startswith("trading_function.analyze_trading_function: ")
            case other:
                pytest.fail(f"expected DomainError, got {other}")

    @pytest.mark.parametrize("step", [0.0, 1.0, -0.5, math.nan])
    def test_rejects_step(self, step: float) -> None:
        match analyze_trading_function(WadRoundTripReference(), step=step):
            case Err(DomainError() as e):
                assert e.fields[0].path == "step"
            case other:
                pytest.fail(f"expected DomainError, got {other}")

    def test_logs_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="normal_amm.analysis.trading_function")
        unwrap(analyze_trading_function(WadRoundTripReference(), step=0.25))
        assert "trading function analysis: 3 points" in caplog.text


class TestTradingFunctionAnalysis:
    def test_rows(self) -> None:
        analysis = TradingFunctionAnalysis(
            state=CANONICAL_CURVE, step=0.5,
            points=(DataPoint(x=0.5, y_reference=0.2, y_model=0.25),),
        )
        (row,) = analysis.to_rows()
        assert row["x"] == 0.5
        assert row["error"] == pytest.approx(-0.05)
        assert analysis.max_abs_error() == pytest.approx(0.05)

    def test_empty_max_error(self) -> None:
        analysis = TradingFunctionAnalysis(state=CANONICAL_CURVE, step=0.5, points=())
        assert analysis.max_abs_error() == 0.0


class TestCoordinateBounds:
    def test_spans_all_series(self) -> None:
        assert coordinate_bounds([[1.0, 2.0], [0.5, 3.0]]) == Ok((0.5, 3.0))

    def test_empty(self) -> None:
        assert isinstance(coordinate_bounds([[], []]), Err)

    def test_nan(self) -> None:
        assert isinstance(coordinate_bounds([[1.0, math.nan]]), Err)
