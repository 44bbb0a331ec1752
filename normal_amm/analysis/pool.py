"""Curve construction from on-chain pool data.

Pool reserves and strike arrive as WAD integers and the volatility in basis
points; the curve model takes plain floats. Scaling stops here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from normal_amm.core.errors import DomainError
from normal_amm.core.fixed_point import basis_points_to_float, wad_to_float
from normal_amm.core.result import Err, Ok
from normal_amm.solver.curve import CurveState


@final
@dataclass(frozen=True, slots=True)
class PoolParameters:
    """Raw pool state as read from the executor."""

    virtual_x_wad: int
    virtual_y_wad: int
    strike_price_wad: int
    volatility_basis_points: int
    duration_seconds: int


def curve_from_pool(pool: PoolParameters) -> Ok[CurveState] | Err[DomainError]:
    """Descale a pool into a CurveState with invariant 0."""
    match CurveState.create(
        reserve_x_per_unit_liquidity=wad_to_float(pool.virtual_x_wad),
        reserve_y_per_unit_liquidity=wad_to_float(pool.virtual_y_wad),
        strike_price=wad_to_float(pool.strike_price_wad),
        volatility=basis_points_to_float(pool.volatility_basis_points),
        time_remaining_seconds=float(pool.duration_seconds),
    ):
        case Err(e):
            return Err(e.with_context("pool.curve_from_pool"))  # type: ignore[arg-type]
        case Ok(state):
            return Ok(state)
