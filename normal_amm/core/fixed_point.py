"""WAD fixed-point conversion at the contract boundary.

The contract executor works in 18-decimal integers. The curve model works
in plain floats and never scales anything itself; conversion happens here,
through Decimal, so a reserve such as 0.308537538726 maps to exactly
308537538726000000 rather than whatever a float multiply rounds it to.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_EVEN, Context, Decimal, localcontext

from normal_amm.core.errors import DomainError, FieldViolation, domain_err
from normal_amm.core.result import Err, Ok

WAD: int = 10**18
BASIS_POINT_DIVISOR: int = 10_000

# 18 fractional digits plus headroom for reserves well above 1e18 WAD
WAD_DECIMAL_CONTEXT = Context(prec=60, rounding=ROUND_HALF_EVEN)

_WAD_D = Decimal(WAD)


def wad_to_float(value: int) -> float:
    """Descale a WAD integer to a float."""
    with localcontext(WAD_DECIMAL_CONTEXT):
        return float(Decimal(value) / _WAD_D)


def float_to_wad(value: float, *, source: str = "fixed_point.float_to_wad") -> Ok[int] | Err[DomainError]:
    """Scale a float to a WAD integer, rounding half-even at the 18th decimal.

    The float's shortest repr is used, so 0.1 becomes 10**17 exactly.
    """
    if not math.isfinite(value):
        return Err(domain_err(source, FieldViolation("value", "must be finite", repr(value))))
    with localcontext(WAD_DECIMAL_CONTEXT):
        scaled = Decimal(repr(value)) * _WAD_D
        return Ok(int(scaled.to_integral_value(rounding=ROUND_HALF_EVEN)))


def basis_points_to_float(bps: int) -> float:
    """1_000 bps -> 0.1."""
    return bps / BASIS_POINT_DIVISOR
