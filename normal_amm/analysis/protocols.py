"""Reference evaluator protocol for the trading-function analysis.

The reference is normally the fixed-point contract library running in the
simulated executor. It receives the same curve the float model sees and
returns its answer already descaled to a float.
"""

from __future__ import annotations

from typing import Protocol, final

from normal_amm.core.fixed_point import float_to_wad, wad_to_float
from normal_amm.core.result import Err, Ok
from normal_amm.solver.curve import CurveState, solve_y_given_x


class ReferenceCurve(Protocol):
    """Anything that can answer y-given-x independently of the float model."""

    def approximate_y_given_x(self, state: CurveState) -> Ok[float] | Err[str]: ...


@final
class WadRoundTripReference:
    """Float model pushed through WAD scaling and back.

    Used when no executor is attached: the diff against the float model
    then isolates the error the 18-decimal representation alone introduces.
    """

    def approximate_y_given_x(self, state: CurveState) -> Ok[float] | Err[str]:
        match solve_y_given_x(state):
            case Err(e):
                return Err(e.message)
            case Ok(y):
                pass
        match float_to_wad(y):
            case Err(e):
                return Err(e.message)
            case Ok(wad):
                return Ok(wad_to_float(wad))
