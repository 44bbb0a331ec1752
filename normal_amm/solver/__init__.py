"""normal_amm.solver — root finder, normal distribution, curve model."""

from normal_amm.solver.bisection import BisectionResult as BisectionResult
from normal_amm.solver.bisection import BisectionSpec as BisectionSpec
from normal_amm.solver.bisection import bisect as bisect
from normal_amm.solver.bisection import find_root as find_root
from normal_amm.solver.curve import INVARIANT_NUDGE as INVARIANT_NUDGE
from normal_amm.solver.curve import SECONDS_PER_YEAR as SECONDS_PER_YEAR
from normal_amm.solver.curve import CurveCoordinates as CurveCoordinates
from normal_amm.solver.curve import CurveState as CurveState
from normal_amm.solver.curve import approximate_amount_out as approximate_amount_out
from normal_amm.solver.curve import approximate_other_reserve as approximate_other_reserve
from normal_amm.solver.curve import coordinates as coordinates
from normal_amm.solver.curve import invariant as invariant
from normal_amm.solver.curve import solve_x_given_y as solve_x_given_y
from normal_amm.solver.curve import solve_y_given_x as solve_y_given_x
from normal_amm.solver.normal import std_normal_cdf as std_normal_cdf
from normal_amm.solver.normal import std_normal_inverse_cdf as std_normal_inverse_cdf
