"""Command line interface.

    normal-amm invariant   --x 0.3085 --y 0.3085 --strike 1 --volatility 1 --tau 31556953
    normal-amm solve-y     --x 0.5
    normal-amm solve-x     --x 0.5 --y 0.3
    normal-amm amount-out  --x 0.3 --y 0.6 --amount-in 0.1 [--buy]
    normal-amm coordinates --step 0.05
    normal-amm analyze     --step 0.01

Curve parameters not given as flags come from the config file. Results are
printed as JSON on stdout; an Err is printed as JSON on stderr with exit
status 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from normal_amm.analysis.protocols import WadRoundTripReference
from normal_amm.analysis.trading_function import ANALYSIS_STEP, analyze_trading_function
from normal_amm.core.errors import SolverError
from normal_amm.core.result import Err, Ok
from normal_amm.infra.config import CONFIG_FILE, Settings, load_config, setup_logging
from normal_amm.solver.bisection import DEFAULT_EPSILON, DEFAULT_MAX_ITERATIONS
from normal_amm.solver.curve import (
    DEFAULT_COORDINATE_STEP,
    INVARIANT_NUDGE,
    CurveState,
    approximate_amount_out,
    coordinates,
    invariant,
    solve_x_given_y,
    solve_y_given_x,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="normal-amm",
        description="Normal-distribution AMM invariant solver.",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help=f"TOML settings file (default: ./{CONFIG_FILE} if present)",
    )
    parser.add_argument("--log-level", default="WARNING", help="logging level")

    curve = argparse.ArgumentParser(add_help=False)
    curve.add_argument("--x", type=float, default=math.nan, help="x reserve per unit liquidity")
    curve.add_argument("--y", type=float, default=math.nan, help="y reserve per unit liquidity")
    curve.add_argument("--strike", type=float, default=None, help="strike price")
    curve.add_argument("--volatility", type=float, default=None, help="annualized volatility")
    curve.add_argument("--tau", type=float, default=None, help="time remaining in seconds")
    curve.add_argument("--invariant", type=float, default=0.0, help="pre-trade invariant")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("invariant", parents=[curve], help="invariant implied by the reserves")
    sub.add_parser("solve-y", parents=[curve], help="y reserve given x (invariant 0)")
    sub.add_parser("solve-x", parents=[curve], help="x reserve given y")

    amount = sub.add_parser("amount-out", parents=[curve], help="output of a swap")
    amount.add_argument("--amount-in", type=float, required=True)
    amount.add_argument(
        "--buy", action="store_true",
        help="swap y in for x (default: sell x for y)",
    )

    coords = sub.add_parser("coordinates", parents=[curve], help="sweep of the curve")
    coords.add_argument("--step", type=float, default=DEFAULT_COORDINATE_STEP)

    analyze = sub.add_parser(
        "analyze", parents=[curve],
        help="diff the float model against its WAD round trip",
    )
    analyze.add_argument("--step", type=float, default=None)
    return parser


def _load_settings(path: Path | None) -> Ok[Settings | None] | Err[str]:
    if path is None:
        default = Path(CONFIG_FILE)
        if not default.exists():
            return Ok(None)
        path = default
    match load_config(path):
        case Err(e):
            return Err(e)
        case Ok(settings):
            logger.info("loaded settings from %s", path)
            return Ok(settings)


def _curve_from_args(args: argparse.Namespace, settings: Settings | None) -> Ok[CurveState] | Err[str]:
    """Assemble the state; the operation itself validates what it reads."""
    def pick(flag: float | None, from_settings: Callable[[Settings], float]) -> float | None:
        if flag is not None:
            return flag
        if settings is not None:
            return from_settings(settings)
        return None

    strike = pick(args.strike, lambda s: s.economic.pool_strike_price_f)
    volatility = pick(args.volatility, lambda s: s.economic.pool_volatility_f)
    tau = pick(args.tau, lambda s: s.economic.time_remaining_seconds)
    missing = [n for n, v in (("--strike", strike), ("--volatility", volatility), ("--tau", tau)) if v is None]
    if missing:
        return Err(f"no config file; pass {', '.join(missing)}")
    return Ok(CurveState(
        reserve_x_per_unit_liquidity=args.x,
        reserve_y_per_unit_liquidity=args.y,
        strike_price=strike,  # type: ignore[arg-type]
        volatility=volatility,  # type: ignore[arg-type]
        time_remaining_seconds=tau,  # type: ignore[arg-type]
        invariant=args.invariant,
    ))


def _run(args: argparse.Namespace, settings: Settings | None, state: CurveState) -> Ok[Any] | Err[Any]:
    epsilon = settings.analysis.epsilon if settings else DEFAULT_EPSILON
    max_iterations = settings.analysis.max_iterations if settings else DEFAULT_MAX_ITERATIONS
    nudge = settings.analysis.invariant_nudge if settings else INVARIANT_NUDGE

    match args.command:
        case "invariant":
            return invariant(state).map(lambda k: {"invariant": k})
        case "solve-y":
            return solve_y_given_x(state).map(lambda y: {"reserve_y_per_unit_liquidity": y})
        case "solve-x":
            return solve_x_given_y(state).map(lambda x: {"reserve_x_per_unit_liquidity": x})
        case "amount-out":
            return approximate_amount_out(
                state, not args.buy, args.amount_in,
                nudge=nudge, epsilon=epsilon, max_iterations=max_iterations,
            ).map(lambda out: {"amount_out": out})
        case "coordinates":
            return coordinates(state, args.step).map(
                lambda points: {"coordinates": [list(p) for p in points]},
            )
        case "analyze":
            step = args.step if args.step is not None else (
                settings.analysis.step if settings else ANALYSIS_STEP
            )
            # the sweep sets x itself and y is never read
            return analyze_trading_function(WadRoundTripReference(), state, step).map(
                lambda a: {"max_abs_error": a.max_abs_error(), "points": a.to_rows()},
            )
    return Err(f"unknown command {args.command}")


def _emit_error(error: object) -> None:
    payload = error.to_dict() if isinstance(error, SolverError) else {"message": str(error)}
    print(json.dumps(payload), file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level)

    match _load_settings(args.config):
        case Err(e):
            _emit_error(e)
            return 1
        case Ok(settings):
            pass
    match _curve_from_args(args, settings):
        case Err(e):
            _emit_error(e)
            return 1
        case Ok(state):
            pass
    match _run(args, settings, state):
        case Err(e):
            _emit_error(e)
            return 1
        case Ok(payload):
            print(json.dumps(payload))
            return 0
    return 1
