"""Pool economics and analysis settings loaded from a TOML file.

Every key must be present in the file. Environment variables named
``NORMAL_AMM_<SECTION>__<KEY>`` override the file, e.g.
``NORMAL_AMM_ECONOMIC__POOL_VOLATILITY_F=0.2``.
"""

from __future__ import annotations

import logging
import math
import os
import sys
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, final

from normal_amm.core.errors import DomainError
from normal_amm.core.result import Err, Ok
from normal_amm.solver.curve import SECONDS_PER_YEAR, CurveState

CONFIG_FILE: str = "normal_amm.toml"
ENV_PREFIX: str = "NORMAL_AMM_"


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class EconomicConfig:
    """Pool parameters that define its economics.

    Only volatility, strike and time remaining reach the curve model. The
    perpetual flag and both fees are carried so existing config files load;
    nothing reads them.
    """

    pool_volatility_f: float
    pool_strike_price_f: float
    pool_time_remaining_years_f: float
    pool_is_perpetual: bool
    pool_fee_basis_points: int
    pool_priority_fee_basis_points: int

    @property
    def time_remaining_seconds(self) -> float:
        return self.pool_time_remaining_years_f * SECONDS_PER_YEAR

    def curve(
        self, reserve_x: float, reserve_y: float, invariant: float = 0.0,
    ) -> Ok[CurveState] | Err[DomainError]:
        """A curve with these economics at the given reserves."""
        return CurveState.create(
            reserve_x_per_unit_liquidity=reserve_x,
            reserve_y_per_unit_liquidity=reserve_y,
            strike_price=self.pool_strike_price_f,
            volatility=self.pool_volatility_f,
            time_remaining_seconds=self.time_remaining_seconds,
            invariant=invariant,
        )


@final
@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    """Sweep and root-search parameters."""

    step: float
    epsilon: float
    max_iterations: int
    invariant_nudge: float


@final
@dataclass(frozen=True, slots=True)
class Settings:
    economic: EconomicConfig
    analysis: AnalysisConfig


_SECTIONS: dict[str, type[EconomicConfig] | type[AnalysisConfig]] = {
    "economic": EconomicConfig,
    "analysis": AnalysisConfig,
}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _coerce(value: Any, kind: str, path: str) -> Ok[Any] | Err[str]:
    """Check a TOML value against the field's annotation; env strings are converted."""
    if kind == "bool":
        if isinstance(value, bool):
            return Ok(value)
        if isinstance(value, str) and value.lower() in ("true", "false", "1", "0"):
            return Ok(value.lower() in ("true", "1"))
        return Err(f"{path}: expected bool, got {value!r}")
    if kind == "int":
        if isinstance(value, int) and not isinstance(value, bool):
            return Ok(value)
        if isinstance(value, str):
            try:
                return Ok(int(value))
            except ValueError:
                pass
        return Err(f"{path}: expected int, got {value!r}")
    # float fields accept TOML integers too ("pool_strike_price_f = 1")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Ok(float(value))
    if isinstance(value, str):
        try:
            return Ok(float(value))
        except ValueError:
            pass
    return Err(f"{path}: expected float, got {value!r}")


def _parse_section(name: str, raw: Any) -> Ok[Any] | Err[str]:
    cls = _SECTIONS[name]
    if not isinstance(raw, Mapping):
        return Err(f"[{name}]: missing section")
    expected = {f.name: str(f.type) for f in fields(cls)}
    missing = sorted(set(expected) - set(raw))
    if missing:
        return Err(f"[{name}]: missing keys {', '.join(missing)}")
    unknown = sorted(set(raw) - set(expected))
    if unknown:
        return Err(f"[{name}]: unknown keys {', '.join(unknown)}")
    values: dict[str, Any] = {}
    for key, kind in expected.items():
        match _coerce(raw[key], kind, f"{name}.{key}"):
            case Err(e):
                return Err(e)
            case Ok(v):
                values[key] = v
    return Ok(cls(**values))


def _check_ranges(settings: Settings) -> Ok[Settings] | Err[str]:
    eco, ana = settings.economic, settings.analysis
    checks = (
        (math.isfinite(eco.pool_volatility_f) and eco.pool_volatility_f >= 0.0,
         f"economic.pool_volatility_f must be >= 0, got {eco.pool_volatility_f!r}"),
        (math.isfinite(eco.pool_strike_price_f) and eco.pool_strike_price_f > 0.0,
         f"economic.pool_strike_price_f must be > 0, got {eco.pool_strike_price_f!r}"),
        (math.isfinite(eco.pool_time_remaining_years_f) and eco.pool_time_remaining_years_f >= 0.0,
         f"economic.pool_time_remaining_years_f must be >= 0, "
         f"got {eco.pool_time_remaining_years_f!r}"),
        (eco.pool_fee_basis_points >= 0,
         f"economic.pool_fee_basis_points must be >= 0, got {eco.pool_fee_basis_points}"),
        (eco.pool_priority_fee_basis_points >= 0,
         f"economic.pool_priority_fee_basis_points must be >= 0, "
         f"got {eco.pool_priority_fee_basis_points}"),
        (math.isfinite(ana.step) and 0.0 < ana.step < 1.0,
         f"analysis.step must be in (0, 1), got {ana.step!r}"),
        (math.isfinite(ana.epsilon) and ana.epsilon > 0.0,
         f"analysis.epsilon must be > 0, got {ana.epsilon!r}"),
        (ana.max_iterations >= 0,
         f"analysis.max_iterations must be >= 0, got {ana.max_iterations}"),
        (math.isfinite(ana.invariant_nudge),
         f"analysis.invariant_nudge must be finite, got {ana.invariant_nudge!r}"),
    )
    for ok, message in checks:
        if not ok:
            return Err(message)
    return Ok(settings)


def parse_settings(raw: Mapping[str, Any]) -> Ok[Settings] | Err[str]:
    """Build Settings from an already-decoded TOML document."""
    match _parse_section("economic", raw.get("economic")):
        case Err(e):
            return Err(e)
        case Ok(economic):
            pass
    match _parse_section("analysis", raw.get("analysis")):
        case Err(e):
            return Err(e)
        case Ok(analysis):
            pass
    return _check_ranges(Settings(economic=economic, analysis=analysis))


def apply_env_overrides(
    raw: Mapping[str, Any], environ: Mapping[str, str],
) -> dict[str, Any]:
    """Copy of ``raw`` with NORMAL_AMM_<SECTION>__<KEY> variables applied."""
    merged: dict[str, Any] = {
        k: dict(v) if isinstance(v, Mapping) else v for k, v in raw.items()
    }
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX) or "__" not in name:
            continue
        section, _, key = name[len(ENV_PREFIX):].lower().partition("__")
        if section in _SECTIONS:
            merged.setdefault(section, {})[key] = value
    return merged


def load_config(
    path: str | Path = CONFIG_FILE,
    environ: Mapping[str, str] | None = None,
) -> Ok[Settings] | Err[str]:
    """Read, override from the environment, and validate."""
    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except FileNotFoundError:
        return Err(f"config file not found: {path}")
    except tomllib.TOMLDecodeError as e:
        return Err(f"invalid TOML in {path}: {e}")
    env = os.environ if environ is None else environ
    return parse_settings(apply_env_overrides(raw, env))


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    """Configure the root logger. Called by the CLI only; the library never does."""
    resolved = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("normal_amm").setLevel(resolved)
