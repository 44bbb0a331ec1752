"""normal_amm.analysis — pool boundary and float-versus-reference analysis."""

from normal_amm.analysis.pool import PoolParameters as PoolParameters
from normal_amm.analysis.pool import curve_from_pool as curve_from_pool
from normal_amm.analysis.protocols import ReferenceCurve as ReferenceCurve
from normal_amm.analysis.protocols import WadRoundTripReference as WadRoundTripReference
from normal_amm.analysis.trading_function import ANALYSIS_STEP as ANALYSIS_STEP
from normal_amm.analysis.trading_function import CANONICAL_CURVE as CANONICAL_CURVE
from normal_amm.analysis.trading_function import DataPoint as DataPoint
from normal_amm.analysis.trading_function import (
    TradingFunctionAnalysis as TradingFunctionAnalysis,
)
from normal_amm.analysis.trading_function import (
    analyze_trading_function as analyze_trading_function,
)
from normal_amm.analysis.trading_function import coordinate_bounds as coordinate_bounds
