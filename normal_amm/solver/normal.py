"""Standard normal distribution functions.

Phi(x) = P(Z <= x) and its inverse, Z ~ N(0, 1), evaluated with the Cephes
routines behind scipy.special. Both return plain Python floats so results
compare and hash like any other float.

Edge behaviour is IEEE: ndtri(0) = -inf, ndtri(1) = +inf, ndtri(p) is NaN
outside [0, 1]. Callers guard their arguments; nothing here validates.
"""

from __future__ import annotations

from scipy.special import ndtr, ndtri


def std_normal_cdf(x: float) -> float:
    """Phi(x)."""
    return float(ndtr(x))


def std_normal_inverse_cdf(p: float) -> float:
    """Phi^-1(p), the standard normal quantile."""
    return float(ndtri(p))
