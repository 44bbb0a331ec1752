"""normal_amm — float model of the normal-distribution AMM trading function."""

__version__ = "0.1.0"
