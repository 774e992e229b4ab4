"""
Error types raised by the mining engine.
"""


class MiningError(Exception):
    """Base class for all mining errors."""


class ConfigError(MiningError, ValueError):
    """Invalid mining configuration. Raised before any transaction scan."""


class InvalidTransactionError(MiningError, ValueError):
    """A transaction could not be accepted into the store."""


class ComputationError(MiningError, ArithmeticError):
    """
    An internal invariant was violated while computing a metric
    (e.g. a zero-support denominator).

    Never escapes the quality evaluator: it is logged and the metric falls
    back to 0.0.
    """
