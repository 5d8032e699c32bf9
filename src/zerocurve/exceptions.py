"""
Exception hierarchy for curve construction.

- ConfigurationError: bad inputs detected before any numerical work
- ConvergenceError: the root finder could not fit a curve node
"""

from typing import Optional


class CurveError(Exception):
    """Base class for all curve construction errors."""


class ConfigurationError(CurveError, ValueError):
    """Raised for invalid, missing or inconsistent curve inputs."""


class ConvergenceError(CurveError, RuntimeError):
    """
    Raised when bracketing or Newton-Raphson fails.

    Attributes:
        node_index: Index of the curve node being calibrated (if known)
        tenor: Tenor of the instrument being calibrated (if known)
    """

    def __init__(
        self,
        message: str,
        node_index: Optional[int] = None,
        tenor: Optional[str] = None
    ):
        super().__init__(message)
        self.node_index = node_index
        self.tenor = tenor


__all__ = [
    "CurveError",
    "ConfigurationError",
    "ConvergenceError",
]
