"""
ZeroCurve: piecewise flat forward yield curve bootstrapping

A small library for:
- Building discount curves from money market rates and par swap rates
- Exact repricing of every input instrument
- Analytic sensitivities of discount factors to curve nodes

Scope: single-curve discounting only.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import DayCount, BusinessDayConvention, CurveConventions, year_fraction
from .dates import DateUtils, Tenor
from .exceptions import CurveError, ConfigurationError, ConvergenceError
from .solvers import BracketedNewtonSolver, RootResult

# Curves
from .curves import (
    CurveNode,
    PiecewiseFlatForwardCurve,
    InstrumentKind,
    InstrumentQuote,
    FixedLegSchedule,
    CurveNodeScheduleBuilder,
    YieldCurveBootstrapper,
    BootstrapResult,
    bootstrap_from_quotes,
)

# Risk
from .risk import Cashflow, NodeRiskCalculator

__all__ = [
    # Version
    "__version__",
    # Conventions
    "DayCount",
    "BusinessDayConvention",
    "CurveConventions",
    "year_fraction",
    # Dates
    "DateUtils",
    "Tenor",
    # Errors
    "CurveError",
    "ConfigurationError",
    "ConvergenceError",
    # Solvers
    "BracketedNewtonSolver",
    "RootResult",
    # Curves
    "CurveNode",
    "PiecewiseFlatForwardCurve",
    "InstrumentKind",
    "InstrumentQuote",
    "FixedLegSchedule",
    "CurveNodeScheduleBuilder",
    "YieldCurveBootstrapper",
    "BootstrapResult",
    "bootstrap_from_quotes",
    # Risk
    "Cashflow",
    "NodeRiskCalculator",
]
