"""
Curves package - yield curve construction.

Provides:
- PiecewiseFlatForwardCurve: Discount curve with flat forwards between nodes
- CurveNodeScheduleBuilder: Node times and swap fixed legs from tenors
- YieldCurveBootstrapper: Sequential calibration to deposits and par swaps
"""

from .curve import CurveNode, PiecewiseFlatForwardCurve
from .instruments import (
    InstrumentKind,
    InstrumentQuote,
    FixedLegPayment,
    FixedLegSchedule,
)
from .schedule import CurveNodeSchedule, CurveNodeScheduleBuilder
from .bootstrap import (
    BootstrapState,
    BootstrapResult,
    YieldCurveBootstrapper,
    bootstrap_from_quotes,
)

__all__ = [
    "CurveNode",
    "PiecewiseFlatForwardCurve",
    "InstrumentKind",
    "InstrumentQuote",
    "FixedLegPayment",
    "FixedLegSchedule",
    "CurveNodeSchedule",
    "CurveNodeScheduleBuilder",
    "BootstrapState",
    "BootstrapResult",
    "YieldCurveBootstrapper",
    "bootstrap_from_quotes",
]
