"""
Risk package - node sensitivities of cash flows to the curve.

Provides:
- Analytic node deltas from closed-form discount factor sensitivities
- Finite-difference deltas for verification
- Bucketed DV01
"""

from .sensitivities import (
    Cashflow,
    NodeRiskCalculator,
    cashflows_from_fixed_leg,
)

__all__ = [
    "Cashflow",
    "NodeRiskCalculator",
    "cashflows_from_fixed_leg",
]
