"""
Curve bootstrapping engine.

Implements the sequential bootstrap of a piecewise flat forward curve:
1. Build node times and fixed leg schedules (once)
2. Seed the curve with the quoted rates as zero rate guesses
3. Fit each node left to right:
   - money market nodes in closed form
   - swap nodes by bracketed Newton-Raphson with analytic gradients
4. Re-base the curve to the valuation date if it differs from spot

Any ConfigurationError or ConvergenceError aborts the build; no partial
curve is ever returned.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging
import math

import numpy as np
import pandas as pd

from ..conventions import CurveConventions
from ..exceptions import ConfigurationError, ConvergenceError
from ..solvers import BracketedNewtonSolver
from .curve import PiecewiseFlatForwardCurve
from .instruments import FixedLegSchedule, InstrumentKind, QuoteLike, normalize_quotes
from .schedule import CurveNodeSchedule, CurveNodeScheduleBuilder

logger = logging.getLogger(__name__)


class BootstrapState(Enum):
    """Lifecycle of a bootstrapper."""
    UNBUILT = "Unbuilt"
    CALIBRATING = "Calibrating"
    CALIBRATED = "Calibrated"


@dataclass
class BootstrapResult:
    """
    Result of curve bootstrap.
    
    Attributes:
        curve: Calibrated curve (re-based to the valuation date)
        schedule: Node schedule the curve was fitted on
        rates: Quoted rate per node
        iterations: Root finder iterations per node (0 for closed form nodes)
    """
    curve: PiecewiseFlatForwardCurve
    schedule: CurveNodeSchedule
    rates: Tuple[float, ...]
    iterations: Dict[int, int] = field(default_factory=dict)
    
    @property
    def spot_curve(self) -> PiecewiseFlatForwardCurve:
        """The calibrated curve with times measured from the spot date."""
        return self.curve.with_offset(-self.curve.offset)
    
    def implied_rates(self) -> List[float]:
        """Rate implied by the curve for each input instrument."""
        curve = self.spot_curve
        schedule = self.schedule
        implied = []
        for i, kind in enumerate(schedule.kinds):
            if kind == InstrumentKind.MONEY_MARKET:
                yf = schedule.money_market_year_fractions[i]
                df = curve.discount_factor(float(schedule.times[i]))
                implied.append((1.0 / df - 1.0) / yf)
            else:
                implied.append(schedule.fixed_legs[i].par_rate(curve))
        return implied
    
    def repricing_errors(self) -> Dict[str, float]:
        """
        Implied minus quoted rate per instrument.
        
        Returns dict of {tenor: error}.
        """
        return {
            tenor: implied - quoted
            for tenor, implied, quoted in zip(self.schedule.tenors, self.implied_rates(), self.rates)
        }
    
    def repricing_frame(self) -> pd.DataFrame:
        """Per-instrument repricing table."""
        implied = self.implied_rates()
        return pd.DataFrame({
            "kind": [k.value for k in self.schedule.kinds],
            "tenor": list(self.schedule.tenors),
            "maturity": list(self.schedule.maturities),
            "time": self.curve.times,
            "quote": list(self.rates),
            "implied": implied,
            "error": np.array(implied) - np.array(self.rates),
            "iterations": [self.iterations.get(i, 0) for i in range(len(self.rates))],
        })


class YieldCurveBootstrapper:
    """
    Bootstrap a piecewise flat forward curve from money market and par swap rates.
    
    The node schedule is built once on construction; build() may then be
    called repeatedly with different rate sets.
    
    Attributes:
        schedule: Node times, money market fractions, fixed legs and offset
        solver: Root finder used for swap nodes
        root_finder: "newton" (analytic gradient) or "brent"
        par_tolerance: A swap node whose guess and objective are both within
            this tolerance of zero is left as is
        state: Current BootstrapState
    """
    
    BRACKET_DOWN = 0.8
    BRACKET_UP = 1.25
    ZERO_GUESS_BRACKET = 1e-4
    
    def __init__(
        self,
        spot_date: date,
        kinds: Sequence[Union[InstrumentKind, str]],
        tenors: Sequence[str],
        conventions: Optional[CurveConventions] = None,
        valuation_date: Optional[date] = None,
        root_finder: str = "newton",
        solver: Optional[BracketedNewtonSolver] = None,
        par_tolerance: float = 1e-15
    ):
        if root_finder not in ("newton", "brent"):
            raise ConfigurationError(f"Unknown root finder: {root_finder}")
        self.schedule = CurveNodeScheduleBuilder(conventions).build(
            spot_date, kinds, tenors, valuation_date
        )
        self.solver = solver if solver is not None else BracketedNewtonSolver()
        self.root_finder = root_finder
        self.par_tolerance = par_tolerance
        self.state = BootstrapState.UNBUILT
        self.current_node: Optional[int] = None
    
    def build(self, rates: Sequence[float]) -> PiecewiseFlatForwardCurve:
        """Calibrate and return the curve."""
        return self.bootstrap(rates).curve
    
    def bootstrap(self, rates: Sequence[float]) -> BootstrapResult:
        """
        Calibrate the curve to the quoted rates.
        
        Args:
            rates: Quoted rate per node (decimal), in node order
            
        Returns:
            BootstrapResult with the curve and diagnostics
            
        Raises:
            ConfigurationError: If rates are missing, mismatched, non-numeric
                or imply a non-positive money market discount factor
            ConvergenceError: If a swap node cannot be fitted
        """
        rates = self._check_rates(rates)
        schedule = self.schedule
        
        curve = PiecewiseFlatForwardCurve(schedule.times, rates)
        iterations: Dict[int, int] = {}
        self.state = BootstrapState.CALIBRATING
        try:
            for i in range(schedule.number_of_nodes):
                self.current_node = i
                if schedule.kinds[i] == InstrumentKind.MONEY_MARKET:
                    z = 1.0 / (1.0 + rates[i] * schedule.money_market_year_fractions[i])
                    curve = curve.with_discount_factor(z, i)
                    iterations[i] = 0
                else:
                    curve, iterations[i] = self._fit_swap(
                        i, schedule.fixed_legs[i], curve, rates[i]
                    )
                logger.debug(
                    "Node %s (%s %s) fitted: t=%.6f r=%.10f",
                    i, schedule.kinds[i].value, schedule.tenors[i],
                    curve.time_at(i), curve.zero_rate_at(i)
                )
        except ConvergenceError as e:
            logger.error("Bootstrap failed at node %s (%s): %s", i, schedule.tenors[i], e)
            raise ConvergenceError(
                f"Bootstrap failed at node {i} ({schedule.tenors[i]}): {e}",
                node_index=i,
                tenor=schedule.tenors[i]
            ) from e
        finally:
            self.current_node = None
            if self.state == BootstrapState.CALIBRATING:
                self.state = BootstrapState.UNBUILT
        
        if schedule.offset != 0.0:
            curve = curve.with_offset(schedule.offset)
        self.state = BootstrapState.CALIBRATED
        logger.info(
            "Bootstrapped %s-node curve from %s (offset %s)",
            curve.number_of_knots, schedule.spot_date, schedule.offset
        )
        return BootstrapResult(
            curve=curve,
            schedule=schedule,
            rates=tuple(rates),
            iterations=iterations
        )
    
    def _check_rates(self, rates: Sequence[float]) -> List[float]:
        if rates is None or len(rates) == 0:
            raise ConfigurationError("No rates given")
        n = self.schedule.number_of_nodes
        if len(rates) != n:
            raise ConfigurationError(f"Expecting {n} rates, given {len(rates)}")
        try:
            checked = [float(r) for r in rates]
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Rates must be numeric: {list(rates)}") from e
        if not all(math.isfinite(r) for r in checked):
            raise ConfigurationError(f"Rates must be finite: {checked}")
        for i, yf in self.schedule.money_market_year_fractions.items():
            if 1.0 + checked[i] * yf <= 0.0:
                raise ConfigurationError(
                    f"Money market rate {checked[i]} at node {i} ({self.schedule.tenors[i]}) "
                    f"gives a non-positive discount factor"
                )
        return checked
    
    def _fit_swap(
        self,
        node_index: int,
        leg: FixedLegSchedule,
        curve: PiecewiseFlatForwardCurve,
        swap_rate: float
    ) -> Tuple[PiecewiseFlatForwardCurve, int]:
        """
        Solve for the zero rate at node_index that prices the swap at par.
        
        Payments at or before the previous node, or at or after the next
        node, do not move with this node's rate; they are valued once.
        """
        n_nodes = curve.number_of_knots
        t1 = 0.0 if node_index == 0 else curve.time_at(node_index - 1)
        t2 = math.inf if node_index == n_nodes - 1 else curve.time_at(node_index + 1)
        
        cached_value = 0.0
        cached_sense = 0.0
        live: List[Tuple[float, float]] = []
        for k in range(leg.number_of_payments):
            t = leg.payment_time(k)
            c = leg.amount(k, swap_rate)
            if t <= t1 or t >= t2:
                cached_value += c * curve.discount_factor(t)
                cached_sense -= c * curve.single_node_discount_factor_sensitivity(t, node_index)
            else:
                live.append((t, c))
        
        def objective(x: float) -> float:
            temp_curve = curve.with_rate(x, node_index)
            # Floating leg at par
            total = 1.0 - cached_value
            for t, c in live:
                total -= c * temp_curve.discount_factor(t)
            return total
        
        def gradient(x: float) -> float:
            temp_curve = curve.with_rate(x, node_index)
            total = cached_sense
            for t, c in live:
                total -= c * temp_curve.single_node_discount_factor_sensitivity(t, node_index)
            return total
        
        guess = curve.zero_rate_at(node_index)
        if abs(guess) <= self.par_tolerance and abs(objective(guess)) <= self.par_tolerance:
            logger.warning("Swap node %s already at par with zero rate; search skipped", node_index)
            return curve, 0
        
        if guess > 0:
            x_low, x_high = self.BRACKET_DOWN * guess, self.BRACKET_UP * guess
        else:
            x_low, x_high = 0.0, self.ZERO_GUESS_BRACKET
        
        result = self.solver.find_root(
            objective, gradient, x_low, x_high,
            bound_low=0.0, bound_high=math.inf,
            method=self.root_finder
        )
        logger.debug(
            "Swap node %s: root %.12f after %s %s iterations",
            node_index, result.root, result.iterations, result.method
        )
        return curve.with_rate(result.root, node_index), result.iterations


def bootstrap_from_quotes(
    spot_date: date,
    quotes: List[QuoteLike],
    conventions: Optional[CurveConventions] = None,
    valuation_date: Optional[date] = None,
    root_finder: str = "newton"
) -> PiecewiseFlatForwardCurve:
    """
    Convenience function to bootstrap a curve from quotes.
    
    Args:
        spot_date: Spot date of the instruments
        quotes: InstrumentQuote objects or dicts with keys kind, tenor, rate
        conventions: Curve conventions (defaults to CurveConventions())
        valuation_date: Observation date of the curve (defaults to spot)
        root_finder: "newton" or "brent"
        
    Returns:
        Bootstrapped curve
        
    Example quote format:
        {"kind": "MM", "tenor": "3M", "rate": 0.012}
        {"kind": "SWAP", "tenor": "2Y", "rate": 0.020}
    """
    if not quotes:
        raise ConfigurationError("No quotes given")
    parsed = normalize_quotes(quotes)
    bootstrapper = YieldCurveBootstrapper(
        spot_date=spot_date,
        kinds=[q.kind for q in parsed],
        tenors=[q.tenor for q in parsed],
        conventions=conventions,
        valuation_date=valuation_date,
        root_finder=root_finder
    )
    return bootstrapper.build([q.rate for q in parsed])


__all__ = [
    "BootstrapState",
    "BootstrapResult",
    "YieldCurveBootstrapper",
    "bootstrap_from_quotes",
]
