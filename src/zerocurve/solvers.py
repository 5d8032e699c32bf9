"""
One-dimensional root finding for curve calibration.

BracketedNewtonSolver works purely on scalar callables:
1. bracket(): expand an initial interval (within hard bounds) until the
   function changes sign
2. solve(): Newton-Raphson with an analytic gradient, kept inside the
   bracket by falling back to bisection steps
3. solve_brent(): Brent's method via scipy, for callers without a gradient
"""

from dataclasses import dataclass
from typing import Callable, Tuple
import logging
import math

from scipy.optimize import brentq

from .exceptions import ConvergenceError

logger = logging.getLogger(__name__)

Func = Callable[[float], float]


@dataclass
class RootResult:
    """Outcome of a root search."""
    root: float
    iterations: int
    converged: bool
    method: str


class BracketedNewtonSolver:
    """
    Sign-change bracketing followed by safeguarded Newton-Raphson.
    
    Attributes:
        tolerance: Absolute tolerance on the root (step size)
        function_tolerance: |f(x)| below which x is accepted as a root
        max_iterations: Newton/Brent iteration budget
        max_bracket_steps: Number of interval expansions before giving up
        expansion_ratio: Growth factor applied to the interval on each expansion
    """
    
    def __init__(
        self,
        tolerance: float = 1e-12,
        function_tolerance: float = 1e-14,
        max_iterations: int = 100,
        max_bracket_steps: int = 50,
        expansion_ratio: float = 1.6
    ):
        self.tolerance = tolerance
        self.function_tolerance = function_tolerance
        self.max_iterations = max_iterations
        self.max_bracket_steps = max_bracket_steps
        self.expansion_ratio = expansion_ratio
    
    def bracket(
        self,
        f: Func,
        x_low: float,
        x_high: float,
        bound_low: float = -math.inf,
        bound_high: float = math.inf
    ) -> Tuple[float, float]:
        """
        Find an interval over which f changes sign.
        
        The end with the smaller |f| is pushed outward on each step,
        clamped to [bound_low, bound_high].
        
        Args:
            f: Scalar function
            x_low: Initial lower point
            x_high: Initial upper point
            bound_low: Hard lower limit for the bracket
            bound_high: Hard upper limit for the bracket
            
        Returns:
            Tuple (a, b) with a < b and f(a) * f(b) <= 0
            
        Raises:
            ValueError: If the initial points coincide or lie outside the bounds
            ConvergenceError: If no sign change is found
        """
        if x_low == x_high:
            raise ValueError("Bracket end points must differ")
        x1, x2 = min(x_low, x_high), max(x_low, x_high)
        if x1 < bound_low or x2 > bound_high:
            raise ValueError(
                f"Initial bracket [{x1}, {x2}] outside bounds [{bound_low}, {bound_high}]"
            )
        
        f1 = f(x1)
        f2 = f(x2)
        
        for step in range(self.max_bracket_steps):
            if not (math.isfinite(f1) and math.isfinite(f2)):
                raise ConvergenceError(
                    f"Non-finite function value while bracketing at [{x1}, {x2}]"
                )
            if f1 * f2 <= 0:
                logger.debug("Bracketed root in [%s, %s] after %s expansions", x1, x2, step)
                return x1, x2
            
            low_pinned = x1 <= bound_low
            high_pinned = x2 >= bound_high
            if low_pinned and high_pinned:
                break
            
            width = x2 - x1
            if (abs(f1) < abs(f2) and not low_pinned) or high_pinned:
                x1 = max(x1 - self.expansion_ratio * width, bound_low)
                f1 = f(x1)
            else:
                x2 = min(x2 + self.expansion_ratio * width, bound_high)
                f2 = f(x2)
        
        if f1 * f2 <= 0:
            return x1, x2
        raise ConvergenceError(
            f"Failed to bracket root after {self.max_bracket_steps} attempts "
            f"(last interval [{x1}, {x2}], f = {f1}, {f2})"
        )
    
    def solve(self, f: Func, grad: Func, x0: float, x1: float) -> Tuple[float, int]:
        """
        Newton-Raphson seeded at the midpoint of a bracketing interval.
        
        Steps that would leave the current bracket are replaced by
        bisection, so the iterate always stays in the domain.
        
        Args:
            f: Scalar function
            grad: Analytic derivative of f
            x0: One end of the bracket
            x1: Other end of the bracket
            
        Returns:
            Tuple (root, iterations)
            
        Raises:
            ConvergenceError: If the interval does not bracket a root, the
                function or gradient becomes non-finite, or the iteration
                budget is exhausted
        """
        lo, hi = min(x0, x1), max(x0, x1)
        f_lo = f(lo)
        if abs(f_lo) <= self.function_tolerance:
            return lo, 0
        f_hi = f(hi)
        if abs(f_hi) <= self.function_tolerance:
            return hi, 0
        if f_lo * f_hi > 0:
            raise ConvergenceError(f"Root not bracketed by [{lo}, {hi}] (f = {f_lo}, {f_hi})")
        
        x = 0.5 * (lo + hi)
        for iteration in range(1, self.max_iterations + 1):
            y = f(x)
            dy = grad(x)
            logger.debug("Newton iter %s: x=%s value=%s deriv=%s", iteration, x, y, dy)
            if not (math.isfinite(y) and math.isfinite(dy)):
                raise ConvergenceError(f"Non-finite value at x={x}: f={y}, f'={dy}")
            if abs(y) <= self.function_tolerance:
                return x, iteration
            
            # Shrink the bracket around the root
            if (y < 0) == (f_lo < 0):
                lo, f_lo = x, y
            else:
                hi, f_hi = x, y
            
            x_new = x - y / dy if dy != 0.0 else math.nan
            if not (lo < x_new < hi):
                x_new = 0.5 * (lo + hi)
            
            if abs(x_new - x) <= self.tolerance:
                return x_new, iteration
            x = x_new
        
        raise ConvergenceError(
            f"Newton-Raphson failed to converge in {self.max_iterations} iterations (last x={x})"
        )
    
    def solve_brent(self, f: Func, x0: float, x1: float) -> Tuple[float, int]:
        """
        Brent's method on a bracketing interval (no gradient needed).
        
        Returns:
            Tuple (root, iterations)
        
        Raises:
            ConvergenceError: If the interval does not bracket a root or
                scipy reports non-convergence
        """
        lo, hi = min(x0, x1), max(x0, x1)
        try:
            root, info = brentq(
                f, lo, hi,
                xtol=self.tolerance,
                maxiter=self.max_iterations,
                full_output=True
            )
        except (ValueError, RuntimeError) as e:
            raise ConvergenceError(f"Brent root search failed on [{lo}, {hi}]: {e}") from e
        return float(root), info.iterations
    
    def find_root(
        self,
        f: Func,
        grad: Func,
        x_low: float,
        x_high: float,
        bound_low: float = -math.inf,
        bound_high: float = math.inf,
        method: str = "newton"
    ) -> RootResult:
        """
        Bracket then solve.
        
        Args:
            f: Scalar function
            grad: Derivative of f (ignored by "brent")
            x_low: Initial lower guess
            x_high: Initial upper guess
            bound_low: Hard lower limit
            bound_high: Hard upper limit
            method: "newton" or "brent"
            
        Returns:
            RootResult
        """
        a, b = self.bracket(f, x_low, x_high, bound_low, bound_high)
        if method == "newton":
            root, iterations = self.solve(f, grad, a, b)
        elif method == "brent":
            root, iterations = self.solve_brent(f, a, b)
        else:
            raise ValueError(f"Unknown root finding method: {method}")
        return RootResult(root=root, iterations=iterations, converged=True, method=method)


__all__ = [
    "BracketedNewtonSolver",
    "RootResult",
]
