"""
Piecewise flat forward yield curve.

The curve stores node times t_i and continuously compounded zero rates r_i.
Between nodes the product r(t) * t is linear in t, so the instantaneous
forward rate is flat on each segment:

    t <= t_0:            rt(t) = r_0 * t
    t_{i-1} <= t <= t_i: rt(t) = [(t_i - t) rt_{i-1} + (t - t_{i-1}) rt_i] / (t_i - t_{i-1})
    t > t_{n-1}:         last segment extrapolated

and P(0,t) = exp(-rt(t)). Partial derivatives of P(0,t) with respect to a
single node rate follow in closed form from the same rule.

Curves are values: every with_* method returns a new curve and the node
arrays are read-only.
"""

from dataclasses import dataclass
from typing import List, Sequence
import math

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class CurveNode:
    """A single point on the curve."""
    time: float  # Year fraction from anchor
    zero_rate: float  # Continuously compounded
    
    @property
    def discount_factor(self) -> float:
        return math.exp(-self.zero_rate * self.time)
    
    @classmethod
    def from_discount_factor(cls, time: float, df: float) -> "CurveNode":
        """Create node from discount factor."""
        return cls(time=time, zero_rate=-math.log(df) / time)


class PiecewiseFlatForwardCurve:
    """
    Discount curve with flat instantaneous forwards between nodes.
    
    Attributes:
        offset: Time shift already applied to the node times when the curve
            was re-based to a valuation date other than the instrument spot
            date (0.0 when not re-based)
    
    Conventions:
        - Zero rates are continuously compounded
        - Times are year fractions from the curve origin
        - Discount factor at t=0 is 1.0
    """
    
    def __init__(
        self,
        times: Sequence[float],
        zero_rates: Sequence[float],
        offset: float = 0.0
    ):
        t = np.array(times, dtype=float)
        r = np.array(zero_rates, dtype=float)
        if t.ndim != 1 or t.size == 0:
            raise ConfigurationError("Curve needs at least one node")
        if t.shape != r.shape:
            raise ConfigurationError(
                f"{t.size} node times given, but {r.size} zero rates"
            )
        if t[0] <= 0:
            raise ConfigurationError(f"First node time must be positive, got {t[0]}")
        if np.any(np.diff(t) <= 0):
            raise ConfigurationError("Node times must be strictly increasing")
        self._init_arrays(t, r, t * r, offset)
    
    def _init_arrays(self, t: np.ndarray, r: np.ndarray, rt: np.ndarray, offset: float) -> None:
        t.flags.writeable = False
        r.flags.writeable = False
        rt.flags.writeable = False
        self._t = t
        self._r = r
        self._rt = rt
        self._offset = float(offset)
        self._n = t.size
    
    @classmethod
    def _from_arrays(
        cls,
        t: np.ndarray,
        r: np.ndarray,
        rt: np.ndarray,
        offset: float
    ) -> "PiecewiseFlatForwardCurve":
        """Build from already validated arrays (arrays are taken over, not copied)."""
        curve = cls.__new__(cls)
        curve._init_arrays(t, r, rt, offset)
        return curve
    
    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    
    @property
    def number_of_knots(self) -> int:
        return self._n
    
    @property
    def offset(self) -> float:
        return self._offset
    
    @property
    def times(self) -> np.ndarray:
        """Node times (read-only array)."""
        return self._t
    
    @property
    def zero_rates(self) -> np.ndarray:
        """Node zero rates (read-only array)."""
        return self._r
    
    def time_at(self, i: int) -> float:
        return float(self._t[i])
    
    def zero_rate_at(self, i: int) -> float:
        return float(self._r[i])
    
    @property
    def nodes(self) -> List[CurveNode]:
        return [CurveNode(float(t), float(r)) for t, r in zip(self._t, self._r)]
    
    # ------------------------------------------------------------------
    # Curve queries
    # ------------------------------------------------------------------
    
    def rt(self, t: float) -> float:
        """Zero rate times time, i.e. -log P(0,t)."""
        t_nodes = self._t
        rt_nodes = self._rt
        if t <= t_nodes[0]:
            return float(self._r[0] * t)
        
        index = int(np.searchsorted(t_nodes, t, side="left"))
        if index < self._n and t_nodes[index] == t:
            return float(rt_nodes[index])
        if index == self._n:
            if self._n == 1:
                return float(self._r[0] * t)
            # Flat forward extrapolation of the last segment
            index = self._n - 1
        
        t1, t2 = t_nodes[index - 1], t_nodes[index]
        dt = t2 - t1
        return float(((t2 - t) * rt_nodes[index - 1] + (t - t1) * rt_nodes[index]) / dt)
    
    def discount_factor(self, t: float) -> float:
        """
        Get discount factor P(0,t).
        
        Args:
            t: Year fraction from the curve origin
            
        Returns:
            Discount factor
        """
        return math.exp(-self.rt(t))
    
    def zero_rate(self, t: float) -> float:
        """Continuously compounded zero rate to time t (first node rate for t <= 0)."""
        if t <= 0:
            return float(self._r[0])
        return self.rt(t) / t
    
    def forward_rate(self, t1: float, t2: float) -> float:
        """Continuously compounded forward rate between t1 and t2."""
        if t2 <= t1:
            raise ValueError("t2 must be greater than t1")
        return (self.rt(t2) - self.rt(t1)) / (t2 - t1)
    
    def instantaneous_forward(self, t: float) -> float:
        """
        Flat forward rate of the segment containing t.
        
        At a node the forward of the segment to its right is returned.
        """
        t_nodes = self._t
        if t < t_nodes[0] or self._n == 1:
            return float(self._r[0])
        index = int(np.searchsorted(t_nodes, t, side="right"))
        index = min(max(index, 1), self._n - 1)
        return float(
            (self._rt[index] - self._rt[index - 1]) / (t_nodes[index] - t_nodes[index - 1])
        )
    
    # ------------------------------------------------------------------
    # Sensitivities
    # ------------------------------------------------------------------
    
    def single_node_rt_sensitivity(self, t: float, node_index: int) -> float:
        """
        Partial derivative of rt(t) with respect to the zero rate at one node.
        
        Non-zero only when t lies between the node's neighbours (or beyond the
        last node when node_index is one of the two extrapolated nodes).
        """
        if node_index < 0 or node_index >= self._n:
            raise IndexError(f"Invalid node index: {node_index}")
        t_nodes = self._t
        if t <= t_nodes[0]:
            return t if node_index == 0 else 0.0
        
        index = int(np.searchsorted(t_nodes, t, side="left"))
        if index < self._n and t_nodes[index] == t:
            return t if node_index == index else 0.0
        if index == self._n:
            if self._n == 1:
                return t
            index = self._n - 1
        
        if node_index != index and node_index != index - 1:
            return 0.0
        t1, t2 = t_nodes[index - 1], t_nodes[index]
        dt = t2 - t1
        if node_index == index:
            return float(t2 * (t - t1) / dt)
        return float(t1 * (t2 - t) / dt)
    
    def single_node_discount_factor_sensitivity(self, t: float, node_index: int) -> float:
        """
        Partial derivative of P(0,t) with respect to the zero rate at one node,
        all other node rates held fixed.
        """
        sense = self.single_node_rt_sensitivity(t, node_index)
        if sense == 0.0:
            return 0.0
        return -sense * self.discount_factor(t)
    
    def node_sensitivities(self, t: float) -> np.ndarray:
        """Vector of dP(0,t)/dr_i for every node i."""
        return np.array([
            self.single_node_discount_factor_sensitivity(t, i) for i in range(self._n)
        ])
    
    # ------------------------------------------------------------------
    # Node updates (all return new curves)
    # ------------------------------------------------------------------
    
    def with_rate(self, rate: float, node_index: int) -> "PiecewiseFlatForwardCurve":
        """Return a new curve with one node's zero rate replaced."""
        if node_index < 0 or node_index >= self._n:
            raise IndexError(f"Invalid node index: {node_index}")
        r = self._r.copy()
        rt = self._rt.copy()
        r[node_index] = rate
        rt[node_index] = rate * self._t[node_index]
        return self._from_arrays(self._t, r, rt, self._offset)
    
    def with_rates(self, zero_rates: Sequence[float]) -> "PiecewiseFlatForwardCurve":
        """Return a new curve with the same node times and new zero rates."""
        return PiecewiseFlatForwardCurve(self._t, zero_rates, self._offset)
    
    def with_discount_factor(self, df: float, node_index: int) -> "PiecewiseFlatForwardCurve":
        """Return a new curve whose discount factor at node node_index equals df."""
        if df <= 0:
            raise ValueError(f"Invalid discount factor: {df}")
        return self.with_rate(-math.log(df) / self._t[node_index], node_index)
    
    def with_single_shift(self, t: float, amount: float) -> "PiecewiseFlatForwardCurve":
        """
        Return a new curve with the node at (or nearest to) time t bumped.
        
        Args:
            t: Time of the node to bump
            amount: Additive zero rate shift (decimal)
        """
        node_index = int(np.argmin(np.abs(self._t - t)))
        return self.with_rate(self._r[node_index] + amount, node_index)
    
    def with_parallel_shift(self, amount: float) -> "PiecewiseFlatForwardCurve":
        """Return a new curve with every zero rate shifted by amount."""
        return PiecewiseFlatForwardCurve(self._t, self._r + amount, self._offset)
    
    def with_offset(self, offset: float) -> "PiecewiseFlatForwardCurve":
        """
        Re-base the time origin.
        
        Node times become t_i - offset; zero rates are unchanged.
        """
        if offset == 0.0:
            return self
        return PiecewiseFlatForwardCurve(self._t - offset, self._r, self._offset + offset)
    
    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    
    def to_frame(self) -> pd.DataFrame:
        """Node table with discount factors and segment forwards."""
        forwards = [self.instantaneous_forward(float(t)) for t in self._t]
        return pd.DataFrame({
            "time": self._t,
            "zero_rate": self._r,
            "discount_factor": np.exp(-self._rt),
            "forward": forwards,
        })
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PiecewiseFlatForwardCurve):
            return NotImplemented
        return (
            self._offset == other._offset
            and np.array_equal(self._t, other._t)
            and np.array_equal(self._r, other._r)
        )
    
    __hash__ = None
    
    def __repr__(self) -> str:
        return (f"PiecewiseFlatForwardCurve(nodes={self._n}, "
                f"last_time={self._t[-1]:.4f}, offset={self._offset})")


__all__ = [
    "CurveNode",
    "PiecewiseFlatForwardCurve",
]
