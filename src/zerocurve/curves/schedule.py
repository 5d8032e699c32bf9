"""
Curve node schedule construction.

Turns instrument kinds and tenors into:
1. Adjusted maturity dates and curve node times
2. Money market accrual year fractions
3. Fixed leg schedules for swap nodes
4. The time offset between the instrument spot date and the valuation date

All input validation happens here, before any root finding.
"""

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union
import logging

import numpy as np

from ..conventions import CurveConventions, adjust_business_day, signed_year_fraction, year_fraction
from ..dates import Tenor
from ..exceptions import ConfigurationError
from .instruments import FixedLegPayment, FixedLegSchedule, InstrumentKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurveNodeSchedule:
    """
    Node layout derived from instrument tenors and conventions.
    
    Attributes:
        spot_date: Spot date of the instruments (curve origin before re-basing)
        valuation_date: Date the final curve is observed from
        kinds: Instrument kind per node
        tenors: Instrument tenor per node
        maturities: Business-day adjusted maturity per node
        times: Curve day count fraction from spot to each maturity
        money_market_year_fractions: Accrual fraction of each money market node, by node index (read-only)
        fixed_legs: Fixed leg schedule of each swap node, by node index (read-only)
        offset: Signed curve time from spot to valuation date
    """
    spot_date: date
    valuation_date: date
    kinds: Tuple[InstrumentKind, ...]
    tenors: Tuple[str, ...]
    maturities: Tuple[date, ...]
    times: np.ndarray
    money_market_year_fractions: Mapping[int, float]
    fixed_legs: Mapping[int, FixedLegSchedule]
    offset: float
    
    @property
    def number_of_nodes(self) -> int:
        return len(self.kinds)


class CurveNodeScheduleBuilder:
    """
    Builds node times and fixed leg schedules for a set of curve instruments.
    
    Attributes:
        conventions: Day counts, swap payment interval and business day rules
    """
    
    def __init__(self, conventions: Optional[CurveConventions] = None):
        if conventions is None:
            conventions = CurveConventions()
        self.conventions = conventions
        try:
            self.swap_interval = Tenor.parse(conventions.swap_interval)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if not self.swap_interval.is_month_based or self.swap_interval.amount <= 0:
            raise ConfigurationError(
                f"Swap interval must be in whole months or years, got {conventions.swap_interval}"
            )
    
    def build(
        self,
        spot_date: date,
        kinds: Sequence[Union[InstrumentKind, str]],
        tenors: Sequence[str],
        valuation_date: Optional[date] = None
    ) -> CurveNodeSchedule:
        """
        Build the node schedule.
        
        Args:
            spot_date: Spot date of the instruments
            kinds: Instrument kind per node (InstrumentKind or string)
            tenors: Tenor per node, ascending
            valuation_date: Observation date of the curve (defaults to spot_date)
            
        Returns:
            CurveNodeSchedule
            
        Raises:
            ConfigurationError: On missing, mismatched or non-ascending inputs
        """
        if spot_date is None:
            raise ConfigurationError("spot_date must be given")
        if not kinds:
            raise ConfigurationError("No instrument kinds given")
        if not tenors:
            raise ConfigurationError("No tenors given")
        n = len(tenors)
        if len(kinds) != n:
            raise ConfigurationError(f"{n} tenors given, but {len(kinds)} instrument kinds")
        if valuation_date is None:
            valuation_date = spot_date
        
        parsed_kinds = tuple(self._parse_kind(k) for k in kinds)
        parsed_tenors = [self._parse_tenor(t) for t in tenors]
        
        conv = self.conventions
        unadjusted: List[date] = []
        for i, tenor in enumerate(parsed_tenors):
            mat = tenor.add_to(spot_date)
            if i == 0:
                if not mat > spot_date:
                    raise ConfigurationError(f"First tenor {tenor} does not mature after spot date")
            elif not mat > unadjusted[i - 1]:
                raise ConfigurationError(
                    f"Tenors are not ascending: {parsed_tenors[i - 1]} followed by {tenor}"
                )
            unadjusted.append(mat)
        
        maturities = tuple(
            adjust_business_day(d, conv.business_day, conv.holidays) for d in unadjusted
        )
        times = np.array([
            year_fraction(spot_date, d, conv.curve_day_count) for d in maturities
        ])
        if np.any(np.diff(times) <= 0) or times[0] <= 0:
            raise ConfigurationError("Adjusted maturities do not give strictly increasing node times")
        times.flags.writeable = False
        
        mm_year_fractions: Dict[int, float] = {}
        fixed_legs: Dict[int, FixedLegSchedule] = {}
        for i, kind in enumerate(parsed_kinds):
            if kind == InstrumentKind.MONEY_MARKET:
                mm_year_fractions[i] = year_fraction(
                    spot_date, maturities[i], conv.money_market_day_count
                )
            else:
                fixed_legs[i] = self.fixed_leg(spot_date, unadjusted[i])
        
        if valuation_date >= maturities[0]:
            raise ConfigurationError(
                f"Valuation date {valuation_date} is not before first maturity {maturities[0]}"
            )
        offset = 0.0
        if valuation_date != spot_date:
            offset = signed_year_fraction(spot_date, valuation_date, conv.curve_day_count)
        
        logger.debug(
            "Built schedule for %s nodes (%s swaps), offset %s",
            n, len(fixed_legs), offset
        )
        return CurveNodeSchedule(
            spot_date=spot_date,
            valuation_date=valuation_date,
            kinds=parsed_kinds,
            tenors=tuple(str(t) for t in parsed_tenors),
            maturities=maturities,
            times=times,
            money_market_year_fractions=MappingProxyType(mm_year_fractions),
            fixed_legs=MappingProxyType(fixed_legs),
            offset=offset
        )
    
    def fixed_leg(self, spot_date: date, maturity: date) -> FixedLegSchedule:
        """
        Generate a fixed leg by stepping back from (unadjusted) maturity.
        
        Dates are maturity - k * interval for k = 0, 1, ... while after the
        spot date, then reversed; each is business-day adjusted.
        """
        conv = self.conventions
        unadjusted: List[date] = []
        current = maturity
        step = 1
        while current > spot_date:
            unadjusted.append(current)
            current = self.swap_interval.times(step).subtract_from(maturity)
            step += 1
        unadjusted.reverse()
        
        payments = []
        prev = spot_date
        for d in unadjusted:
            adjusted = adjust_business_day(d, conv.business_day, conv.holidays)
            payments.append(FixedLegPayment(
                payment_date=adjusted,
                payment_time=year_fraction(spot_date, adjusted, conv.curve_day_count),
                accrual_fraction=year_fraction(prev, adjusted, conv.swap_day_count)
            ))
            prev = adjusted
        return FixedLegSchedule(payments)
    
    @staticmethod
    def _parse_kind(kind: Union[InstrumentKind, str]) -> InstrumentKind:
        if kind is None:
            raise ConfigurationError("Instrument kind must not be None")
        if isinstance(kind, InstrumentKind):
            return kind
        return InstrumentKind.from_string(str(kind))
    
    @staticmethod
    def _parse_tenor(tenor) -> Tenor:
        if tenor is None:
            raise ConfigurationError("Tenor must not be None")
        try:
            parsed = Tenor.parse(tenor)
        except (ValueError, AttributeError) as e:
            raise ConfigurationError(f"Invalid tenor {tenor!r}: {e}") from e
        if parsed.amount <= 0:
            raise ConfigurationError(f"Tenor must be positive, got {tenor}")
        return parsed


__all__ = [
    "CurveNodeSchedule",
    "CurveNodeScheduleBuilder",
]
