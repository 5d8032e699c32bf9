"""
Day count conventions and business day adjustments for curve instruments.

Supported Day Counts:
- ACT/360: Actual days / 360 (money markets)
- ACT/365F: Actual days / 365 (curve time axis)
- ACT/ACT: ISDA actual/actual, split at year boundaries
- 30/360: 30 days per month / 360 (swap fixed legs)

Business Day Conventions:
- Modified Following: Move to next business day, unless it falls in next month (then previous)
- Following: Move to next business day
- Preceding: Move to previous business day
- Unadjusted: Leave the date alone

Curve conventions bundle everything the bootstrapper needs to turn
instrument tenors into node times and fixed leg schedules.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Optional
import calendar


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365F"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"
    
    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT365": cls.ACT_365,
            "ACT/365F": cls.ACT_365,
            "ACT/365FIXED": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "ACT/ACTISDA": cls.ACT_ACT,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
            "30U/360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    FOLLOWING = "Following"
    PRECEDING = "Preceding"
    UNADJUSTED = "Unadjusted"
    
    @classmethod
    def from_string(cls, s: str) -> "BusinessDayConvention":
        """Parse business day convention from string (case/space insensitive)."""
        key = s.upper().replace(" ", "").replace("_", "")
        for member in cls:
            if member.value.upper() == key or member.name.replace("_", "") == key:
                return member
        if key == "MF":
            return cls.MODIFIED_FOLLOWING
        raise ValueError(f"Unknown business day convention: {s}")


@dataclass(frozen=True)
class CurveConventions:
    """
    Container for yield curve instrument conventions.
    
    Attributes:
        money_market_day_count: Accrual day count of deposits
        swap_day_count: Accrual day count of swap fixed legs
        swap_interval: Fixed leg payment interval as a tenor ("6M", "1Y")
        curve_day_count: Day count of the curve time axis
        business_day: Business day adjustment rule for maturities and payments
        holidays: Non-business days on top of weekends
    """
    money_market_day_count: DayCount = DayCount.ACT_360
    swap_day_count: DayCount = DayCount.THIRTY_360
    swap_interval: str = "6M"
    curve_day_count: DayCount = DayCount.ACT_365
    business_day: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    holidays: FrozenSet[date] = field(default_factory=frozenset)
    
    def with_holidays(self, holidays: Iterable[date]) -> "CurveConventions":
        """Return a copy using the given holiday calendar."""
        return CurveConventions(
            money_market_day_count=self.money_market_day_count,
            swap_day_count=self.swap_day_count,
            swap_interval=self.swap_interval,
            curve_day_count=self.curve_day_count,
            business_day=self.business_day,
            holidays=frozenset(holidays)
        )
    
    # Standard ISDA-style curve conventions
    @classmethod
    def isda_usd(cls) -> "CurveConventions":
        """USD: ACT/360 deposits, semi-annual 30/360 fixed leg."""
        return cls(
            money_market_day_count=DayCount.ACT_360,
            swap_day_count=DayCount.THIRTY_360,
            swap_interval="6M",
            curve_day_count=DayCount.ACT_365,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING
        )
    
    @classmethod
    def isda_eur(cls) -> "CurveConventions":
        """EUR: ACT/360 deposits, annual 30/360 fixed leg."""
        return cls(
            money_market_day_count=DayCount.ACT_360,
            swap_day_count=DayCount.THIRTY_360,
            swap_interval="1Y",
            curve_day_count=DayCount.ACT_365,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING
        )
    
    @classmethod
    def isda_gbp(cls) -> "CurveConventions":
        """GBP: ACT/365F deposits, semi-annual ACT/365F fixed leg."""
        return cls(
            money_market_day_count=DayCount.ACT_365,
            swap_day_count=DayCount.ACT_365,
            swap_interval="6M",
            curve_day_count=DayCount.ACT_365,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING
        )


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.
    
    Args:
        start: Start date
        end: End date
        day_count: Day count convention
        
    Returns:
        Year fraction as float (0.0 when end is not after start)
    
    Conventions:
        ACT/360: (end - start).days / 360
        ACT/365F: (end - start).days / 365
        ACT/ACT: Actual days / actual days in period's year(s)
        30/360: Assumes 30 days per month, 360 days per year
    """
    if start >= end:
        return 0.0
    
    actual_days = (end - start).days
    
    if day_count == DayCount.ACT_360:
        return actual_days / 360.0
    
    elif day_count == DayCount.ACT_365:
        return actual_days / 365.0
    
    elif day_count == DayCount.ACT_ACT:
        if start.year == end.year:
            days_in_year = 366 if calendar.isleap(start.year) else 365
            return actual_days / days_in_year
        total = 0.0
        for year in range(start.year, end.year + 1):
            days_in_year = 366 if calendar.isleap(year) else 365
            period_start = start if year == start.year else date(year, 1, 1)
            period_end = end if year == end.year else date(year + 1, 1, 1)
            total += (period_end - period_start).days / days_in_year
        return total
    
    elif day_count == DayCount.THIRTY_360:
        # 30/360 US (bond basis)
        d1 = min(start.day, 30)
        d2 = end.day
        if d2 == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0
    
    else:
        raise ValueError(f"Unknown day count: {day_count}")


def signed_year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """Year fraction from start to end, negative when end precedes start."""
    if end < start:
        return -year_fraction(end, start, day_count)
    return year_fraction(start, end, day_count)


def is_business_day(d: date, holidays: Optional[Iterable[date]] = None) -> bool:
    """
    Check if a date is a business day.
    
    Uses weekend-only calendar by default (Saturday/Sunday are non-business days).
    
    Args:
        d: Date to check
        holidays: Optional collection of holiday dates
        
    Returns:
        True if business day, False otherwise
    """
    # Weekend check (0 = Monday, 5 = Saturday, 6 = Sunday)
    if d.weekday() >= 5:
        return False
    
    if holidays and d in holidays:
        return False
    
    return True


def adjust_business_day(
    d: date, 
    convention: BusinessDayConvention,
    holidays: Optional[Iterable[date]] = None
) -> date:
    """
    Adjust a date according to business day convention.
    
    Args:
        d: Date to adjust
        convention: Business day adjustment rule
        holidays: Optional collection of holiday dates
        
    Returns:
        Adjusted date
    """
    if convention == BusinessDayConvention.UNADJUSTED or is_business_day(d, holidays):
        return d
    
    if convention == BusinessDayConvention.FOLLOWING:
        return _roll(d, 1, holidays)
    
    elif convention == BusinessDayConvention.PRECEDING:
        return _roll(d, -1, holidays)
    
    elif convention == BusinessDayConvention.MODIFIED_FOLLOWING:
        adjusted = _roll(d, 1, holidays)
        # If we crossed into next month, go preceding instead
        if adjusted.month != d.month:
            adjusted = _roll(d, -1, holidays)
        return adjusted
    
    raise ValueError(f"Unknown business day convention: {convention}")


def _roll(d: date, step: int, holidays: Optional[Iterable[date]]) -> date:
    """Step one day at a time until a business day is reached."""
    adjusted = d
    while not is_business_day(adjusted, holidays):
        adjusted += timedelta(days=step)
    return adjusted


__all__ = [
    "DayCount",
    "BusinessDayConvention", 
    "CurveConventions",
    "year_fraction",
    "signed_year_fraction",
    "is_business_day",
    "adjust_business_day",
]
