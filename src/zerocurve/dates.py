"""
Date utilities for curve construction.

Provides:
- Tenor parsing ("1M", "2Y", "10D") into Tenor period values
- Calendar tenor arithmetic (month ends clamped, no business-day rolling)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Tuple, Union
import calendar
import re


class DateUtils:
    """Utility class for date manipulation in rates contexts."""
    
    # Tenor regex pattern: number + unit (D/W/M/Y)
    TENOR_PATTERN = re.compile(r'^(\d+)([DWMY])$', re.IGNORECASE)
    
    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Parse a tenor string into (amount, unit).
        
        Args:
            tenor: Tenor string like "1D", "3M", "2Y"
            
        Returns:
            Tuple of (amount, unit) where unit is D/W/M/Y
            
        Raises:
            ValueError: If tenor format is invalid
        """
        match = DateUtils.TENOR_PATTERN.match(tenor.upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")
        
        return int(match.group(1)), match.group(2).upper()
    
    @staticmethod
    def add_months(start: date, months: int) -> date:
        """Add (possibly negative) months, clamping the day to the month end."""
        year = start.year + (start.month + months - 1) // 12
        month = (start.month + months - 1) % 12 + 1
        day = min(start.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)


@dataclass(frozen=True)
class Tenor:
    """
    A calendar period such as 3M or 10Y.
    
    Attributes:
        amount: Number of units (non-negative)
        unit: One of D, W, M, Y
    """
    amount: int
    unit: str
    
    @classmethod
    def parse(cls, tenor: Union[str, "Tenor"]) -> "Tenor":
        """Build a Tenor from a string, passing Tenor instances through."""
        if isinstance(tenor, Tenor):
            return tenor
        amount, unit = DateUtils.parse_tenor(tenor)
        return cls(amount, unit)
    
    @property
    def is_month_based(self) -> bool:
        """True for whole month or year periods."""
        return self.unit in ("M", "Y")
    
    @property
    def months(self) -> int:
        """Length in months (month based tenors only)."""
        if self.unit == "M":
            return self.amount
        if self.unit == "Y":
            return 12 * self.amount
        raise ValueError(f"Tenor {self} is not expressed in months or years")
    
    def times(self, k: int) -> "Tenor":
        """Return the tenor multiplied by k."""
        return Tenor(self.amount * k, self.unit)
    
    def add_to(self, start: date) -> date:
        """Shift a date forward by this tenor."""
        if self.unit == "D":
            return start + timedelta(days=self.amount)
        if self.unit == "W":
            return start + timedelta(weeks=self.amount)
        return DateUtils.add_months(start, self.months)
    
    def subtract_from(self, end: date) -> date:
        """Shift a date backward by this tenor."""
        if self.unit == "D":
            return end - timedelta(days=self.amount)
        if self.unit == "W":
            return end - timedelta(weeks=self.amount)
        return DateUtils.add_months(end, -self.months)
    
    def __str__(self) -> str:
        return f"{self.amount}{self.unit}"


__all__ = [
    "DateUtils",
    "Tenor",
]
