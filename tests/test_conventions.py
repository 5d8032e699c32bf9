"""
Unit tests for conventions module.
"""

from datetime import date
import pytest

from zerocurve.conventions import (
    DayCount,
    BusinessDayConvention,
    CurveConventions,
    adjust_business_day,
    is_business_day,
    signed_year_fraction,
    year_fraction,
)


class TestDayCount:
    """Tests for day count conventions."""
    
    def test_act_360(self):
        """Test ACT/360 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 91 days
        
        yf = year_fraction(start, end, DayCount.ACT_360)
        assert abs(yf - 91 / 360) < 1e-10
    
    def test_act_365(self):
        """Test ACT/365F day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 91 days
        
        yf = year_fraction(start, end, DayCount.ACT_365)
        assert abs(yf - 91 / 365) < 1e-10
    
    def test_act_act_across_year_end(self):
        """ACT/ACT splits the period at the year boundary."""
        yf = year_fraction(date(2023, 7, 1), date(2024, 7, 1), DayCount.ACT_ACT)
        expected = 184 / 365 + 182 / 366
        assert abs(yf - expected) < 1e-12
    
    def test_thirty_360(self):
        """Test 30/360 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 3 months
        
        yf = year_fraction(start, end, DayCount.THIRTY_360)
        assert abs(yf - 90 / 360) < 1e-10
    
    def test_thirty_360_month_end(self):
        """31st is treated as 30th when the start is a month end."""
        yf = year_fraction(date(2024, 1, 31), date(2024, 7, 31), DayCount.THIRTY_360)
        assert abs(yf - 0.5) < 1e-12
    
    def test_year_fraction_same_date(self):
        """Test year fraction for same date returns 0."""
        d = date(2024, 1, 15)
        assert year_fraction(d, d, DayCount.ACT_360) == 0.0
    
    def test_signed_year_fraction(self):
        """Reversed dates give a negative fraction."""
        a, b = date(2024, 1, 15), date(2024, 1, 12)
        assert signed_year_fraction(a, b, DayCount.ACT_365) == pytest.approx(-3 / 365)
        assert signed_year_fraction(b, a, DayCount.ACT_365) == pytest.approx(3 / 365)
    
    def test_from_string(self):
        assert DayCount.from_string("act/360") == DayCount.ACT_360
        assert DayCount.from_string("ACT/365F") == DayCount.ACT_365
        assert DayCount.from_string("30/360") == DayCount.THIRTY_360
        with pytest.raises(ValueError):
            DayCount.from_string("BUS/252")


class TestBusinessDays:
    """Tests for business day adjustment."""
    
    def test_weekend(self):
        assert not is_business_day(date(2024, 2, 17))  # Saturday
        assert is_business_day(date(2024, 2, 19))
    
    def test_holiday(self):
        assert not is_business_day(date(2024, 2, 19), {date(2024, 2, 19)})
    
    def test_following(self):
        adjusted = adjust_business_day(date(2024, 2, 17), BusinessDayConvention.FOLLOWING)
        assert adjusted == date(2024, 2, 19)
    
    def test_preceding(self):
        adjusted = adjust_business_day(date(2024, 2, 17), BusinessDayConvention.PRECEDING)
        assert adjusted == date(2024, 2, 16)
    
    def test_modified_following_month_end(self):
        """Sunday 31 March 2024 rolls back to Friday 29 March."""
        adjusted = adjust_business_day(
            date(2024, 3, 31), BusinessDayConvention.MODIFIED_FOLLOWING
        )
        assert adjusted == date(2024, 3, 29)
    
    def test_unadjusted(self):
        d = date(2024, 2, 17)
        assert adjust_business_day(d, BusinessDayConvention.UNADJUSTED) == d
    
    def test_from_string(self):
        assert BusinessDayConvention.from_string("Modified Following") == \
            BusinessDayConvention.MODIFIED_FOLLOWING
        assert BusinessDayConvention.from_string("MF") == BusinessDayConvention.MODIFIED_FOLLOWING
        assert BusinessDayConvention.from_string("following") == BusinessDayConvention.FOLLOWING


class TestCurveConventions:
    """Tests for convention presets."""
    
    def test_defaults(self):
        conv = CurveConventions()
        assert conv.money_market_day_count == DayCount.ACT_360
        assert conv.swap_day_count == DayCount.THIRTY_360
        assert conv.curve_day_count == DayCount.ACT_365
        assert conv.swap_interval == "6M"
    
    def test_eur_preset(self):
        conv = CurveConventions.isda_eur()
        assert conv.swap_interval == "1Y"
    
    def test_gbp_preset(self):
        conv = CurveConventions.isda_gbp()
        assert conv.money_market_day_count == DayCount.ACT_365
    
    def test_with_holidays(self):
        conv = CurveConventions.isda_usd().with_holidays([date(2024, 7, 4)])
        assert date(2024, 7, 4) in conv.holidays
        assert conv.swap_interval == "6M"
