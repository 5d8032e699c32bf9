"""
Unit tests for curve node schedule construction.
"""

from datetime import date
import pytest

from zerocurve.conventions import CurveConventions, DayCount
from zerocurve.curves import CurveNodeScheduleBuilder, InstrumentKind
from zerocurve.exceptions import ConfigurationError

MM = InstrumentKind.MONEY_MARKET
SWAP = InstrumentKind.SWAP


@pytest.fixture
def builder():
    return CurveNodeScheduleBuilder(CurveConventions.isda_usd())


class TestNodeTimes:
    
    def test_scenario_times(self, builder):
        schedule = builder.build(date(2024, 1, 15), [MM, MM, SWAP, SWAP], ["1M", "3M", "1Y", "2Y"])
        
        assert schedule.number_of_nodes == 4
        assert schedule.maturities == (
            date(2024, 2, 15), date(2024, 4, 15), date(2025, 1, 15), date(2026, 1, 15)
        )
        expected = [31 / 365, 91 / 365, 366 / 365, 731 / 365]
        assert list(schedule.times) == pytest.approx(expected)
        assert schedule.offset == 0.0
        assert schedule.valuation_date == date(2024, 1, 15)
    
    def test_money_market_year_fractions(self, builder):
        schedule = builder.build(date(2024, 1, 15), [MM, MM, SWAP], ["1M", "3M", "1Y"])
        assert dict(schedule.money_market_year_fractions) == {
            0: pytest.approx(31 / 360),
            1: pytest.approx(91 / 360),
        }
        assert set(schedule.fixed_legs) == {2}
    
    def test_node_maps_are_read_only(self, builder):
        schedule = builder.build(date(2024, 1, 15), [MM, SWAP], ["3M", "1Y"])
        with pytest.raises(TypeError):
            schedule.money_market_year_fractions[0] = 0.5
        with pytest.raises(TypeError):
            schedule.fixed_legs[0] = schedule.fixed_legs[1]
    
    def test_maturity_adjusted_for_weekend(self, builder):
        """Wednesday spot + 1M lands on Saturday 17 Feb 2024."""
        schedule = builder.build(date(2024, 1, 17), [MM], ["1M"])
        assert schedule.maturities[0] == date(2024, 2, 19)
        assert schedule.times[0] == pytest.approx(33 / 365)
    
    def test_maturity_adjusted_for_holiday(self):
        conv = CurveConventions.isda_usd().with_holidays([date(2024, 2, 19)])
        schedule = CurveNodeScheduleBuilder(conv).build(date(2024, 1, 17), [MM], ["1M"])
        assert schedule.maturities[0] == date(2024, 2, 20)
    
    def test_kinds_from_strings(self, builder):
        schedule = builder.build(date(2024, 1, 15), ["MM", "Swap"], ["3M", "1Y"])
        assert schedule.kinds == (MM, SWAP)


class TestFixedLegs:
    
    def test_semi_annual_leg(self, builder):
        schedule = builder.build(date(2024, 1, 15), [MM, SWAP], ["3M", "2Y"])
        leg = schedule.fixed_legs[1]
        
        assert leg.number_of_payments == 4
        assert [p.payment_date for p in leg] == [
            date(2024, 7, 15), date(2025, 1, 15), date(2025, 7, 15), date(2026, 1, 15)
        ]
        assert [p.accrual_fraction for p in leg] == pytest.approx([0.5] * 4)
        assert [p.payment_time for p in leg] == pytest.approx(
            [182 / 365, 366 / 365, 547 / 365, 731 / 365]
        )
    
    def test_last_payment_carries_notional(self, builder):
        leg = builder.fixed_leg(date(2024, 1, 15), date(2025, 1, 15))
        assert leg.amount(0, 0.02) == pytest.approx(0.02 * 0.5)
        assert leg.amount(1, 0.02) == pytest.approx(1.0 + 0.02 * 0.5)
    
    def test_front_stub(self):
        """18M annual swap has a short first period."""
        conv = CurveConventions.isda_eur()
        leg = CurveNodeScheduleBuilder(conv).fixed_leg(date(2024, 1, 15), date(2025, 7, 15))
        assert [p.payment_date for p in leg] == [date(2024, 7, 15), date(2025, 7, 15)]
        assert [p.accrual_fraction for p in leg] == pytest.approx([0.5, 1.0])
    
    def test_single_period(self, builder):
        leg = builder.fixed_leg(date(2024, 1, 15), date(2024, 4, 15))
        assert leg.number_of_payments == 1
        assert leg.accrual_fraction(0) == pytest.approx(0.25)
    
    def test_payment_dates_adjusted(self):
        conv = CurveConventions(swap_interval="3M", swap_day_count=DayCount.ACT_360)
        # 17 Feb 2024 is a Saturday
        leg = CurveNodeScheduleBuilder(conv).fixed_leg(date(2024, 1, 17), date(2024, 5, 17))
        dates = [p.payment_date for p in leg]
        assert dates == [date(2024, 2, 19), date(2024, 5, 17)]
        assert leg.accrual_fraction(0) == pytest.approx(33 / 360)
        assert leg.accrual_fraction(1) == pytest.approx(88 / 360)


class TestOffset:
    
    def test_valuation_before_spot(self, builder):
        schedule = builder.build(
            date(2024, 1, 17), [MM, SWAP], ["3M", "1Y"], valuation_date=date(2024, 1, 15)
        )
        assert schedule.offset == pytest.approx(-2 / 365)
    
    def test_valuation_after_spot(self, builder):
        schedule = builder.build(
            date(2024, 1, 15), [MM, SWAP], ["3M", "1Y"], valuation_date=date(2024, 1, 17)
        )
        assert schedule.offset == pytest.approx(2 / 365)
    
    def test_valuation_after_first_maturity(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(
                date(2024, 1, 15), [MM, SWAP], ["1M", "1Y"], valuation_date=date(2024, 3, 1)
            )


class TestValidation:
    
    def test_non_ascending_tenors(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(date(2024, 1, 15), [SWAP, SWAP], ["1Y", "6M"])
    
    def test_duplicate_tenors(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(date(2024, 1, 15), [MM, SWAP], ["1Y", "12M"])
    
    def test_zero_first_tenor(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(date(2024, 1, 15), [MM, SWAP], ["0M", "1Y"])
    
    def test_mismatched_lengths(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(date(2024, 1, 15), [MM], ["3M", "1Y"])
    
    def test_empty(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(date(2024, 1, 15), [], [])
    
    def test_missing_spot(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(None, [MM], ["3M"])
    
    def test_bad_tenor(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(date(2024, 1, 15), [MM], ["three months"])
    
    def test_unknown_kind(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(date(2024, 1, 15), ["FRA"], ["3M"])
    
    def test_none_kind(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(date(2024, 1, 15), [None], ["3M"])
    
    @pytest.mark.parametrize("interval", ["10D", "2W", "0M", "six months"])
    def test_swap_interval_must_be_months(self, interval):
        with pytest.raises(ConfigurationError):
            CurveNodeScheduleBuilder(CurveConventions(swap_interval=interval))
