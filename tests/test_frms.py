"""
FRMS Limit Evaluation Tests

Run: python -m pytest tests/test_frms.py -v
"""

from datetime import date, timedelta

import pytest

from core.frms import FRMSLimitEvaluator
from core.parameters import UtilizationBands
from core.rolling_window import RollingWindowAggregator
from models.data_models import (
    FleetLimits, FlightRecord, FRMSFleet, HoursSource, RollingWindowResult, UtilizationBand
)


AS_OF = date(2024, 6, 30)


def _result(days, hours, source=HoursSource.FLIGHT):
    return RollingWindowResult(source=source, window_days=days, as_of=AS_OF, hours=hours)


class TestBands:

    def test_ninety_five_of_hundred_is_critical(self):
        u = FRMSLimitEvaluator().evaluate_pair(HoursSource.FLIGHT, 28, 95.0, 100.0)
        assert u.ratio == pytest.approx(0.95)
        assert u.band is UtilizationBand.CRITICAL
        assert u.remaining_hours == pytest.approx(5.0)

    @pytest.mark.parametrize("hours,band", [
        (0.0, UtilizationBand.NOMINAL),
        (79.9, UtilizationBand.NOMINAL),
        (80.0, UtilizationBand.WARNING),
        (89.9, UtilizationBand.WARNING),
        (90.0, UtilizationBand.CRITICAL),
    ])
    def test_thresholds(self, hours, band):
        assert FRMSLimitEvaluator().evaluate_pair(HoursSource.FLIGHT, 28, hours, 100.0).band is band

    def test_ratio_capped_hours_not(self):
        u = FRMSLimitEvaluator().evaluate_pair(HoursSource.DUTY, 7, 72.5, 60.0)
        assert u.ratio == 1.0
        assert u.hours == 72.5
        assert u.is_exceeded
        assert u.remaining_hours == 0.0

    @pytest.mark.parametrize("limit", [None, 0.0, -5.0])
    def test_unconfigured_limit_omitted(self, limit):
        assert FRMSLimitEvaluator().evaluate_pair(HoursSource.FLIGHT, 7, 25.0, limit) is None

    def test_custom_thresholds(self):
        bands = UtilizationBands(thresholds={UtilizationBand.CRITICAL: 0.75, UtilizationBand.WARNING: 0.5})
        assert FRMSLimitEvaluator(bands).evaluate_pair(HoursSource.FLIGHT, 28, 76.0, 100.0).band \
            is UtilizationBand.CRITICAL


class TestFleetLimits:

    def test_narrowbody_has_no_seven_day_flight_limit(self):
        limits = FleetLimits.for_fleet(FRMSFleet.A320_B737)
        utilizations = FRMSLimitEvaluator().evaluate(
            [_result(7, 20.0), _result(28, 50.0), _result(365, 500.0)],
            [_result(7, 30.0, HoursSource.DUTY), _result(14, 40.0, HoursSource.DUTY)],
            limits,
        )
        flight_days = [u.window_days for u in utilizations if u.source is HoursSource.FLIGHT]
        duty_days = [u.window_days for u in utilizations if u.source is HoursSource.DUTY]
        assert flight_days == [28, 365]
        assert duty_days == [7, 14]

    def test_widebody_windows(self):
        limits = FleetLimits.for_fleet(FRMSFleet.A380_A330_B787)
        assert limits.flight_windows() == [(7, 30.0), (30, 100.0), (365, 900.0)]
        assert limits.duty_windows() == [(7, 60.0), (14, 100.0)]

    def test_evaluate_aggregators(self):
        records = [FlightRecord(identifier=str(i), date=AS_OF - timedelta(days=i), block_time=4.0)
                   for i in range(30)]
        flights = RollingWindowAggregator(records)
        duties = RollingWindowAggregator([], HoursSource.DUTY)
        limits = FleetLimits.for_fleet(FRMSFleet.A380_A330_B787)

        utilizations = FRMSLimitEvaluator().evaluate_aggregators(flights, duties, limits, AS_OF)
        by_window = {(u.source, u.window_days): u for u in utilizations}

        seven = by_window[(HoursSource.FLIGHT, 7)]
        assert seven.hours == 32.0 and seven.is_exceeded
        assert by_window[(HoursSource.FLIGHT, 30)].hours == 120.0
        assert by_window[(HoursSource.DUTY, 14)].band is UtilizationBand.NOMINAL
