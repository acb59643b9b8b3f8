"""
Rolling Window Aggregation Tests

Run: python -m pytest tests/test_rolling_window.py -v
"""

from datetime import date, datetime, timedelta
import random

import pytest

from core.rolling_window import RollingWindowAggregator, sum_hours, window_start
from models.data_models import FlightRecord, HoursSource


AS_OF = date(2024, 6, 30)


def make_record(identifier, day, block=1.0, sim=0.0):
    return FlightRecord(identifier=identifier, date=day, block_time=block, sim_time=sim)


def naive_sum(records, window_days, as_of):
    total = 0.0
    for r in records:
        if r.date is not None and as_of - timedelta(days=window_days) <= r.date <= as_of:
            total += r.flight_hours
    return total


class TestBoundaries:

    def test_record_exactly_window_days_back_is_included(self):
        records = [make_record('edge', AS_OF - timedelta(days=7), block=2.5)]
        assert sum_hours(records, 7, AS_OF) == 2.5
        assert RollingWindowAggregator(records).sum_hours(7, AS_OF) == 2.5

    def test_record_one_day_further_back_is_excluded(self):
        records = [make_record('old', AS_OF - timedelta(days=8), block=2.5)]
        assert sum_hours(records, 7, AS_OF) == 0.0
        assert RollingWindowAggregator(records).sum_hours(7, AS_OF) == 0.0

    def test_as_of_day_and_future_records(self):
        records = [make_record('today', AS_OF, 1.0), make_record('tomorrow', AS_OF + timedelta(days=1), 5.0)]
        assert RollingWindowAggregator(records).sum_hours(7, AS_OF) == 1.0

    def test_zero_day_window_is_as_of_only(self):
        records = [make_record('a', AS_OF, 1.0), make_record('b', AS_OF - timedelta(days=1), 2.0)]
        assert RollingWindowAggregator(records).sum_hours(0, AS_OF) == 1.0

    def test_negative_window_rejected(self):
        with pytest.raises(ValueError):
            window_start(AS_OF, -1)
        with pytest.raises(ValueError):
            RollingWindowAggregator([]).sum_hours(-1, AS_OF)

    def test_datetime_as_of_uses_its_date(self):
        records = [make_record('a', AS_OF, 1.0)]
        assert RollingWindowAggregator(records).sum_hours(7, datetime(2024, 6, 30, 23, 59)) == 1.0


class TestContributions:

    def test_simulator_hours_count(self):
        records = [make_record('sim', AS_OF, block=0.0, sim=4.0), make_record('flt', AS_OF, block=1.5)]
        assert RollingWindowAggregator(records).sum_hours(28, AS_OF) == pytest.approx(5.5)

    def test_undated_records_ignored(self):
        records = [make_record('bad', None, 9.0), make_record('ok', AS_OF, 1.0)]
        aggregator = RollingWindowAggregator(records)
        assert len(aggregator) == 1
        assert aggregator.sum_hours(365, AS_OF) == 1.0
        assert sum_hours(records, 365, AS_OF) == 1.0

    def test_empty(self):
        assert RollingWindowAggregator([]).sum_hours(28, AS_OF) == 0.0

    def test_order_does_not_matter(self):
        records = [make_record(str(i), AS_OF - timedelta(days=i), 1.0 + i / 10) for i in range(40)]
        shuffled = list(records)
        random.Random(7).shuffle(shuffled)
        assert (RollingWindowAggregator(shuffled).sum_hours(28, AS_OF)
                == pytest.approx(RollingWindowAggregator(records).sum_hours(28, AS_OF)))

    def test_duty_source_reads_duty_hours(self):
        class Duty:
            def __init__(self, day, hours):
                self.date = day
                self.duty_hours = hours

        duties = [Duty(AS_OF, 10.0), Duty(AS_OF - timedelta(days=10), 8.0)]
        aggregator = RollingWindowAggregator(duties, HoursSource.DUTY)
        assert aggregator.sum_hours(7, AS_OF) == 10.0
        assert aggregator.sum_hours(14, AS_OF) == 18.0


class TestAgainstNaiveReference:

    @pytest.mark.parametrize("seed", [1, 2, 3])
    @pytest.mark.parametrize("window_days", [0, 1, 7, 14, 28, 30, 365])
    def test_matches_reference(self, seed, window_days):
        rng = random.Random(seed)
        records = [
            make_record(str(i), AS_OF - timedelta(days=rng.randint(-5, 400)), round(rng.uniform(0, 15), 2))
            for i in range(300)
        ]
        expected = naive_sum(records, window_days, AS_OF)
        assert sum_hours(records, window_days, AS_OF) == pytest.approx(expected)
        assert RollingWindowAggregator(records).sum_hours(window_days, AS_OF) == pytest.approx(expected)

    def test_results_for_several_windows(self):
        records = [make_record(str(i), AS_OF - timedelta(days=i), 1.0) for i in range(400)]
        results = RollingWindowAggregator(records).results([7, 28, 365], AS_OF)
        assert [r.window_days for r in results] == [7, 28, 365]
        assert [r.hours for r in results] == [8.0, 29.0, 366.0]
        assert all(r.source is HoursSource.FLIGHT and r.as_of == AS_OF for r in results)
