"""
Duty Day Statistics Tests

Run: python -m pytest tests/test_duty_statistics.py -v
"""

from datetime import date, datetime, timedelta

import pytest
import pytz

from core.duty_statistics import DutyDayCounter
from core.parameters import DutyPeriodParameters
from models.data_models import FRMSDuty, OperationTimeClass


AS_OF = date(2024, 6, 30)


def make_duty(day, hour=9, hours=8.0, time_class=OperationTimeClass.DAY):
    sign_on = datetime(day.year, day.month, day.day, hour, 0, tzinfo=pytz.utc)
    return FRMSDuty(date=day, sign_on=sign_on, sign_off=sign_on + timedelta(hours=hours),
                    flight_time=hours - 1.25, time_class=time_class)


def days_ago(*offsets, **kwargs):
    return [make_duty(AS_OF - timedelta(days=n), **kwargs) for n in offsets]


class TestDayCounts:

    def test_days_off_in_28_days(self):
        duties = days_ago(0, 1, 2, 10, 27)
        assert DutyDayCounter().days_off(duties, AS_OF, 28) == 23

    def test_period_includes_as_of_only_back_to_n_minus_one_days(self):
        # 28 days before as_of is outside a 28-day period
        assert DutyDayCounter().days_off(days_ago(28), AS_OF, 28) == 28
        assert DutyDayCounter().days_off(days_ago(28), AS_OF, 30) == 29

    def test_two_duties_on_one_day_count_once(self):
        duties = [make_duty(AS_OF, hour=1, hours=3.0), make_duty(AS_OF, hour=12, hours=3.0)]
        assert DutyDayCounter().days_off(duties, AS_OF, 28) == 27

    def test_future_duties_ignored(self):
        assert DutyDayCounter().days_off(days_ago(-1, -2), AS_OF, 28) == 28

    def test_duty_days_in_11_days(self):
        duties = days_ago(0, 3, 5, 10, 11, 15)
        assert DutyDayCounter().duty_days_in_window(duties, AS_OF) == 4

    def test_custom_window(self):
        duties = days_ago(0, 3, 5, 10)
        assert DutyDayCounter().duty_days_in_window(duties, AS_OF, window_days=7) == 3

    def test_days_counted_in_home_base_time(self):
        # 20:00Z on the 29th is 06:00 on the 30th in Sydney
        duty = make_duty(date(2024, 6, 29), hour=20)
        counter = DutyDayCounter(DutyPeriodParameters(home_timezone='Australia/Sydney'))
        assert counter.duty_day(duty) == AS_OF
        assert counter.duty_days([duty], AS_OF, 1) == {AS_OF}

    @pytest.mark.parametrize("period", [0, -5])
    def test_invalid_period_raises(self, period):
        with pytest.raises(ValueError):
            DutyDayCounter().days_off([], AS_OF, period)


class TestConsecutive:

    def test_streak_ending_today(self):
        assert DutyDayCounter().consecutive_info(days_ago(0, 1, 2, 3, 6), AS_OF) == (4, 0, 0)

    def test_streak_ending_yesterday_still_counts(self):
        assert DutyDayCounter().consecutive_info(days_ago(1, 2), AS_OF)[0] == 2

    def test_day_off_before_today_resets(self):
        assert DutyDayCounter().consecutive_info(days_ago(2, 3, 4), AS_OF) == (0, 0, 0)

    def test_empty(self):
        assert DutyDayCounter().consecutive_info([], AS_OF) == (0, 0, 0)

    def test_early_starts_stop_at_first_normal_start(self):
        duties = days_ago(0, 1, hour=5) + days_ago(2, hour=9) + days_ago(3, hour=5)
        consecutive, early_starts, _ = DutyDayCounter().consecutive_info(duties, AS_OF)
        assert consecutive == 4
        assert early_starts == 2

    def test_late_nights(self):
        duties = (days_ago(0, 1, 2, hour=22, hours=4.0, time_class=OperationTimeClass.LATE_NIGHT)
                  + days_ago(3, hour=20, hours=8.0, time_class=OperationTimeClass.BACK_OF_CLOCK)
                  + days_ago(4))
        assert DutyDayCounter().consecutive_info(duties, AS_OF) == (5, 0, 4)

    def test_duties_after_as_of_ignored(self):
        duties = days_ago(-1, 0, 1)
        assert DutyDayCounter().consecutive_info(duties, AS_OF)[0] == 2


class TestSummary:

    def test_summarize(self):
        duties = days_ago(0, 1, 2, 9, 20, hour=6)
        stats = DutyDayCounter().summarize(duties, AS_OF, 28)
        assert stats.period_days == 28
        assert stats.days_off == 23
        assert stats.duty_days_window == 11
        assert stats.duty_days_in_window == 4
        assert stats.consecutive_duties == 3
        assert stats.consecutive_early_starts == 3
        assert stats.consecutive_late_nights == 0
