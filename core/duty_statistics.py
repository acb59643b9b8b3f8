"""
Duty Day Statistics
===================

Calendar-day counts derived from consolidated duty periods, all in home
base local days (the local date of each sign-on):

- Days off in the fleet's flight-time period (28 or 30 days)
- Duty days in the rolling 11-day period
- Consecutive duty days ending at the most recent duty, with the number of
  consecutive early starts (sign-on before 0700) and late nights among them

A period of N days is the N calendar days ending on as_of, as_of included.

References: FRMS Ruleset A320/B737 Rev 4.1 and A380/A330/B787 Rev 4, days free of duty
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple

import pytz

from core.parameters import DutyPeriodParameters
from models.data_models import DutyDayStatistics, FRMSDuty


class DutyDayCounter:
    """Counts duty days, days off and consecutive duty streaks"""

    def __init__(self, params: DutyPeriodParameters = None):
        self.params = params or DutyPeriodParameters()
        self.home_tz = pytz.timezone(self.params.home_timezone)

    def duty_day(self, duty: FRMSDuty) -> date:
        return duty.sign_on.astimezone(self.home_tz).date()

    def duty_days(self, duties: Iterable[FRMSDuty], as_of: date, period_days: int) -> Set[date]:
        """Distinct local duty days within the period ending on as_of"""
        if period_days < 1:
            raise ValueError(f"period_days must be >= 1, got {period_days}")
        start = as_of - timedelta(days=period_days - 1)
        return {day for day in (self.duty_day(d) for d in duties) if start <= day <= as_of}

    def days_off(self, duties: Iterable[FRMSDuty], as_of: date, period_days: int) -> int:
        return period_days - len(self.duty_days(duties, as_of, period_days))

    def duty_days_in_window(self, duties: Iterable[FRMSDuty], as_of: date,
                            window_days: Optional[int] = None) -> int:
        window_days = window_days or self.params.duty_day_window_days
        return len(self.duty_days(duties, as_of, window_days))

    def consecutive_info(self, duties: Iterable[FRMSDuty], as_of: date) -> Tuple[int, int, int]:
        """(consecutive duty days, consecutive early starts, consecutive late nights)"""
        past = sorted((d for d in duties if self.duty_day(d) <= as_of), key=lambda d: d.sign_on)
        if not past:
            return 0, 0, 0

        current = self.duty_day(past[-1])
        if (as_of - current).days > 1:
            # Streak already broken by a day off
            return 0, 0, 0

        days: Set[date] = set()
        early: Dict[date, bool] = {}
        late: Dict[date, bool] = {}
        for duty in reversed(past):
            day = self.duty_day(duty)
            if day != current and day != current - timedelta(days=1):
                break
            days.add(day)
            if duty.sign_on.astimezone(self.home_tz).hour < self.params.early_start_hour:
                early[day] = True
            if duty.time_class.is_night_operation:
                late[day] = True
            current = day

        ordered: List[date] = sorted(days, reverse=True)
        return len(days), self._streak(ordered, early), self._streak(ordered, late)

    @staticmethod
    def _streak(days: List[date], flags: Dict[date, bool]) -> int:
        count = 0
        for day in days:
            if not flags.get(day):
                break
            count += 1
        return count

    def summarize(self, duties: Iterable[FRMSDuty], as_of: date, period_days: int) -> DutyDayStatistics:
        duties = list(duties)
        consecutive, early_starts, late_nights = self.consecutive_info(duties, as_of)
        window = self.params.duty_day_window_days
        return DutyDayStatistics(
            period_days=period_days,
            days_off=self.days_off(duties, as_of, period_days),
            duty_days_window=window,
            duty_days_in_window=self.duty_days_in_window(duties, as_of, window),
            consecutive_duties=consecutive,
            consecutive_early_starts=early_starts,
            consecutive_late_nights=late_nights,
        )
