"""
Duty Period Construction
========================

Derives FRMS duty periods from logged sectors:

- Sign-on: scheduled departure (or OUT when no STD) minus the sign-on margin
  (30 min instead of 60 for the first sector of the day when it is a
  positioning sector between two domestic ports)
- Sign-off: IN plus the fleet's sign-off margin
- Consecutive sectors form one duty when the turnaround gap is at most
  3 hours and the next sign-on is on the same home-base local day (or in
  the small hours of the next one)
- The duty date is the logbook date of the first sector, the same date the
  flight-time windows use
- Each duty is classed day / late night / back of clock in home base time

References: FRMS Ruleset A320/B737 Rev 4.1 and A380/A330/B787 Rev 4, duty definitions
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Set
import logging

import numpy as np
import pandas as pd
import pytz

from core.parameters import DutyPeriodParameters
from models.data_models import DutyType, FlightRecord, FRMSDuty, OperationTimeClass
from parsers.airport_database import AirportDatabase
from parsers.logbook_fields import (
    arrival_instant, combine_utc, departure_instant, parse_utc_clock
)

logger = logging.getLogger(__name__)

LATE_NIGHT_MINUTES = 30         # More than this inside 2300-0530
BACK_OF_CLOCK_MINUTES = 120     # At least this inside 0100-0459


class DutyPeriodBuilder:
    """Builds sign-on/sign-off duty periods from flight records"""

    def __init__(self, params: DutyPeriodParameters = None):
        self.params = params or DutyPeriodParameters()
        self.home_tz = pytz.timezone(self.params.home_timezone)

    # ========================================================================
    # SIGN-ON / SIGN-OFF
    # ========================================================================

    def is_domestic(self, code: str) -> bool:
        icao = AirportDatabase.convert_to_icao(code or "")
        return len(icao) >= 2 and icao[:2] in self.params.domestic_icao_prefixes

    def sign_on_minutes(self, record: FlightRecord, first_of_day: bool = False) -> int:
        if (first_of_day and record.is_positioning
                and self.is_domestic(record.departure) and self.is_domestic(record.arrival)):
            return self.params.domestic_positioning_sign_on_minutes
        return self.params.sign_on_minutes_before_std

    def sign_on(self, std: Optional[datetime], out: Optional[datetime],
                minutes_before: Optional[int] = None) -> Optional[datetime]:
        reference = std or out
        if reference is None:
            return None
        if minutes_before is None:
            minutes_before = self.params.sign_on_minutes_before_std
        return reference - timedelta(minutes=minutes_before)

    def sign_off(self, in_time: datetime) -> datetime:
        return in_time + timedelta(minutes=self.params.sign_off_minutes_after_in)

    def local_date(self, instant_utc: datetime) -> date:
        return instant_utc.astimezone(self.home_tz).date()

    def classify_time(self, sign_on: datetime, sign_off: datetime) -> OperationTimeClass:
        """Day, late night or back of clock, from the duty's minutes in home base time"""
        if sign_off <= sign_on:
            return OperationTimeClass.DAY

        minutes = pd.date_range(sign_on, sign_off, freq='min', inclusive='left').tz_convert(self.home_tz)
        hour = np.asarray(minutes.hour)
        minute = np.asarray(minutes.minute)

        back_of_clock = (hour >= 1) & (hour < 5)
        if int(back_of_clock.sum()) >= BACK_OF_CLOCK_MINUTES:
            return OperationTimeClass.BACK_OF_CLOCK

        late_night = (hour >= 23) | (hour < 5) | ((hour == 5) & (minute < 30))
        if int(late_night.sum()) > LATE_NIGHT_MINUTES:
            return OperationTimeClass.LATE_NIGHT
        return OperationTimeClass.DAY

    # ========================================================================
    # SINGLE SECTOR
    # ========================================================================

    def duty_for_record(self, record: FlightRecord, first_of_day: bool = False) -> Optional[FRMSDuty]:
        """Duty period for one sector, None when it cannot contribute"""
        if record.date is None:
            logger.warning(f"[{record.identifier}] Skipping duty: invalid date")
            return None

        flight_time = record.flight_hours
        if flight_time <= 0 and not record.is_positioning:
            return None

        minutes_before = self.sign_on_minutes(record, first_of_day)
        std = departure_instant(record.date, record.scheduled_departure)
        out = departure_instant(record.date, record.out_time)
        in_time = arrival_instant(record.date, record.out_time, record.in_time)

        if out is not None and in_time is not None:
            start = self.sign_on(std, out, minutes_before)
            end = self.sign_off(in_time)
        else:
            if record.out_time or record.in_time:
                logger.warning(
                    f"[{record.identifier}] Can't parse OUT({record.out_time})/IN({record.in_time}); "
                    f"using scheduled times"
                )
            sta = arrival_instant(record.date, record.scheduled_departure, record.scheduled_arrival)
            if std is not None and sta is not None:
                start = self.sign_on(std, None, minutes_before)
                end = self.sign_off(sta)
            elif std is not None:
                start = self.sign_on(std, None, minutes_before)
                end = start + timedelta(
                    minutes=int(flight_time * 60) + self.params.sign_off_minutes_after_in
                )
            else:
                # No clock times at all (simulator sessions, imported history)
                start = combine_utc(record.date, time.min)
                end = start + timedelta(
                    minutes=int((flight_time + self.params.untimed_duty_padding_hours) * 60)
                )

        if record.is_simulator_session:
            duty_type = DutyType.SIMULATOR
        elif record.is_positioning:
            duty_type = DutyType.DEADHEADING
        else:
            duty_type = DutyType.OPERATING

        return FRMSDuty(
            date=record.date,
            sign_on=start,
            sign_off=end,
            flight_time=flight_time,
            night_time=max(0.0, record.night_time or 0.0),
            sectors=1,
            duty_type=duty_type,
            record_ids=(record.identifier,),
            time_class=self.classify_time(start, end),
        )

    # ========================================================================
    # CONSOLIDATION
    # ========================================================================

    def _belongs_to(self, current: List[FRMSDuty], candidate: FRMSDuty) -> bool:
        gap_hours = (candidate.sign_on - current[-1].sign_off).total_seconds() / 3600
        if gap_hours < 0 or gap_hours > self.params.max_sector_gap_hours:
            return False

        first_day = self.local_date(current[0].sign_on)
        candidate_local = candidate.sign_on.astimezone(self.home_tz)
        if candidate_local.date() == first_day:
            return True
        return (candidate_local.date() == first_day + timedelta(days=1)
                and candidate_local.hour < self.params.next_day_cutoff_hour)

    def _consolidate(self, sectors: List[FRMSDuty]) -> FRMSDuty:
        if len(sectors) == 1:
            return sectors[0]
        if any(s.duty_type is DutyType.OPERATING for s in sectors):
            duty_type = DutyType.OPERATING
        else:
            duty_type = sectors[0].duty_type
        sign_on = sectors[0].sign_on
        sign_off = max(s.sign_off for s in sectors)
        return FRMSDuty(
            date=sectors[0].date,
            sign_on=sign_on,
            sign_off=sign_off,
            flight_time=sum(s.flight_time for s in sectors),
            night_time=sum(s.night_time for s in sectors),
            sectors=len(sectors),
            duty_type=duty_type,
            record_ids=tuple(i for s in sectors for i in s.record_ids),
            time_class=self.classify_time(sign_on, sign_off),
        )

    @staticmethod
    def _chronological_key(record: FlightRecord):
        clock = parse_utc_clock(record.out_time) or parse_utc_clock(record.scheduled_departure)
        return (record.date, clock or time.min)

    def build_duties(self, records: Iterable[FlightRecord]) -> List[FRMSDuty]:
        """Consolidated duty periods, oldest first"""
        records = list(records)
        dated = sorted((r for r in records if r.date is not None), key=self._chronological_key)
        if len(dated) < len(records):
            logger.warning(f"{len(records) - len(dated)} record(s) without a valid date excluded from duties")

        seen_dates: Set[date] = set()
        sector_duties = []
        for record in dated:
            first_of_day = record.date not in seen_dates
            seen_dates.add(record.date)
            duty = self.duty_for_record(record, first_of_day=first_of_day)
            if duty is not None:
                sector_duties.append(duty)
        sector_duties.sort(key=lambda d: d.sign_on)

        duties: List[FRMSDuty] = []
        current: List[FRMSDuty] = []
        for duty in sector_duties:
            if current and not self._belongs_to(current, duty):
                duties.append(self._consolidate(current))
                current = []
            current.append(duty)
        if current:
            duties.append(self._consolidate(current))
        return duties
