"""
data_models.py - Core Data Structures
======================================

Data models for logbook records, airport coordinates, fleet limits,
time credits, duty periods and rolling-window utilization.

All values are immutable snapshots: the engine reads them and derives new
values, it never mutates a record handed over by the persistence layer.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


# ============================================================================
# ENUMS
# ============================================================================

class FlightTimePosition(Enum):
    """Crew position used for time credit allocation"""
    CAPTAIN = "Capt"
    FIRST_OFFICER = "F/O"
    SECOND_OFFICER = "S/O"

    @classmethod
    def from_value(cls, value) -> 'FlightTimePosition':
        """Accept an enum member, its code ("F/O") or its name ("first_officer")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            for member in cls:
                if text.upper() in (member.value.upper(), member.name):
                    return member
            normalized = text.upper().replace(' ', '_')
            if normalized in cls.__members__:
                return cls[normalized]
        raise ValueError(f"Unknown flight time position: {value!r}")


class TimeCreditType(Enum):
    """Regulatory flight-time credit buckets"""
    P1 = "P1"        # Pilot in command
    P1US = "P1US"    # Pilot in command under supervision (ICUS)
    P2 = "P2"        # Co-pilot

    @property
    def display_name(self) -> str:
        return {
            TimeCreditType.P1: "P1 (CMD)",
            TimeCreditType.P1US: "P1US (ICUS)",
            TimeCreditType.P2: "P2 (CO-PLT)",
        }[self]


class FRMSFleet(Enum):
    """Fleet categories with distinct FRMS rulesets"""
    A320_B737 = "A320/B737"
    A380_A330_B787 = "A380/A330/B787"

    @property
    def short_name(self) -> str:
        return "Shorthaul" if self is FRMSFleet.A320_B737 else "Longhaul"


class HoursSource(Enum):
    """Which per-record figure a rolling window sums"""
    FLIGHT = "flight_hours"
    DUTY = "duty_hours"


class UtilizationBand(Enum):
    """Presentation band for a limit utilization ratio"""
    NOMINAL = "nominal"
    WARNING = "warning"
    CRITICAL = "critical"


class DutyType(Enum):
    OPERATING = "operating"
    DEADHEADING = "deadheading"   # Positioning flight
    SIMULATOR = "simulator"


class OperationTimeClass(Enum):
    """Time-of-day class of a duty, in home base local time"""
    DAY = "day"
    LATE_NIGHT = "late_night"         # > 30 min between 2300-0530
    BACK_OF_CLOCK = "back_of_clock"   # >= 2 h between 0100-0459

    @property
    def is_night_operation(self) -> bool:
        return self is not OperationTimeClass.DAY


# ============================================================================
# GAZETTEER & CONFIGURATION VALUES
# ============================================================================

@dataclass(frozen=True)
class AirportCoordinate:
    """Airport position from the gazetteer"""
    code: str                       # ICAO (e.g., "YSSY") or IATA
    latitude: float
    longitude: float
    timezone: Optional[str] = None  # IANA (e.g., "Australia/Sydney")


@dataclass(frozen=True)
class FleetLimits:
    """
    Cumulative flight and duty time limits for one fleet category.

    A limit of None means the ruleset does not define that window for the
    fleet (e.g. narrowbody crews have no 7-day flight time cap).
    """
    fleet: FRMSFleet
    max_flight_time_7_days: Optional[float] = None
    max_flight_time_28_days: Optional[float] = 100.0
    max_flight_time_365_days: Optional[float] = 1000.0
    max_duty_time_7_days: Optional[float] = 60.0
    max_duty_time_14_days: Optional[float] = 100.0

    # Length of the "28-day" flight window (widebody ruleset counts 30 days)
    flight_time_period_days: int = 28

    @classmethod
    def for_fleet(cls, fleet: FRMSFleet) -> 'FleetLimits':
        """Ruleset defaults for a fleet category"""
        if fleet is FRMSFleet.A380_A330_B787:
            return cls(
                fleet=fleet,
                max_flight_time_7_days=30.0,
                max_flight_time_28_days=100.0,
                max_flight_time_365_days=900.0,
                max_duty_time_7_days=60.0,
                max_duty_time_14_days=100.0,
                flight_time_period_days=30,
            )
        return cls(
            fleet=fleet,
            max_flight_time_7_days=None,
            max_flight_time_28_days=100.0,
            max_flight_time_365_days=1000.0,
            max_duty_time_7_days=60.0,
            max_duty_time_14_days=100.0,
            flight_time_period_days=28,
        )

    def flight_windows(self) -> List[tuple]:
        """(window_days, limit) pairs for flight time"""
        return [
            (7, self.max_flight_time_7_days),
            (self.flight_time_period_days, self.max_flight_time_28_days),
            (365, self.max_flight_time_365_days),
        ]

    def duty_windows(self) -> List[tuple]:
        """(window_days, limit) pairs for duty time"""
        return [
            (7, self.max_duty_time_7_days),
            (14, self.max_duty_time_14_days),
        ]


# ============================================================================
# LOGBOOK RECORDS
# ============================================================================

@dataclass(frozen=True)
class FlightRecord:
    """
    One logged flight segment, as handed over by the persistence layer.

    Clock times are UTC strings ("HH:MM", "HHMM" or "HMM") and may be absent
    or malformed; they are parsed at the engine boundary. A record is either
    a real sector (block_time) or a simulator session (sim_time), never both.
    """
    identifier: str
    date: Optional[date]
    departure: str = ""
    arrival: str = ""

    scheduled_departure: Optional[str] = None   # STD
    scheduled_arrival: Optional[str] = None     # STA
    out_time: Optional[str] = None              # Actual OUT
    in_time: Optional[str] = None               # Actual IN

    block_time: float = 0.0
    sim_time: float = 0.0

    is_pilot_flying: bool = False
    is_positioning: bool = False
    is_simulator: bool = False
    position: Optional[FlightTimePosition] = None   # None -> settings default
    is_icus: bool = False

    # Stored credit fields
    p1: float = 0.0
    p1us: float = 0.0
    p2: float = 0.0
    instrument: float = 0.0

    # Stored night classification (manual entry or previous computation)
    night_time: float = 0.0
    day_takeoffs: int = 0
    night_takeoffs: int = 0
    day_landings: int = 0
    night_landings: int = 0
    takeoffs_landings_edited: bool = False

    def __post_init__(self):
        if (self.block_time or 0) > 0 and (self.sim_time or 0) > 0:
            raise ValueError(f"[{self.identifier}] Record has both block time and simulator time")

    @property
    def flight_hours(self) -> float:
        """Contribution to flight-time totals (block time for sectors, sim time for sessions)"""
        return max(0.0, self.block_time or 0.0) + max(0.0, self.sim_time or 0.0)

    @property
    def is_simulator_session(self) -> bool:
        return self.is_simulator or (self.sim_time > 0 and self.block_time <= 0)

    @property
    def stored_counts(self) -> 'TakeoffLandingCounts':
        return TakeoffLandingCounts(
            day_takeoffs=self.day_takeoffs,
            night_takeoffs=self.night_takeoffs,
            day_landings=self.day_landings,
            night_landings=self.night_landings,
        )


# ============================================================================
# DERIVED PER-FLIGHT VALUES
# ============================================================================

@dataclass(frozen=True)
class FlightTimeCredits:
    """Regulatory credit allocation for one flight"""
    p1: float = 0.0
    p1us: float = 0.0
    p2: float = 0.0
    instrument: float = 0.0

    @property
    def total(self) -> float:
        return self.p1 + self.p1us + self.p2

    @property
    def credit_type(self) -> Optional[TimeCreditType]:
        """The populated bucket, or None when nothing was credited"""
        if self.p1 > 0:
            return TimeCreditType.P1
        if self.p1us > 0:
            return TimeCreditType.P1US
        if self.p2 > 0:
            return TimeCreditType.P2
        return None


@dataclass(frozen=True)
class TakeoffLandingCounts:
    day_takeoffs: int = 0
    night_takeoffs: int = 0
    day_landings: int = 0
    night_landings: int = 0

    @classmethod
    def classified(cls, departure_night: bool, arrival_night: bool) -> 'TakeoffLandingCounts':
        return cls(
            day_takeoffs=0 if departure_night else 1,
            night_takeoffs=1 if departure_night else 0,
            day_landings=0 if arrival_night else 1,
            night_landings=1 if arrival_night else 0,
        )


@dataclass(frozen=True)
class FlightComputation:
    """
    Engine output for a single flight.

    night_time is None when classification could not run (missing airport
    coordinates or departure time); takeoffs_landings then carries the
    record's stored counts unchanged.
    """
    identifier: str
    night_time: Optional[float]
    takeoffs_landings: TakeoffLandingCounts
    credits: FlightTimeCredits
    flight_hours: float = 0.0

    @property
    def night_known(self) -> bool:
        return self.night_time is not None


# ============================================================================
# DUTY PERIODS & ROLLING WINDOWS
# ============================================================================

@dataclass(frozen=True)
class FRMSDuty:
    """A consolidated duty period (one or more sectors)"""
    date: date                  # Logbook date of the first sector
    sign_on: datetime           # UTC
    sign_off: datetime          # UTC
    flight_time: float = 0.0
    night_time: float = 0.0
    sectors: int = 1
    duty_type: DutyType = DutyType.OPERATING
    record_ids: tuple = ()
    time_class: OperationTimeClass = OperationTimeClass.DAY

    @property
    def duty_hours(self) -> float:
        """Sign-on to sign-off in decimal hours (2 dp)"""
        seconds = (self.sign_off - self.sign_on).total_seconds()
        return round(max(0.0, seconds) / 3600, 2)

    @property
    def flight_hours(self) -> float:
        return max(0.0, self.flight_time)


@dataclass(frozen=True)
class RollingWindowResult:
    """Total hours in a trailing window ending at as_of"""
    source: HoursSource
    window_days: int
    as_of: date
    hours: float


@dataclass(frozen=True)
class LimitUtilization:
    """One (window, limit) pair evaluated against its cumulative total"""
    source: HoursSource
    window_days: int
    hours: float          # Raw total, never clamped
    limit: float
    ratio: float          # min(hours / limit, 1.0)
    band: UtilizationBand

    @property
    def is_exceeded(self) -> bool:
        return self.hours > self.limit

    @property
    def remaining_hours(self) -> float:
        return max(0.0, self.limit - self.hours)


@dataclass(frozen=True)
class DutyDayStatistics:
    """
    Calendar-day counts over the duty list, in home base local days.

    Day periods count N calendar days ending on (and including) as_of.
    Consecutive counters walk back from the most recent duty day and
    reset to zero when the last duty was more than a day before as_of.
    """
    period_days: int = 28
    days_off: int = 28
    duty_days_window: int = 11
    duty_days_in_window: int = 0
    consecutive_duties: int = 0
    consecutive_early_starts: int = 0
    consecutive_late_nights: int = 0


@dataclass
class LogbookEvaluation:
    """Everything produced by one logbook evaluation cycle"""
    as_of: date
    fleet: FRMSFleet
    flight_windows: List[RollingWindowResult] = field(default_factory=list)
    duty_windows: List[RollingWindowResult] = field(default_factory=list)
    utilizations: List[LimitUtilization] = field(default_factory=list)
    duties: List[FRMSDuty] = field(default_factory=list)
    duty_days: DutyDayStatistics = field(default_factory=DutyDayStatistics)

    @property
    def days_off(self) -> int:
        return self.duty_days.days_off

    @property
    def consecutive_duties(self) -> int:
        return self.duty_days.consecutive_duties

    def utilization_for(self, source: HoursSource, window_days: int) -> Optional[LimitUtilization]:
        for item in self.utilizations:
            if item.source is source and item.window_days == window_days:
                return item
        return None

    @property
    def worst_band(self) -> UtilizationBand:
        order = [UtilizationBand.NOMINAL, UtilizationBand.WARNING, UtilizationBand.CRITICAL]
        worst = UtilizationBand.NOMINAL
        for item in self.utilizations:
            if order.index(item.band) > order.index(worst):
                worst = item.band
        return worst
