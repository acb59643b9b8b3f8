"""
Configuration & Parameters for the Flight-Time Regulatory Engine
================================================================

All configuration dataclasses for the engine:
- NightCalculationParameters: twilight threshold and segment sampling
- TimeCreditParameters: instrument time auto-credit
- DutyPeriodParameters: sign-on/sign-off margins and duty consolidation
- UtilizationBands: presentation thresholds for limit utilization
- EngineConfig: master configuration container

References:
    Meeus, Astronomical Algorithms (2nd ed.) ch. 25, low precision solar coordinates
    FRMS Ruleset A320/B737 Rev 4.1 and A380/A330/B787 Rev 4
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from models.data_models import FleetLimits, FRMSFleet, UtilizationBand


CIVIL_TWILIGHT_DEGREES = -6.0


@dataclass
class NightCalculationParameters:
    """
    Night classification parameters.

    The sample count and pre-arrival offset are operational choices
    validated against published civil twilight times in the test suite.
    """

    # Sun below this elevation is night (civil twilight counts as night)
    twilight_threshold_degrees: float = CIVIL_TWILIGHT_DEGREES

    # Night time accumulation
    sample_segments: int = 200
    interpolation: str = "linear"   # "linear" or "great_circle"

    # Landing classified slightly before the nominal arrival instant
    landing_check_minutes: float = 3.0

    def __post_init__(self):
        if int(self.sample_segments) < 1:
            raise ValueError(f"sample_segments must be >= 1, got {self.sample_segments}")
        self.sample_segments = int(self.sample_segments)
        if self.landing_check_minutes < 0:
            raise ValueError(f"landing_check_minutes must be >= 0, got {self.landing_check_minutes}")
        if self.interpolation not in ("linear", "great_circle"):
            raise ValueError(f"Unknown interpolation mode: {self.interpolation!r}")
        if not -90.0 <= self.twilight_threshold_degrees <= 90.0:
            raise ValueError(f"twilight_threshold_degrees out of range: {self.twilight_threshold_degrees}")


@dataclass
class TimeCreditParameters:
    """Instrument time credited automatically to the pilot flying"""

    pf_auto_instrument_minutes: int = 30
    max_auto_instrument_minutes: int = 120

    def __post_init__(self):
        # Clamp like the settings screen does
        self.pf_auto_instrument_minutes = max(
            0, min(self.max_auto_instrument_minutes, int(self.pf_auto_instrument_minutes))
        )

    @property
    def instrument_hours(self) -> float:
        return round(self.pf_auto_instrument_minutes / 60.0, 1)


@dataclass
class DutyPeriodParameters:
    """Sign-on/sign-off margins and sector grouping (FRMS duty definition)"""

    sign_on_minutes_before_std: int = 60
    sign_off_minutes_after_in: int = 15

    # Sectors belong to the same duty if the gap is within this bound...
    max_sector_gap_hours: float = 3.0
    # ...and the next sign-on falls on the same local day or before this hour of the next one
    next_day_cutoff_hour: int = 6

    # Duty length estimate when a record carries no clock times at all
    untimed_duty_padding_hours: float = 1.5

    # First positioning sector of the day between two domestic ports
    domestic_positioning_sign_on_minutes: int = 30
    domestic_icao_prefixes: Tuple[str, ...] = ("YB", "YM", "YP", "YS")

    # Duty-day counting (home base local time)
    early_start_hour: int = 7          # Sign-on before 0700 local
    duty_day_window_days: int = 11

    home_timezone: str = "UTC"

    @classmethod
    def for_fleet(cls, fleet: FRMSFleet, home_timezone: str = "UTC") -> 'DutyPeriodParameters':
        sign_off = 30 if fleet is FRMSFleet.A380_A330_B787 else 15
        return cls(sign_off_minutes_after_in=sign_off, home_timezone=home_timezone)


@dataclass
class UtilizationBands:
    """Utilization ratio thresholds for presentation"""

    thresholds: Dict[UtilizationBand, float] = field(default_factory=lambda: {
        UtilizationBand.CRITICAL: 0.9,
        UtilizationBand.WARNING: 0.8,
    })

    def classify(self, ratio: float) -> UtilizationBand:
        if ratio >= self.thresholds[UtilizationBand.CRITICAL]:
            return UtilizationBand.CRITICAL
        if ratio >= self.thresholds[UtilizationBand.WARNING]:
            return UtilizationBand.WARNING
        return UtilizationBand.NOMINAL


@dataclass
class EngineConfig:
    """Master configuration container"""
    fleet_limits: FleetLimits
    night_params: NightCalculationParameters
    credit_params: TimeCreditParameters
    duty_params: DutyPeriodParameters
    utilization_bands: UtilizationBands
    default_position: Optional[str] = "Capt"

    @classmethod
    def default_config(cls, fleet: FRMSFleet = FRMSFleet.A320_B737, home_timezone: str = "UTC"):
        return cls(
            fleet_limits=FleetLimits.for_fleet(fleet),
            night_params=NightCalculationParameters(),
            credit_params=TimeCreditParameters(),
            duty_params=DutyPeriodParameters.for_fleet(fleet, home_timezone),
            utilization_bands=UtilizationBands(),
        )

    @classmethod
    def high_resolution_config(cls, fleet: FRMSFleet = FRMSFleet.A320_B737, home_timezone: str = "UTC"):
        """
        Finer night sampling for auditing long-haul sectors.
        - 1,000 segments (~1 min resolution on a 16h sector)
        - Great-circle path instead of the lat/lon straight line
        """
        config = cls.default_config(fleet, home_timezone)
        config.night_params = NightCalculationParameters(
            sample_segments=1000,
            interpolation="great_circle",
        )
        return config

    @property
    def fleet(self) -> FRMSFleet:
        return self.fleet_limits.fleet
