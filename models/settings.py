"""
Logbook settings snapshot.

The settings screen persists these values; the engine reads one validated
snapshot per evaluation and turns it into FleetLimits and EngineConfig.
"""

from typing import Optional

import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.parameters import (
    DutyPeriodParameters, EngineConfig, NightCalculationParameters, TimeCreditParameters
)
from models.data_models import FleetLimits, FlightTimePosition, FRMSFleet


class LogbookSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    fleet: FRMSFleet = FRMSFleet.A320_B737
    home_base: Optional[str] = None      # Airport code (e.g., "YSSY")
    home_timezone: str = "UTC"           # e.g., "Australia/Sydney"
    flight_time_position: FlightTimePosition = FlightTimePosition.CAPTAIN

    pf_auto_instrument_minutes: int = 30

    # Optional overrides of the fleet's duty margins
    sign_on_minutes_before_std: int = Field(default=60, ge=0)
    sign_off_minutes_after_in: Optional[int] = Field(default=None, ge=0)

    night_sample_segments: int = Field(default=200, ge=1)
    landing_check_minutes: float = Field(default=3.0, ge=0)

    @field_validator('pf_auto_instrument_minutes', mode='before')
    @classmethod
    def clamp_instrument_minutes(cls, v):
        # Stepper range on the settings screen
        return max(0, min(120, int(v)))

    @field_validator('flight_time_position', mode='before')
    @classmethod
    def parse_position(cls, v):
        return FlightTimePosition.from_value(v)

    @field_validator('home_timezone')
    @classmethod
    def known_timezone(cls, v):
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator('home_base')
    @classmethod
    def normalise_home_base(cls, v):
        return v.strip().upper() if v else None

    def fleet_limits(self) -> FleetLimits:
        return FleetLimits.for_fleet(self.fleet)

    def engine_config(self) -> EngineConfig:
        config = EngineConfig.default_config(self.fleet, self.home_timezone)
        config.night_params = NightCalculationParameters(
            sample_segments=self.night_sample_segments,
            landing_check_minutes=self.landing_check_minutes,
        )
        config.credit_params = TimeCreditParameters(
            pf_auto_instrument_minutes=self.pf_auto_instrument_minutes,
        )
        duty_params = DutyPeriodParameters.for_fleet(self.fleet, self.home_timezone)
        duty_params.sign_on_minutes_before_std = self.sign_on_minutes_before_std
        if self.sign_off_minutes_after_in is not None:
            duty_params.sign_off_minutes_after_in = self.sign_off_minutes_after_in
        config.duty_params = duty_params
        config.default_position = self.flight_time_position.value
        return config
