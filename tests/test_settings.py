"""
Logbook Settings Tests

Run: python -m pytest tests/test_settings.py -v
"""

import pytest
from pydantic import ValidationError

from core.parameters import EngineConfig
from models.data_models import FlightTimePosition, FRMSFleet
from models.settings import LogbookSettings


class TestValidation:

    def test_defaults(self):
        settings = LogbookSettings()
        assert settings.fleet is FRMSFleet.A320_B737
        assert settings.pf_auto_instrument_minutes == 30
        assert settings.flight_time_position is FlightTimePosition.CAPTAIN

    @pytest.mark.parametrize("minutes,expected", [(-5, 0), (45, 45), (240, 120)])
    def test_instrument_minutes_clamped(self, minutes, expected):
        assert LogbookSettings(pf_auto_instrument_minutes=minutes).pf_auto_instrument_minutes == expected

    def test_position_codes(self):
        assert LogbookSettings(flight_time_position='F/O').flight_time_position \
            is FlightTimePosition.FIRST_OFFICER

    @pytest.mark.parametrize("overrides", [
        {'night_sample_segments': 0},
        {'landing_check_minutes': -1},
        {'home_timezone': 'Mars/Olympus'},
        {'flight_time_position': 'Navigator'},
        {'fleet': 'B747'},
        {'sign_off_minutes_after_in': -15},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ValidationError):
            LogbookSettings(**overrides)

    def test_frozen(self):
        settings = LogbookSettings()
        with pytest.raises(ValidationError):
            settings.fleet = FRMSFleet.A380_A330_B787

    def test_home_base_normalised(self):
        assert LogbookSettings(home_base=' syd ').home_base == 'SYD'


class TestEngineConfig:

    def test_fleet_limits(self):
        limits = LogbookSettings(fleet='A380/A330/B787').fleet_limits()
        assert limits.max_flight_time_7_days == 30.0
        assert limits.max_flight_time_365_days == 900.0

    def test_engine_config(self):
        settings = LogbookSettings(
            fleet=FRMSFleet.A380_A330_B787,
            home_timezone='Australia/Sydney',
            flight_time_position='S/O',
            pf_auto_instrument_minutes=60,
            night_sample_segments=500,
            landing_check_minutes=2,
        )
        config = settings.engine_config()
        assert config.fleet is FRMSFleet.A380_A330_B787
        assert config.night_params.sample_segments == 500
        assert config.night_params.landing_check_minutes == 2
        assert config.credit_params.instrument_hours == 1.0
        assert config.duty_params.sign_off_minutes_after_in == 30
        assert config.duty_params.home_timezone == 'Australia/Sydney'
        assert config.default_position == 'S/O'

    def test_sign_off_override(self):
        config = LogbookSettings(sign_off_minutes_after_in=20).engine_config()
        assert config.duty_params.sign_off_minutes_after_in == 20

    def test_default_config_preset(self):
        config = EngineConfig.default_config()
        assert config.night_params.sample_segments == 200
        assert config.duty_params.sign_off_minutes_after_in == 15

    def test_high_resolution_preset(self):
        config = EngineConfig.high_resolution_config(FRMSFleet.A380_A330_B787)
        assert config.night_params.sample_segments == 1000
        assert config.night_params.interpolation == 'great_circle'
