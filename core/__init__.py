"""
Core Flight-Time Regulatory Components
======================================

Main exports for night time, time credits and FRMS limit evaluation.
"""

from core.parameters import (
    CIVIL_TWILIGHT_DEGREES,
    NightCalculationParameters,
    TimeCreditParameters,
    DutyPeriodParameters,
    UtilizationBands,
    EngineConfig
)

from core.solar import SolarPositionCalculator, solar_elevation, is_night
from core.night_sampler import NightSample, NightSegmentSampler, night_time_between
from core.time_credits import TimeCreditAllocator

from core.rolling_window import RollingWindowAggregator, sum_hours
from core.frms import FRMSLimitEvaluator
from core.duty_periods import DutyPeriodBuilder
from core.duty_statistics import DutyDayCounter

from core.calculation_context import (
    FlightCalculationContext,
    CalculationContextCache,
    build_calculation_context,
)
from core.logbook_engine import LogbookEngine

__all__ = [
    # Parameters
    'CIVIL_TWILIGHT_DEGREES',
    'NightCalculationParameters',
    'TimeCreditParameters',
    'DutyPeriodParameters',
    'UtilizationBands',
    'EngineConfig',
    # Night classification
    'SolarPositionCalculator',
    'solar_elevation',
    'is_night',
    'NightSample',
    'NightSegmentSampler',
    'night_time_between',
    # Credits
    'TimeCreditAllocator',
    # Cumulative limits
    'RollingWindowAggregator',
    'sum_hours',
    'FRMSLimitEvaluator',
    'DutyPeriodBuilder',
    'DutyDayCounter',
    # Pipeline
    'FlightCalculationContext',
    'CalculationContextCache',
    'build_calculation_context',
    'LogbookEngine',
]
