"""
Logbook Engine
==============

Explicit evaluation pipeline over a snapshot of logbook records:

1. Per flight: calculation context -> night time, takeoff/landing
   classification and time credits
2. Per logbook: duty periods -> flight and duty rolling windows ->
   FRMS limit utilization

Nothing here observes or mutates the persistence layer. Callers pass a
record snapshot in and store whatever they choose from the results.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional, Union
import logging

from core.calculation_context import (
    CalculationContextCache, CoordinateLookup, FlightCalculationContext
)
from core.duty_periods import DutyPeriodBuilder
from core.duty_statistics import DutyDayCounter
from core.frms import FRMSLimitEvaluator
from core.night_sampler import NightSegmentSampler
from core.parameters import EngineConfig
from core.rolling_window import RollingWindowAggregator
from core.time_credits import TimeCreditAllocator
from models.data_models import (
    FlightComputation, FlightRecord, HoursSource, LogbookEvaluation, TakeoffLandingCounts
)
from parsers.airport_database import AirportDatabase

logger = logging.getLogger(__name__)


class LogbookEngine:
    """Flight-time regulatory computations for one pilot's logbook"""

    def __init__(self, config: EngineConfig = None,
                 coordinate_lookup: CoordinateLookup = None,
                 cache: CalculationContextCache = None):
        self.config = config or EngineConfig.default_config()
        self.coordinate_lookup = coordinate_lookup or AirportDatabase.get_coordinate
        self.cache = cache if cache is not None else CalculationContextCache(self.coordinate_lookup)

        self.sampler = NightSegmentSampler(self.config.night_params)
        self.allocator = TimeCreditAllocator(self.config.credit_params)
        self.duty_builder = DutyPeriodBuilder(self.config.duty_params)
        self.evaluator = FRMSLimitEvaluator(self.config.utilization_bands)
        self.day_counter = DutyDayCounter(self.config.duty_params)

    @classmethod
    def from_settings(cls, settings, coordinate_lookup: CoordinateLookup = None) -> 'LogbookEngine':
        """Build from a validated LogbookSettings snapshot"""
        return cls(settings.engine_config(), coordinate_lookup)

    # ========================================================================
    # PER FLIGHT
    # ========================================================================

    def context_for(self, record: FlightRecord) -> Optional[FlightCalculationContext]:
        if record.is_simulator_session:
            return None
        return self.cache.get(record)

    def _takeoffs_landings(self, record: FlightRecord,
                           context: FlightCalculationContext) -> TakeoffLandingCounts:
        if record.takeoffs_landings_edited:
            return record.stored_counts
        if not record.is_pilot_flying:
            return TakeoffLandingCounts()
        return self.sampler.classify_takeoff_landing(
            context.departure, context.arrival, context.departure_utc, context.block_hours
        )

    def evaluate_flight(self, record: FlightRecord) -> FlightComputation:
        """
        Night time, takeoff/landing counts and time credits for one record.

        When the context is unknown (unresolved airport, missing OUT time,
        simulator session) night_time is None and the stored counts are
        returned unchanged.
        """
        credits = self.allocator.allocate_record(
            record, default_position=self.config.default_position or "Capt"
        )

        context = self.context_for(record)
        if context is None:
            return FlightComputation(
                identifier=record.identifier,
                night_time=None,
                takeoffs_landings=record.stored_counts,
                credits=credits,
                flight_hours=record.flight_hours,
            )

        night = self.sampler.night_time(
            context.departure, context.arrival, context.departure_utc, context.block_hours
        )
        night = min(round(night, 2), context.block_hours)

        return FlightComputation(
            identifier=record.identifier,
            night_time=night,
            takeoffs_landings=self._takeoffs_landings(record, context),
            credits=credits,
            flight_hours=record.flight_hours,
        )

    def evaluate_flights(self, records: Iterable[FlightRecord]) -> List[FlightComputation]:
        return [self.evaluate_flight(r) for r in records]

    # ========================================================================
    # PER LOGBOOK
    # ========================================================================

    def evaluate_logbook(self, records: Iterable[FlightRecord],
                         as_of: Union[date, datetime]) -> LogbookEvaluation:
        """Rolling-window totals and limit utilization as of a date"""
        records = list(records)
        as_of = as_of.date() if isinstance(as_of, datetime) else as_of
        limits = self.config.fleet_limits

        duties = self.duty_builder.build_duties(records)
        flight_aggregator = RollingWindowAggregator(records, HoursSource.FLIGHT)
        duty_aggregator = RollingWindowAggregator(duties, HoursSource.DUTY)

        flight_results = flight_aggregator.results([d for d, _ in limits.flight_windows()], as_of)
        duty_results = duty_aggregator.results([d for d, _ in limits.duty_windows()], as_of)
        utilizations = self.evaluator.evaluate(flight_results, duty_results, limits)
        duty_days = self.day_counter.summarize(duties, as_of, limits.flight_time_period_days)

        logger.info(
            f"Evaluated {len(records)} records / {len(duties)} duties as of {as_of.isoformat()} "
            f"({limits.fleet.short_name})"
        )
        return LogbookEvaluation(
            as_of=as_of,
            fleet=limits.fleet,
            flight_windows=flight_results,
            duty_windows=duty_results,
            utilizations=utilizations,
            duties=duties,
            duty_days=duty_days,
        )
