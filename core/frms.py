"""
FRMS Cumulative Limit Evaluation
================================

Compares rolling-window totals against the fleet's cumulative flight and
duty time limits:

    ratio = min(hours / limit, 1.0)
    ratio >= 0.9 -> critical, ratio >= 0.8 -> warning, else nominal

The ratio is capped for display; the raw hours are reported unchanged so
an exceedance is still visible. Windows without a configured limit (None
or zero) are left out rather than reported as zero utilization.

References: FRMS Ruleset A320/B737 Rev 4.1 and A380/A330/B787 Rev 4, cumulative limits
"""

from datetime import date
from typing import Iterable, List, Optional
import logging

from core.parameters import UtilizationBands
from core.rolling_window import RollingWindowAggregator
from models.data_models import (
    FleetLimits, HoursSource, LimitUtilization, RollingWindowResult
)

logger = logging.getLogger(__name__)


class FRMSLimitEvaluator:
    """Limit utilization for each configured (window, limit) pair"""

    def __init__(self, bands: UtilizationBands = None):
        self.bands = bands or UtilizationBands()

    def evaluate_pair(self, source: HoursSource, window_days: int, hours: float,
                      limit: Optional[float]) -> Optional[LimitUtilization]:
        """Utilization of one window, None when the limit is not configured"""
        if limit is None or limit <= 0:
            return None

        ratio = min(hours / limit, 1.0)
        utilization = LimitUtilization(
            source=source,
            window_days=window_days,
            hours=hours,
            limit=limit,
            ratio=ratio,
            band=self.bands.classify(ratio),
        )
        if utilization.is_exceeded:
            logger.warning(
                f"{source.value} {window_days}-day limit exceeded: {hours:.2f}h / {limit:.0f}h"
            )
        return utilization

    def _evaluate_windows(self, results: Iterable[RollingWindowResult],
                          windows: List[tuple]) -> List[LimitUtilization]:
        by_days = {r.window_days: r for r in results}
        utilizations = []
        for window_days, limit in windows:
            result = by_days.get(window_days)
            if result is None:
                continue
            utilization = self.evaluate_pair(result.source, window_days, result.hours, limit)
            if utilization is not None:
                utilizations.append(utilization)
        return utilizations

    def evaluate(self, flight_results: Iterable[RollingWindowResult],
                 duty_results: Iterable[RollingWindowResult],
                 fleet_limits: FleetLimits) -> List[LimitUtilization]:
        """Match window totals to the fleet's limits; flight windows first"""
        return (self._evaluate_windows(flight_results, fleet_limits.flight_windows())
                + self._evaluate_windows(duty_results, fleet_limits.duty_windows()))

    def evaluate_aggregators(self, flight_aggregator: RollingWindowAggregator,
                             duty_aggregator: RollingWindowAggregator,
                             fleet_limits: FleetLimits, as_of: date) -> List[LimitUtilization]:
        """Request every configured window from the aggregators and evaluate them"""
        flight_days = [days for days, _ in fleet_limits.flight_windows()]
        duty_days = [days for days, _ in fleet_limits.duty_windows()]
        return self.evaluate(
            flight_aggregator.results(flight_days, as_of),
            duty_aggregator.results(duty_days, as_of),
            fleet_limits,
        )
