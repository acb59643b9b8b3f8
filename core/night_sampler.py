"""
Night Time Sampling
===================

Estimates the night portion of a sector by classifying equally spaced
points along the route:

- The elapsed time is split into N equal segments (default 200)
- Each segment midpoint gets an interpolated position and instant
- Night time = night segments / N x block time

Takeoff and landing use single-point checks instead of the segment
average. The landing is checked a few minutes before the nominal arrival
so that a twilight boundary crossed in the last seconds of the flight does
not disagree with the accumulated night minutes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple
import logging

import numpy as np

from core.parameters import NightCalculationParameters
from core.solar import SolarPositionCalculator, unix_seconds
from models.data_models import AirportCoordinate, TakeoffLandingCounts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NightSample:
    """Result of sampling one sector"""
    night_segments: int
    total_segments: int
    block_hours: float

    @property
    def night_fraction(self) -> float:
        if self.total_segments <= 0:
            return 0.0
        return self.night_segments / self.total_segments

    @property
    def night_hours(self) -> float:
        return min(self.block_hours, self.night_fraction * self.block_hours)


def _shortest_longitude_delta(from_lon: float, to_lon: float) -> float:
    delta = to_lon - from_lon
    if delta > 180.0:
        delta -= 360.0
    elif delta < -180.0:
        delta += 360.0
    return delta


def _wrap_longitude(longitudes: np.ndarray) -> np.ndarray:
    return np.mod(longitudes + 180.0, 360.0) - 180.0


def linear_route(departure: AirportCoordinate, arrival: AirportCoordinate,
                 fractions: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Straight line in latitude/longitude space, shortest way across the antimeridian"""
    lats = departure.latitude + (arrival.latitude - departure.latitude) * fractions
    lon_delta = _shortest_longitude_delta(departure.longitude, arrival.longitude)
    lons = _wrap_longitude(departure.longitude + lon_delta * fractions)
    return lats, lons


def great_circle_route(departure: AirportCoordinate, arrival: AirportCoordinate,
                       fractions: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Spherical interpolation along the great circle joining both airports"""
    phi1, lam1 = np.radians(departure.latitude), np.radians(departure.longitude)
    phi2, lam2 = np.radians(arrival.latitude), np.radians(arrival.longitude)

    cos_distance = (np.sin(phi1) * np.sin(phi2)
                    + np.cos(phi1) * np.cos(phi2) * np.cos(lam1 - lam2))
    distance = np.arccos(np.clip(cos_distance, -1.0, 1.0))
    if distance < 1e-9:
        # Same airport (or close enough): position never changes
        return (np.full_like(fractions, departure.latitude),
                np.full_like(fractions, departure.longitude))

    a = np.sin((1 - fractions) * distance) / np.sin(distance)
    b = np.sin(fractions * distance) / np.sin(distance)
    x = a * np.cos(phi1) * np.cos(lam1) + b * np.cos(phi2) * np.cos(lam2)
    y = a * np.cos(phi1) * np.sin(lam1) + b * np.cos(phi2) * np.sin(lam2)
    z = a * np.sin(phi1) + b * np.sin(phi2)

    lats = np.degrees(np.arctan2(z, np.sqrt(x * x + y * y)))
    lons = np.degrees(np.arctan2(y, x))
    return lats, lons


class NightSegmentSampler:
    """Night fraction of a sector and day/night takeoff/landing classification"""

    def __init__(self, params: NightCalculationParameters = None,
                 calculator: SolarPositionCalculator = None):
        self.params = params or NightCalculationParameters()
        self.calculator = calculator or SolarPositionCalculator(self.params.twilight_threshold_degrees)

    def sample(self, departure: AirportCoordinate, arrival: AirportCoordinate,
               departure_utc: datetime, block_hours: float) -> NightSample:
        """Classify every segment midpoint of the sector"""
        segments = self.params.sample_segments
        if block_hours is None or block_hours <= 0:
            return NightSample(night_segments=0, total_segments=segments, block_hours=0.0)

        fractions = (np.arange(segments, dtype=float) + 0.5) / segments
        if self.params.interpolation == "great_circle":
            lats, lons = great_circle_route(departure, arrival, fractions)
        else:
            lats, lons = linear_route(departure, arrival, fractions)

        start = unix_seconds(departure_utc)
        instants = start + fractions * block_hours * 3600.0

        night_mask = np.asarray(self.calculator.is_night_array(lats, lons, instants), dtype=bool)
        night_segments = int(np.count_nonzero(night_mask))

        logger.debug(
            f"{departure.code}->{arrival.code} dep={departure_utc.isoformat()} "
            f"block={block_hours:.2f}h: {night_segments}/{segments} night segments"
        )
        return NightSample(night_segments=night_segments, total_segments=segments, block_hours=block_hours)

    def night_time(self, departure: AirportCoordinate, arrival: AirportCoordinate,
                   departure_utc: datetime, block_hours: float) -> float:
        """Night portion of the sector in the same units as block time"""
        return self.sample(departure, arrival, departure_utc, block_hours).night_hours

    def landing_check_time(self, departure_utc: datetime, block_hours: float) -> datetime:
        """Arrival instant minus the landing offset, never before departure"""
        check_seconds = max(0.0, block_hours * 3600.0 - self.params.landing_check_minutes * 60.0)
        return departure_utc + timedelta(seconds=check_seconds)

    def is_departure_night(self, departure: AirportCoordinate, departure_utc: datetime) -> bool:
        return self.calculator.is_night(departure.latitude, departure.longitude, departure_utc)

    def is_arrival_night(self, arrival: AirportCoordinate, departure_utc: datetime,
                         block_hours: float) -> bool:
        check_time = self.landing_check_time(departure_utc, block_hours)
        return self.calculator.is_night(arrival.latitude, arrival.longitude, check_time)

    def classify_takeoff_landing(self, departure: AirportCoordinate, arrival: AirportCoordinate,
                                 departure_utc: datetime, block_hours: float) -> TakeoffLandingCounts:
        """One takeoff and one landing, each classified day or night"""
        return TakeoffLandingCounts.classified(
            departure_night=self.is_departure_night(departure, departure_utc),
            arrival_night=self.is_arrival_night(arrival, departure_utc, block_hours),
        )


def night_time_between(departure: Optional[AirportCoordinate], arrival: Optional[AirportCoordinate],
                       departure_utc: Optional[datetime], block_hours: float,
                       sampler: NightSegmentSampler = None) -> Optional[float]:
    """Convenience wrapper: None when either airport or the departure instant is unknown"""
    if departure is None or arrival is None or departure_utc is None:
        return None
    sampler = sampler or NightSegmentSampler()
    return sampler.night_time(departure, arrival, departure_utc, block_hours)
