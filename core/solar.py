"""
Solar Position & Day/Night Classification
=========================================

Low-precision solar coordinates (accurate to ~0.01 deg, far finer than
civil twilight classification needs):
- Julian day and centuries since J2000.0
- Geometric mean longitude, mean anomaly, equation of centre
- Apparent longitude, obliquity of the ecliptic, declination, right ascension
- Greenwich mean sidereal time -> local hour angle -> elevation

No special casing for polar day/night: the elevation simply stays above or
below the threshold for the whole day.

References: Meeus, Astronomical Algorithms (2nd ed.) ch. 12, 25, 28
"""

from datetime import date, datetime, timedelta
from typing import Union

import numpy as np
import pytz

from core.parameters import CIVIL_TWILIGHT_DEGREES

ArrayLike = Union[float, np.ndarray]

UNIX_EPOCH_JULIAN_DAY = 2440587.5
J2000_JULIAN_DAY = 2451545.0
SECONDS_PER_DAY = 86400.0


def unix_seconds(instant_utc: datetime) -> float:
    """Seconds since the Unix epoch; naive datetimes are taken as UTC"""
    if instant_utc.tzinfo is None:
        instant_utc = pytz.utc.localize(instant_utc)
    return instant_utc.timestamp()


def julian_day(seconds: ArrayLike) -> ArrayLike:
    return np.asarray(seconds, dtype=float) / SECONDS_PER_DAY + UNIX_EPOCH_JULIAN_DAY


def _solar_coordinates(seconds: ArrayLike):
    """Return (mean longitude, right ascension, declination, GMST), all in degrees"""
    jd = julian_day(seconds)
    T = (jd - J2000_JULIAN_DAY) / 36525.0

    L0 = np.mod(280.46646 + T * (36000.76983 + 0.0003032 * T), 360.0)
    M = np.radians(357.52911 + T * (35999.05029 - 0.0001537 * T))

    # Equation of centre
    C = ((1.914602 - T * (0.004817 + 0.000014 * T)) * np.sin(M)
         + (0.019993 - 0.000101 * T) * np.sin(2 * M)
         + 0.000289 * np.sin(3 * M))

    omega = np.radians(125.04 - 1934.136 * T)
    apparent_longitude = np.radians(L0 + C - 0.00569 - 0.00478 * np.sin(omega))

    mean_obliquity = 23.0 + (26.0 + (21.448 - T * (46.815 + T * (0.00059 - T * 0.001813))) / 60.0) / 60.0
    obliquity = np.radians(mean_obliquity + 0.00256 * np.cos(omega))

    declination = np.degrees(np.arcsin(np.sin(obliquity) * np.sin(apparent_longitude)))
    right_ascension = np.degrees(np.arctan2(
        np.cos(obliquity) * np.sin(apparent_longitude), np.cos(apparent_longitude)
    ))

    gmst = np.mod(
        280.46061837
        + 360.98564736629 * (jd - J2000_JULIAN_DAY)
        + 0.000387933 * T * T
        - T * T * T / 38710000.0,
        360.0,
    )
    return L0, right_ascension, declination, gmst


def solar_elevation_array(latitudes: ArrayLike, longitudes: ArrayLike, seconds: ArrayLike) -> np.ndarray:
    """Vectorised sun elevation (degrees, no refraction) for UTC unix seconds"""
    _, right_ascension, declination, gmst = _solar_coordinates(seconds)

    lat = np.radians(np.asarray(latitudes, dtype=float))
    dec = np.radians(declination)
    hour_angle = np.radians(gmst + np.asarray(longitudes, dtype=float) - right_ascension)

    sin_elevation = np.sin(lat) * np.sin(dec) + np.cos(lat) * np.cos(dec) * np.cos(hour_angle)
    return np.degrees(np.arcsin(np.clip(sin_elevation, -1.0, 1.0)))


def solar_elevation(latitude: float, longitude: float, instant_utc: datetime) -> float:
    """Sun elevation above the horizon in degrees"""
    return float(solar_elevation_array(latitude, longitude, unix_seconds(instant_utc)))


def equation_of_time(instant_utc: datetime) -> float:
    """Apparent minus mean solar time, in minutes"""
    L0, right_ascension, _, _ = _solar_coordinates(unix_seconds(instant_utc))
    difference = float(np.mod(L0 - 0.0057183 - right_ascension + 180.0, 360.0) - 180.0)
    return 4.0 * difference


def solar_noon_utc(longitude: float, day: date) -> datetime:
    """UTC instant of local apparent noon (sun on the meridian) at a longitude"""
    midnight = pytz.utc.localize(datetime(day.year, day.month, day.day))
    estimate = midnight + timedelta(minutes=720.0 - 4.0 * longitude)
    # One refinement with the equation of time at the estimate is enough at minute precision
    return estimate - timedelta(minutes=equation_of_time(estimate))


def solar_midnight_utc(longitude: float, day: date) -> datetime:
    """UTC instant of local apparent midnight following the given day's noon"""
    return solar_noon_utc(longitude, day) + timedelta(hours=12)


def is_night(latitude: float, longitude: float, instant_utc: datetime,
             threshold_degrees: float = CIVIL_TWILIGHT_DEGREES) -> bool:
    """True when the sun is below the twilight threshold"""
    return solar_elevation(latitude, longitude, instant_utc) < threshold_degrees


class SolarPositionCalculator:
    """Day/night classifier for a geographic point and UTC instant"""

    def __init__(self, threshold_degrees: float = CIVIL_TWILIGHT_DEGREES):
        self.threshold_degrees = threshold_degrees

    def elevation(self, latitude: float, longitude: float, instant_utc: datetime) -> float:
        return solar_elevation(latitude, longitude, instant_utc)

    def is_night(self, latitude: float, longitude: float, instant_utc: datetime) -> bool:
        return is_night(latitude, longitude, instant_utc, self.threshold_degrees)

    def is_night_array(self, latitudes: ArrayLike, longitudes: ArrayLike, seconds: ArrayLike) -> np.ndarray:
        """Boolean night mask for parallel arrays of positions and unix seconds"""
        return solar_elevation_array(latitudes, longitudes, seconds) < self.threshold_degrees
