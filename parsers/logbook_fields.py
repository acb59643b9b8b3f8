"""
Logbook Field Parsing
=====================

Boundary conversion of the string values stored by the logbook into the
types the engine works with:

- UTC clock times: "HH:MM", "HHMM" or "HMM" (e.g. "710" for 07:10)
- Flight dates: "dd/MM/yyyy" or ISO "yyyy-MM-dd"
- Durations: decimal hours ("4.53") or "H:MM" ("4:32")

Every instant that enters the engine is a timezone-aware UTC datetime.
Unparseable values become None (with a warning) so that one bad field
never drops the whole record.
"""

from datetime import date, datetime, time, timedelta
from typing import Any, Mapping, Optional
import logging
import math

import pytz

from models.data_models import FlightRecord, FlightTimePosition

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d")


def ensure_utc(instant: datetime) -> datetime:
    """Normalise to an aware UTC datetime; naive values are taken as UTC"""
    if instant.tzinfo is None:
        return pytz.utc.localize(instant)
    return instant.astimezone(pytz.utc)


def parse_utc_clock(text: Optional[str]) -> Optional[time]:
    """Parse a UTC clock string, None if absent or malformed"""
    if text is None:
        return None
    clean = str(text).strip().replace(":", "")
    if not clean:
        return None
    if not clean.isdigit() or len(clean) not in (3, 4):
        logger.warning(f"Invalid UTC time format: '{text}'")
        return None

    hour, minute = int(clean[:-2]), int(clean[-2:])
    if hour >= 24 or minute >= 60:
        logger.warning(f"UTC time out of range: '{text}'")
        return None
    return time(hour, minute)


def parse_flight_date(value: Any) -> Optional[date]:
    """Parse a flight date; datetime/date values pass through"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    logger.warning(f"Invalid flight date format: '{value}'")
    return None


def parse_hours(value: Any) -> Optional[float]:
    """
    Parse a duration to decimal hours.

    "13:40" -> 13.667, "13.67" -> 13.67. Returns None when unparseable.
    Sign is preserved so the caller can reject negative durations.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else None

    text = str(value).strip()
    if not text:
        return None
    if ":" in text:
        parts = text.split(":")
        if len(parts) != 2 or not parts[1].isdigit():
            logger.warning(f"Invalid duration format: '{value}'")
            return None
        try:
            hours = int(parts[0])
        except ValueError:
            logger.warning(f"Invalid duration format: '{value}'")
            return None
        minutes = int(parts[1]) / 60.0
        return hours - minutes if text.startswith("-") else hours + minutes
    try:
        number = float(text)
    except ValueError:
        logger.warning(f"Invalid duration format: '{value}'")
        return None
    return number if math.isfinite(number) else None


def combine_utc(flight_date: date, clock: time) -> datetime:
    """Clock time on the flight date, as an aware UTC instant"""
    return pytz.utc.localize(datetime.combine(flight_date, clock))


def calculate_block_time(out_time: Optional[str], in_time: Optional[str]) -> float:
    """
    Block time from OUT and IN clock times, in decimal hours (2 dp).

    IN earlier than OUT means the sector crossed midnight UTC. Returns 0.0
    when either time is missing or malformed.
    """
    out_clock = parse_utc_clock(out_time)
    in_clock = parse_utc_clock(in_time)
    if out_clock is None or in_clock is None:
        return 0.0

    out_minutes = out_clock.hour * 60 + out_clock.minute
    in_minutes = in_clock.hour * 60 + in_clock.minute
    elapsed = in_minutes - out_minutes
    if elapsed < 0:
        elapsed += 24 * 60
    return round(elapsed / 60.0, 2)


def format_hours(value: float, places: int = 2) -> str:
    """Decimal hours as stored by the logbook ("4.53")"""
    return f"{value:.{places}f}"


def to_hours_minutes(value: float) -> str:
    """Decimal hours as "H:MM" with the minutes rounded"""
    hours = int(value)
    minutes = int(round((value - hours) * 60))
    if minutes == 60:
        hours, minutes = hours + 1, 0
    return f"{hours}:{minutes:02d}"


def departure_instant(flight_date: Optional[date], clock_text: Optional[str]) -> Optional[datetime]:
    """UTC departure instant from the record date and a clock string"""
    if flight_date is None:
        return None
    clock = parse_utc_clock(clock_text)
    if clock is None:
        return None
    return combine_utc(flight_date, clock)


def arrival_instant(flight_date: Optional[date], departure_text: Optional[str],
                    arrival_text: Optional[str]) -> Optional[datetime]:
    """UTC arrival instant; rolls to the next day when earlier than departure"""
    departure = departure_instant(flight_date, departure_text)
    arrival = departure_instant(flight_date, arrival_text)
    if arrival is None:
        return None
    if departure is not None and arrival < departure:
        arrival += timedelta(days=1)
    return arrival


def _flag(row: Mapping[str, Any], key: str) -> bool:
    value = row.get(key, False)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def _count(row: Mapping[str, Any], key: str) -> int:
    try:
        return max(0, int(row.get(key) or 0))
    except (TypeError, ValueError):
        return 0


def _duration(row: Mapping[str, Any], key: str, identifier: str) -> float:
    hours = parse_hours(row.get(key))
    if hours is None:
        return 0.0
    if hours < 0:
        raise ValueError(f"[{identifier}] Negative duration for {key}: {row.get(key)!r}")
    return hours


def record_from_row(row: Mapping[str, Any]) -> FlightRecord:
    """
    Build a FlightRecord from a persistence row (logbook field names).

    Negative durations are rejected here so that the engine never sees
    them. Malformed dates and clock strings are kept as-is (date -> None)
    and degrade only the computations that need them.
    """
    identifier = str(row.get("id") or row.get("identifier") or "")
    position = row.get("position")

    return FlightRecord(
        identifier=identifier,
        date=parse_flight_date(row.get("date")),
        departure=str(row.get("fromAirport") or row.get("departure") or "").strip().upper(),
        arrival=str(row.get("toAirport") or row.get("arrival") or "").strip().upper(),
        scheduled_departure=row.get("scheduledDeparture") or None,
        scheduled_arrival=row.get("scheduledArrival") or None,
        out_time=row.get("outTime") or None,
        in_time=row.get("inTime") or None,
        block_time=_duration(row, "blockTime", identifier),
        sim_time=_duration(row, "simTime", identifier),
        is_pilot_flying=_flag(row, "isPilotFlying"),
        is_positioning=_flag(row, "isPositioning"),
        is_simulator=_flag(row, "isSimulator"),
        position=FlightTimePosition.from_value(position) if position else None,
        is_icus=_flag(row, "isICUS"),
        p1=_duration(row, "p1Time", identifier),
        p1us=_duration(row, "p1usTime", identifier),
        p2=_duration(row, "p2Time", identifier),
        instrument=_duration(row, "instrumentTime", identifier),
        night_time=_duration(row, "nightTime", identifier),
        day_takeoffs=_count(row, "dayTakeoffs"),
        night_takeoffs=_count(row, "nightTakeoffs"),
        day_landings=_count(row, "dayLandings"),
        night_landings=_count(row, "nightLandings"),
        takeoffs_landings_edited=_flag(row, "hasManuallyEditedTakeoffsLandings"),
    )
