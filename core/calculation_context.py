"""
Per-flight calculation context.

Everything the night sampler needs for one record, resolved once: airport
coordinates, the explicit-UTC departure instant and the block time. A
record that cannot produce a complete context is "unknown" for night
purposes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple
import logging

from models.data_models import AirportCoordinate, FlightRecord
from parsers.logbook_fields import departure_instant

logger = logging.getLogger(__name__)

CoordinateLookup = Callable[[str], Optional[AirportCoordinate]]


@dataclass(frozen=True)
class FlightCalculationContext:
    identifier: str
    departure_code: str
    arrival_code: str
    departure: AirportCoordinate
    arrival: AirportCoordinate
    departure_utc: datetime
    block_hours: float

    @property
    def arrival_utc(self) -> datetime:
        return self.departure_utc + timedelta(hours=self.block_hours)


def build_calculation_context(record: FlightRecord,
                              lookup: CoordinateLookup) -> Optional[FlightCalculationContext]:
    """Resolve a record's inputs, None when any of them is missing or malformed"""
    departure_utc = departure_instant(record.date, record.out_time)
    if departure_utc is None:
        logger.debug(f"[{record.identifier}] No usable OUT time; night classification skipped")
        return None

    departure = lookup(record.departure) if record.departure else None
    arrival = lookup(record.arrival) if record.arrival else None
    if departure is None or arrival is None:
        missing = record.departure if departure is None else record.arrival
        logger.debug(f"[{record.identifier}] Unknown airport '{missing}'; night classification skipped")
        return None

    return FlightCalculationContext(
        identifier=record.identifier,
        departure_code=record.departure,
        arrival_code=record.arrival,
        departure=departure,
        arrival=arrival,
        departure_utc=departure_utc,
        block_hours=max(0.0, record.block_time or 0.0),
    )


class CalculationContextCache:
    """
    Memoizes contexts per record.

    The key carries every field the context is derived from, so an edited
    record (new OUT time, different airport) misses the cache instead of
    returning a stale context. Only the latest key of each record is kept.
    """

    def __init__(self, lookup: CoordinateLookup):
        self.lookup = lookup
        self._entries: Dict[Tuple, Optional[FlightCalculationContext]] = {}
        self._keys_by_id: Dict[str, Tuple] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(record: FlightRecord) -> Tuple:
        return (record.identifier, record.date, record.departure, record.arrival,
                record.out_time, record.block_time)

    def get(self, record: FlightRecord) -> Optional[FlightCalculationContext]:
        key = self.key_for(record)
        if key in self._entries:
            self.hits += 1
            return self._entries[key]

        self.misses += 1
        stale = self._keys_by_id.pop(record.identifier, None)
        if stale is not None:
            self._entries.pop(stale, None)

        context = build_calculation_context(record, self.lookup)
        self._entries[key] = context
        self._keys_by_id[record.identifier] = key
        return context

    def invalidate(self, identifier: str) -> int:
        """Drop the cached context of a record; returns the number removed"""
        key = self._keys_by_id.pop(identifier, None)
        if key is None:
            return 0
        self._entries.pop(key, None)
        return 1

    def clear(self):
        self._entries.clear()
        self._keys_by_id.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)
