"""
Airport Gazetteer
=================

ICAO/IATA airport coordinates backed by the airportsdata package
(~28,000 ICAO entries, ~7,800 of them with an IATA code).

A code that is not in the database resolves to None. The engine treats
that as "unknown" and never substitutes a default coordinate.
"""

from typing import Dict, Optional
import logging

import airportsdata

from models.data_models import AirportCoordinate

logger = logging.getLogger(__name__)

# Module-level load (cached)
_ICAO_DB = airportsdata.load('ICAO')
_IATA_DB = airportsdata.load('IATA')


class AirportDatabase:
    """
    Airport coordinate lookup.

    Accepts ICAO ("YSSY") or IATA ("SYD") codes; ICAO wins when a code
    could be read either way.
    """

    # Runtime overrides (e.g. for private airfields not in airportsdata)
    _custom_airports: Dict[str, AirportCoordinate] = {}

    @classmethod
    def get_coordinate(cls, code: str) -> Optional[AirportCoordinate]:
        """Coordinate for an airport code, None if unknown"""
        if not code:
            return None
        key = code.strip().upper()

        if key in cls._custom_airports:
            return cls._custom_airports[key]

        entry = _ICAO_DB.get(key) or _IATA_DB.get(key)
        if entry:
            return AirportCoordinate(
                code=entry['icao'] or key,
                latitude=float(entry['lat']),
                longitude=float(entry['lon']),
                timezone=entry['tz'] or None,
            )

        logger.debug(f"Airport '{key}' not found in airportsdata")
        return None

    @classmethod
    def convert_to_icao(cls, code: str) -> str:
        """ICAO code for an IATA code; unknown or ICAO codes are returned unchanged"""
        key = (code or '').strip().upper()
        if len(key) == 3:
            entry = _IATA_DB.get(key)
            if entry and entry['icao']:
                return entry['icao']
        return key

    @classmethod
    def timezone_for(cls, code: str) -> Optional[str]:
        coordinate = cls.get_coordinate(code)
        return coordinate.timezone if coordinate else None

    @classmethod
    def add_custom_airport(cls, code: str, latitude: float, longitude: float,
                           timezone: Optional[str] = None):
        """Add/override an airport at runtime"""
        key = code.strip().upper()
        cls._custom_airports[key] = AirportCoordinate(
            code=key, latitude=latitude, longitude=longitude, timezone=timezone
        )
        logger.info(f"Added custom airport {key} ({latitude:.4f}, {longitude:.4f})")

    @classmethod
    def remove_custom_airport(cls, code: str):
        cls._custom_airports.pop(code.strip().upper(), None)
