"""
Time Credit Allocation
======================

Splits a sector's block time into exactly one regulatory bucket:

1. Positioning (passenger) sectors earn no P1/P1US/P2 credit
2. Captain -> P1
3. First officer -> P1US when in command under supervision AND pilot flying, else P2
4. Second officer -> P2

Instrument time is a flat per-sector allowance credited to the pilot flying.
Simulator time is a separate figure and is never split into P1/P1US/P2.
"""

from typing import Union

from core.parameters import TimeCreditParameters
from models.data_models import FlightRecord, FlightTimeCredits, FlightTimePosition


class TimeCreditAllocator:
    """Deterministic, stateless credit allocation"""

    def __init__(self, params: TimeCreditParameters = None):
        self.params = params or TimeCreditParameters()

    def instrument_time(self, is_pilot_flying: bool) -> float:
        return self.params.instrument_hours if is_pilot_flying else 0.0

    def allocate(
        self,
        position: Union[FlightTimePosition, str],
        block_time: float,
        is_icus: bool = False,
        is_pilot_flying: bool = False,
        is_positioning: bool = False,
    ) -> FlightTimeCredits:
        position = FlightTimePosition.from_value(position)
        instrument = self.instrument_time(is_pilot_flying)
        if is_positioning:
            return FlightTimeCredits(instrument=instrument)

        block = max(0.0, block_time or 0.0)

        if position is FlightTimePosition.CAPTAIN:
            return FlightTimeCredits(p1=block, instrument=instrument)

        if position is FlightTimePosition.FIRST_OFFICER:
            if is_icus and is_pilot_flying:
                return FlightTimeCredits(p1us=block, instrument=instrument)
            return FlightTimeCredits(p2=block, instrument=instrument)

        # Second officer
        return FlightTimeCredits(p2=block, instrument=instrument)

    def allocate_record(self, record: FlightRecord,
                        default_position: Union[FlightTimePosition, str] = FlightTimePosition.CAPTAIN
                        ) -> FlightTimeCredits:
        """Allocate a logbook record; simulator sessions carry no block time to split"""
        position = record.position or default_position
        block = 0.0 if record.is_simulator_session else record.block_time
        return self.allocate(
            position,
            block,
            is_icus=record.is_icus,
            is_pilot_flying=record.is_pilot_flying,
            is_positioning=record.is_positioning,
        )
