"""
Rolling Window Aggregation
==========================

Cumulative hours over trailing windows of N days ending at an evaluation
date. A record dated exactly N days before the evaluation date is inside
the window: the window is [as_of - N days, as_of], both ends inclusive.

Flight totals sum each record's flight hours (block + simulator time);
duty totals sum each duty period's sign-on to sign-off hours. Both use
the same windowing.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence, Union
import logging

import numpy as np
import pandas as pd

from models.data_models import HoursSource, RollingWindowResult

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def _hours(record, source: HoursSource) -> float:
    value = getattr(record, source.value, 0.0) or 0.0
    return max(0.0, float(value))


def window_start(as_of: DateLike, window_days: int) -> date:
    if window_days < 0:
        raise ValueError(f"window_days must be >= 0, got {window_days}")
    return _as_date(as_of) - timedelta(days=window_days)


def sum_hours(records: Iterable, window_days: int, as_of: DateLike,
              source: HoursSource = HoursSource.FLIGHT) -> float:
    """Linear scan: total hours of records dated within [as_of - window_days, as_of]"""
    end = _as_date(as_of)
    start = window_start(end, window_days)
    total = 0.0
    for record in records:
        record_date = getattr(record, 'date', None)
        if record_date is None:
            continue
        if start <= _as_date(record_date) <= end:
            total += _hours(record, source)
    return total


class RollingWindowAggregator:
    """
    Sums hours over several trailing windows from one record snapshot.

    The records are read once into a date-sorted frame with a running
    total, so each window is two binary searches and a subtraction no
    matter how many window lengths are requested.
    """

    def __init__(self, records: Iterable, source: HoursSource = HoursSource.FLIGHT):
        self.source = source
        rows = []
        skipped = 0
        for record in records:
            record_date = getattr(record, 'date', None)
            if record_date is None:
                skipped += 1
                continue
            rows.append((_as_date(record_date), _hours(record, source)))
        if skipped:
            logger.warning(f"{skipped} record(s) without a valid date excluded from {source.value} totals")

        frame = pd.DataFrame(rows, columns=['date', 'hours'])
        frame['date'] = pd.to_datetime(frame['date'])
        frame = frame.sort_values('date', kind='mergesort').reset_index(drop=True)

        self._frame = frame
        self._dates = frame['date'].to_numpy(dtype='datetime64[ns]')
        self._cumulative = np.concatenate(([0.0], np.cumsum(frame['hours'].to_numpy(dtype=float))))

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def sum_hours(self, window_days: int, as_of: DateLike) -> float:
        end = _as_date(as_of)
        start = window_start(end, window_days)
        lo = np.searchsorted(self._dates, np.datetime64(start, 'ns'), side='left')
        hi = np.searchsorted(self._dates, np.datetime64(end, 'ns'), side='right')
        if hi <= lo:
            return 0.0
        return float(self._cumulative[hi] - self._cumulative[lo])

    def window_result(self, window_days: int, as_of: DateLike) -> RollingWindowResult:
        return RollingWindowResult(
            source=self.source,
            window_days=window_days,
            as_of=_as_date(as_of),
            hours=self.sum_hours(window_days, as_of),
        )

    def results(self, window_lengths: Sequence[int], as_of: DateLike) -> List[RollingWindowResult]:
        return [self.window_result(days, as_of) for days in window_lengths]
