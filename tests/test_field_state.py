"""
Bulk-edit Field State Tests

Run: python -m pytest tests/test_field_state.py -v
"""

from datetime import date

import pytest

from models.data_models import FlightRecord
from models.field_state import (
    MIXED, UNSET, Value, apply, apply_edits, merge, merge_values, selection_state
)


def make_record(identifier, **overrides):
    fields = dict(identifier=identifier, date=date(2024, 6, 1), departure='YSSY', arrival='YMML',
                  block_time=1.5)
    fields.update(overrides)
    return FlightRecord(**fields)


class TestMerge:

    def test_empty_selection_is_unset(self):
        assert merge_values([]) is UNSET

    def test_shared_value(self):
        assert merge_values(['YSSY', 'YSSY']) == Value('YSSY')

    def test_different_values_are_mixed(self):
        assert merge_values(['YSSY', 'YMML', 'YSSY']) is MIXED

    @pytest.mark.parametrize("a,b,expected", [
        (UNSET, Value(1), Value(1)),
        (Value(1), UNSET, Value(1)),
        (Value(1), Value(1), Value(1)),
        (Value(1), Value(2), MIXED),
        (MIXED, Value(1), MIXED),
        (UNSET, UNSET, UNSET),
    ])
    def test_merge_table(self, a, b, expected):
        assert merge(a, b) == expected

    def test_selection_state(self):
        records = [make_record('A', is_pilot_flying=True), make_record('B', is_pilot_flying=False)]
        assert selection_state(records, 'is_pilot_flying') is MIXED
        assert selection_state(records, 'departure') == Value('YSSY')


class TestApply:

    def test_value_overwrites(self):
        assert apply(Value(2.0), 1.5) == 2.0

    @pytest.mark.parametrize("state", [UNSET, MIXED])
    def test_unset_and_mixed_keep_current(self, state):
        assert apply(state, 1.5) == 1.5

    def test_apply_edits_returns_new_records(self):
        records = [make_record('A', block_time=1.0), make_record('B', block_time=2.0)]
        edits = {'is_pilot_flying': Value(True), 'block_time': MIXED}

        updated = apply_edits(records, edits)

        assert [r.is_pilot_flying for r in updated] == [True, True]
        assert [r.block_time for r in updated] == [1.0, 2.0]
        assert records[0].is_pilot_flying is False

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            apply_edits([make_record('A')], {'tail_number': Value('VH-XZA')})
