"""
Bulk-edit field state.

When several records are edited together each field is in one of three
states:

- UNSET: the user has not touched the field
- MIXED: the selection holds different values and the user left it alone
- Value(v): the user set (or the whole selection shares) the value v

Only Value overwrites a record's field on apply.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Union

from models.data_models import FlightRecord


class _Marker:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


UNSET = _Marker("UNSET")
MIXED = _Marker("MIXED")


@dataclass(frozen=True)
class Value:
    value: Any


FieldState = Union[_Marker, Value]


def merge_values(values: Iterable[Any]) -> FieldState:
    """Fold the values of a selection into one state"""
    state: FieldState = UNSET
    for v in values:
        state = merge(state, Value(v))
    return state


def merge(a: FieldState, b: FieldState) -> FieldState:
    if a is UNSET:
        return b
    if b is UNSET:
        return a
    if a is MIXED or b is MIXED:
        return MIXED
    return a if a.value == b.value else MIXED


def apply(state: FieldState, current: Any) -> Any:
    """New field value: the edited value, otherwise the current one"""
    if isinstance(state, Value):
        return state.value
    return current


def selection_state(records: Iterable[FlightRecord], field_name: str) -> FieldState:
    return merge_values(getattr(r, field_name) for r in records)


def apply_edits(records: Iterable[FlightRecord], edits: Dict[str, FieldState]) -> List[FlightRecord]:
    """
    Copies of the records with every Value edit applied.

    Unknown field names raise ValueError; UNSET and MIXED fields keep each
    record's own value.
    """
    valid = set(FlightRecord.__dataclass_fields__)
    unknown = set(edits) - valid
    if unknown:
        raise ValueError(f"Unknown record field(s): {', '.join(sorted(unknown))}")

    updated = []
    for record in records:
        changes = {name: apply(state, getattr(record, name)) for name, state in edits.items()}
        updated.append(replace(record, **changes))
    return updated
