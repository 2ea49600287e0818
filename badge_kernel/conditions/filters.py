"""State-filter evaluation — a flat list of acceptable values for one entity."""

import re
from typing import Any, List, Optional, Union

from badge_kernel.models.badge import StateFilter, StateFilterEntry
from badge_kernel.models.state import StateObject


def normalize_filter(entry: StateFilterEntry) -> StateFilter:
    """Expand a raw value into an equality filter."""
    if isinstance(entry, StateFilter):
        return entry
    return StateFilter(operator="==", value=entry)


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_list(value: Union[str, float, int, list]) -> List[str]:
    if isinstance(value, list):
        return [str(v) for v in value]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    return [str(value)]


def _compare(operator: str, actual: Any, expected: Any) -> bool:
    if operator in ("==", "!="):
        equal = str(actual) == str(expected)
        return equal if operator == "==" else not equal

    if operator in ("<", "<=", ">", ">="):
        a, b = _to_float(actual), _to_float(expected)
        if a is None or b is None:
            return False
        if operator == "<":
            return a < b
        if operator == "<=":
            return a <= b
        if operator == ">":
            return a > b
        return a >= b

    if operator == "in":
        return str(actual) in _as_list(expected)
    if operator == "not in":
        return str(actual) not in _as_list(expected)

    if operator == "regex":
        try:
            return re.search(str(expected), str(actual)) is not None
        except re.error:
            return False

    return False


def evaluate_state_filter(state_obj: StateObject, entry: StateFilterEntry) -> bool:
    """True if the entity's state (or configured attribute) satisfies the filter."""
    state_filter = normalize_filter(entry)
    if state_filter.attribute:
        if state_filter.attribute not in state_obj.attributes:
            return False
        actual = state_obj.attributes[state_filter.attribute]
    else:
        actual = state_obj.state
    return _compare(state_filter.operator, actual, state_filter.value)


def evaluate_state_filters(
    state_obj: StateObject, entries: List[StateFilterEntry]
) -> bool:
    """True if any filter in the list accepts the state."""
    return any(evaluate_state_filter(state_obj, entry) for entry in entries)
