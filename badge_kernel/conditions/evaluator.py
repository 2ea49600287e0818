"""
Condition Evaluator — pure evaluation of condition trees against a snapshot.

Behavioral Contract:
- Evaluation never raises: a leaf whose entity has no StateObject is false
- AND / OR short-circuit; NOT holds when none of its children holds
- Dependency extraction visits every leaf, whatever the combinator
- Entity injection returns a new tree and never touches the input
"""

from datetime import datetime, time
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from badge_kernel.models.condition import (
    AndCondition,
    Condition,
    CombinatorCondition,
    EntityCondition,
    NotCondition,
    NumericStateCondition,
    OrCondition,
    ScreenCondition,
    StateCondition,
    SunCondition,
    TimeCondition,
    UserCondition,
)
from badge_kernel.models.state import HassContext, StateObject
from badge_kernel.state.store import valid_entity_id

SUN_ENTITY = "sun.sun"

_WEEKDAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


def _as_list(value: Union[str, List[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _leaf_value(condition, state_obj: StateObject):
    if condition.attribute:
        return state_obj.attributes.get(condition.attribute)
    return state_obj.state


def _resolve_state_value(value: str, hass: HassContext) -> str:
    """A value naming an existing entity stands for that entity's state."""
    if valid_entity_id(value):
        referenced = hass.get(value)
        if referenced is not None:
            return referenced.state
    return value


def _resolve_threshold(
    value: Union[float, str, None], hass: HassContext
) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str) and valid_entity_id(value):
        referenced = hass.get(value)
        if referenced is None:
            return None
        value = referenced.state
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_time(value: str) -> time:
    parts = [int(p) for p in value.split(":")]
    return time(*parts)


def _parse_datetime(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


# --- Leaf checks ---

def _check_state(condition: StateCondition, hass: HassContext) -> bool:
    state_obj = hass.get(condition.entity) if condition.entity else None
    if state_obj is None:
        return False

    value = _leaf_value(condition, state_obj)
    if value is None:
        return False
    value = str(value)

    if condition.state is not None:
        allowed = [_resolve_state_value(v, hass) for v in _as_list(condition.state)]
        if value not in allowed:
            return False

    if condition.state_not is not None:
        rejected = [_resolve_state_value(v, hass) for v in _as_list(condition.state_not)]
        if value in rejected:
            return False

    return True


def _check_numeric_state(condition: NumericStateCondition, hass: HassContext) -> bool:
    state_obj = hass.get(condition.entity) if condition.entity else None
    if state_obj is None:
        return False

    try:
        value = float(_leaf_value(condition, state_obj))
    except (TypeError, ValueError):
        return False

    if condition.above is not None:
        above = _resolve_threshold(condition.above, hass)
        if above is None or not value > above:
            return False

    if condition.below is not None:
        below = _resolve_threshold(condition.below, hass)
        if below is None or not value < below:
            return False

    return True


def _check_time(condition: TimeCondition, hass: HassContext) -> bool:
    now = hass.now()

    if condition.weekdays and _WEEKDAYS[now.weekday()] not in condition.weekdays:
        return False

    current = now.time().replace(microsecond=0, tzinfo=None)
    after = _parse_time(condition.after) if condition.after else None
    before = _parse_time(condition.before) if condition.before else None

    if after and before and after > before:
        # Window wraps midnight, e.g. 22:00 -> 06:00
        return current >= after or current < before
    if after and current < after:
        return False
    if before and current >= before:
        return False
    return True


def _sun_phase(sun: StateObject, now: datetime) -> str:
    """One of "day", "evening" (after sunset) or "morning" (before sunrise)."""
    if sun.state == "above_horizon":
        return "day"
    next_rising = _parse_datetime(sun.attributes.get("next_rising"))
    if next_rising is not None and next_rising.tzinfo is not None:
        # Published in UTC; compare calendar dates in the clock's zone
        if now.tzinfo is not None:
            next_rising = next_rising.astimezone(now.tzinfo)
        else:
            next_rising = next_rising.astimezone().replace(tzinfo=None)
    if next_rising is not None and next_rising.date() > now.date():
        return "evening"
    return "morning"


def _check_sun(condition: SunCondition, hass: HassContext) -> bool:
    sun = hass.get(SUN_ENTITY)
    if sun is None:
        return False

    phase = _sun_phase(sun, hass.now())
    after_ok = {
        None: True,
        "sunrise": phase in ("day", "evening"),
        "sunset": phase == "evening",
    }[condition.after]
    before_ok = {
        None: True,
        "sunrise": phase == "morning",
        "sunset": phase in ("morning", "day"),
    }[condition.before]

    if condition.after == "sunset" and condition.before == "sunrise":
        return after_ok or before_ok
    return after_ok and before_ok


def _check_screen(condition: ScreenCondition, hass: HassContext) -> bool:
    return condition.media_query in hass.screen_matches


def _check_user(condition: UserCondition, hass: HassContext) -> bool:
    return hass.user is not None and hass.user.id in condition.users


def _check_and(condition: AndCondition, hass: HassContext) -> bool:
    return all(check_condition(c, hass) for c in condition.conditions)


def _check_or(condition: OrCondition, hass: HassContext) -> bool:
    return any(check_condition(c, hass) for c in condition.conditions)


def _check_not(condition: NotCondition, hass: HassContext) -> bool:
    return not any(check_condition(c, hass) for c in condition.conditions)


# Closed dispatch table — one entry per condition tag
_CHECKS: Dict[str, Callable[..., bool]] = {
    "state": _check_state,
    "numeric_state": _check_numeric_state,
    "time": _check_time,
    "sun": _check_sun,
    "screen": _check_screen,
    "user": _check_user,
    "and": _check_and,
    "or": _check_or,
    "not": _check_not,
}


def check_condition(condition: Condition, hass: HassContext) -> bool:
    """Evaluate one condition tree against the snapshot."""
    return _CHECKS[condition.condition](condition, hass)


def check_conditions_met(conditions: Iterable[Condition], hass: HassContext) -> bool:
    """A list of conditions is an implicit AND."""
    return all(check_condition(c, hass) for c in conditions)


def add_entity_to_condition(condition: Condition, entity_id: str) -> Condition:
    """Point entity-scoped leaves lacking an entity at ``entity_id``."""
    if isinstance(condition, CombinatorCondition):
        return condition.model_copy(update={
            "conditions": [
                add_entity_to_condition(c, entity_id) for c in condition.conditions
            ],
        })
    if isinstance(condition, EntityCondition) and not condition.entity:
        return condition.model_copy(update={"entity": entity_id})
    return condition


def _leaf_dependencies(condition: Condition) -> Set[str]:
    if isinstance(condition, StateCondition):
        ids = {condition.entity} if condition.entity else set()
        for value in _as_list(condition.state) + _as_list(condition.state_not):
            if valid_entity_id(value):
                ids.add(value)
        return ids

    if isinstance(condition, NumericStateCondition):
        ids = {condition.entity} if condition.entity else set()
        for threshold in (condition.above, condition.below):
            if isinstance(threshold, str) and valid_entity_id(threshold):
                ids.add(threshold)
        return ids

    if isinstance(condition, SunCondition):
        return {SUN_ENTITY}

    return set()


def extract_condition_entity_ids(conditions: Iterable[Condition]) -> Set[str]:
    """Every entity id any leaf of the given trees depends on."""
    entity_ids: Set[str] = set()
    for condition in conditions:
        if isinstance(condition, CombinatorCondition):
            entity_ids |= extract_condition_entity_ids(condition.conditions)
        else:
            entity_ids |= _leaf_dependencies(condition)
    return entity_ids
