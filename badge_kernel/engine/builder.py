"""Derived List Builder — the ordered subset of configured entities that pass."""

from typing import List, Sequence

from badge_kernel.conditions.evaluator import add_entity_to_condition, check_conditions_met
from badge_kernel.conditions.filters import evaluate_state_filters
from badge_kernel.models.badge import (
    DerivedEntity,
    EntityFilterBadgeConfig,
    EntityFilterEntityConfig,
)
from badge_kernel.models.state import HassContext


def entity_passes(
    entry: EntityFilterEntityConfig,
    config: EntityFilterBadgeConfig,
    hass: HassContext,
) -> bool:
    """
    Evaluate one entry.

    Conditions win over state filters; an entry's own conditions or
    filters replace the top-level ones entirely, they are never merged.
    """
    state_obj = hass.get(entry.entity)
    if state_obj is None:
        return False

    conditions = entry.conditions if entry.conditions is not None else config.conditions
    if conditions is not None:
        scoped = [add_entity_to_condition(c, entry.entity) for c in conditions]
        return check_conditions_met(scoped, hass)

    filters = entry.state_filter if entry.state_filter is not None else config.state_filter
    if filters is not None:
        return evaluate_state_filters(state_obj, filters)

    return False


def build_entity_list(
    config: EntityFilterBadgeConfig,
    entities: Sequence[EntityFilterEntityConfig],
    hass: HassContext,
) -> List[DerivedEntity]:
    """Rebuild the derived list wholesale, in configuration order."""
    return [
        DerivedEntity(entry, hass.states[entry.entity])
        for entry in entities
        if entity_passes(entry, config, hass)
    ]
