"""
Configuration intake for entity-filter badges.

The only place the engine raises: everything here runs before a badge
touches its own state, so a rejected config leaves the badge as it was.
"""

from typing import FrozenSet, List, Sequence, Union

from pydantic import ValidationError

from badge_kernel.conditions.evaluator import extract_condition_entity_ids
from badge_kernel.errors import ConfigurationError
from badge_kernel.models.badge import EntityFilterBadgeConfig, EntityFilterEntityConfig
from badge_kernel.state.store import valid_entity_id


def process_config_entities(
    entities: Sequence[Union[str, EntityFilterEntityConfig]],
) -> List[EntityFilterEntityConfig]:
    """Normalize plain entity ids into entry objects, in declared order."""
    processed = []
    for index, entry in enumerate(entities):
        if isinstance(entry, str):
            entry = EntityFilterEntityConfig(entity=entry)
        if not valid_entity_id(entry.entity):
            raise ConfigurationError(f"Invalid entity ID at position {index}: {entry.entity}")
        processed.append(entry)
    return processed


def validate_badge_config(
    config: Union[dict, EntityFilterBadgeConfig],
) -> EntityFilterBadgeConfig:
    """Parse and check a badge config. Raises ConfigurationError."""
    if isinstance(config, dict):
        entities = config.get("entities")
        if not isinstance(entities, list) or not entities:
            raise ConfigurationError("Entities must be specified")
        try:
            config = EntityFilterBadgeConfig.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid badge config: {e}") from e
    elif not isinstance(config, EntityFilterBadgeConfig):
        raise ConfigurationError("Badge config must be a mapping")

    if not config.entities:
        raise ConfigurationError("Entities must be specified")

    has_top_level = config.conditions is not None or config.state_filter is not None
    has_per_entity = any(
        isinstance(entry, EntityFilterEntityConfig)
        and (entry.conditions is not None or entry.state_filter is not None)
        for entry in config.entities
    )
    if not (has_top_level or has_per_entity):
        raise ConfigurationError("Incorrect filter config")

    return config


def compute_watch_set(
    config: EntityFilterBadgeConfig,
    entities: Sequence[EntityFilterEntityConfig],
) -> FrozenSet[str]:
    """Configured entities plus every entity any condition tree depends on."""
    watch = {entry.entity for entry in entities}
    for entry in entities:
        if entry.conditions:
            watch |= extract_condition_entity_ids(entry.conditions)
    if config.conditions:
        watch |= extract_condition_entity_ids(config.conditions)
    return frozenset(watch)
