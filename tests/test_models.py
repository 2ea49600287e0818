"""Tests for core data models."""

import pytest
from pydantic import ValidationError

from badge_kernel.models import (
    BadgeStats,
    EngineConfig,
    EntityFilterBadgeConfig,
    EntityFilterEntityConfig,
    StateCondition,
    StateFilter,
    StateObject,
)


class TestStateObject:
    def test_frozen(self):
        obj = StateObject(entity_id="light.a", state="on")
        with pytest.raises(ValidationError):
            obj.state = "off"

    def test_domain(self):
        assert StateObject(entity_id="binary_sensor.door", state="off").domain == "binary_sensor"

    def test_same_content(self):
        a = StateObject(entity_id="light.a", state="on", attributes={"b": 1})
        assert a.same_content(a.model_copy())
        assert not a.same_content(StateObject(entity_id="light.a", state="on", attributes={"b": 2}))
        assert not a.same_content(None)


class TestBadgeConfig:
    def test_mixed_entities(self):
        config = EntityFilterBadgeConfig(
            entities=["light.a", {"entity": "light.b", "name": "B", "state_filter": ["on"]}],
            state_filter=["on", {"operator": ">", "value": 5}],
        )
        assert config.entities[0] == "light.a"
        assert isinstance(config.entities[1], EntityFilterEntityConfig)
        assert isinstance(config.state_filter[1], StateFilter)

    def test_entry_conditions_parsed(self):
        entry = EntityFilterEntityConfig(
            entity="light.a",
            conditions=[{"condition": "state", "state": "on"}],
        )
        assert isinstance(entry.conditions[0], StateCondition)

    def test_entities_required(self):
        with pytest.raises(ValidationError):
            EntityFilterBadgeConfig(state_filter=["on"])


class TestEngineModels:
    def test_engine_config_defaults(self):
        config = EngineConfig()
        assert config.identity_checks is True
        assert config.gap == "8px"
        assert config.preview is False

    def test_stats_start_at_zero(self):
        stats = BadgeStats()
        assert stats.recomputations == 0
        assert stats.skipped_updates == 0
