"""Entity-filter badge configuration and the engine's derived outputs."""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from badge_kernel.models.condition import Condition
from badge_kernel.models.state import StateObject

FilterOperator = str  # "==", "!=", "<", "<=", ">", ">=", "in", "not in", "regex"


class StateFilter(BaseModel):
    """A single acceptable-value predicate against an entity's state."""

    operator: FilterOperator = "=="
    value: Union[str, float, int, List[Union[str, float, int]]]
    attribute: Optional[str] = None


# Raw values are shorthand for {"operator": "==", "value": raw}
StateFilterEntry = Union[StateFilter, str, int, float]


class EntityFilterEntityConfig(BaseModel):
    """One configured entity. Unknown keys are display fields passed to the child."""

    model_config = ConfigDict(extra="allow")

    entity: str
    state_filter: Optional[List[StateFilterEntry]] = None
    conditions: Optional[List[Condition]] = None


class EntityFilterBadgeConfig(BaseModel):
    """Top-level badge configuration, as loaded from the dashboard."""

    model_config = ConfigDict(extra="allow")

    type: str = "entity-filter"
    entities: List[Union[str, EntityFilterEntityConfig]]
    state_filter: Optional[List[StateFilterEntry]] = None
    conditions: Optional[List[Condition]] = None


class DerivedEntity:
    """An entity that currently passes its filter, with the state it passed on."""

    __slots__ = ("config", "state_obj")

    def __init__(self, config: EntityFilterEntityConfig, state_obj: StateObject):
        self.config = config
        self.state_obj = state_obj

    @property
    def entity_id(self) -> str:
        return self.config.entity

    def __repr__(self) -> str:
        return f"DerivedEntity({self.entity_id!r}, state={self.state_obj.state!r})"


class BadgeRender(BaseModel):
    """What the rendering host receives for one badge."""

    visible: bool
    layout: dict = {}
    children: List[dict] = []


class BadgeStats(BaseModel):
    """Instrumentation counters for one badge instance."""

    updates: int = 0
    skipped_updates: int = 0
    recomputations: int = 0
    rebuilds: int = 0
    refreshes: int = 0
    hidden: int = 0
    watch_set_size: int = Field(default=0, ge=0)
