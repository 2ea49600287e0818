"""
Rendering Reconciler — keeps the rendered children in step with the derived list.

Policy is all-or-nothing: an unchanged list (same length, same entry and
same StateObject at every position) keeps its children and only hands
them the new context; any other change disposes every child and builds
a fresh set. Badge lists are small, so no per-element diffing.
"""

import logging
from typing import List, Optional, Sequence

from badge_kernel.models.badge import BadgeRender, DerivedEntity
from badge_kernel.models.state import HassContext

logger = logging.getLogger(__name__)

HIDDEN = "hidden"
REFRESHED = "refreshed"
REBUILT = "rebuilt"

# Display fields only; filtering keys stay with the badge
_FILTER_KEYS = {"state_filter", "conditions"}


class ChildBadge:
    """One rendered entity badge owned by a filter badge."""

    def __init__(self, config: dict, hass: HassContext, preview: bool = False):
        self.config = config
        self.hass = hass
        self.preview = preview
        self.loaded = False
        self.disposed = False

    @property
    def entity_id(self) -> str:
        return self.config["entity"]

    def load(self) -> None:
        self.loaded = True

    def dispose(self) -> None:
        self.disposed = True
        self.hass = None

    def to_descriptor(self) -> dict:
        descriptor = dict(self.config)
        state_obj = self.hass.get(self.entity_id) if self.hass else None
        descriptor["state"] = state_obj.state if state_obj else None
        descriptor["preview"] = self.preview
        return descriptor


def child_config(derived: DerivedEntity) -> dict:
    """Generic "entity" badge config for a passing entry."""
    fields = derived.config.model_dump(exclude_none=True, exclude=_FILTER_KEYS)
    return {"type": "entity", **fields}


class RenderReconciler:
    """Owns the child set and the container's visibility for one badge."""

    def __init__(self, gap: str = "8px", preview: bool = False, identity_checks: bool = True):
        self.gap = gap
        self.preview = preview
        self.identity_checks = identity_checks
        self.visible = False
        self._children: List[ChildBadge] = []
        self._previous: Optional[List[DerivedEntity]] = None

    @property
    def children(self) -> List[ChildBadge]:
        return list(self._children)

    def clear(self) -> None:
        """Dispose every child and forget the previous list."""
        for child in self._children:
            child.dispose()
        self._children = []
        self._previous = None
        self.visible = False

    def _same_entry(self, old: DerivedEntity, new: DerivedEntity) -> bool:
        if self.identity_checks:
            return old.config is new.config and old.state_obj is new.state_obj
        return old.config == new.config and new.state_obj.same_content(old.state_obj)

    def is_same(self, entities: Sequence[DerivedEntity]) -> bool:
        previous = self._previous
        return (
            previous is not None
            and len(previous) == len(entities)
            and all(self._same_entry(o, n) for o, n in zip(previous, entities))
        )

    def reconcile(self, entities: List[DerivedEntity], hass: HassContext) -> str:
        """Apply a freshly computed derived list. Returns what was done."""
        if not entities:
            for child in self._children:
                child.dispose()
            self._children = []
            self._previous = entities
            self.visible = False
            return HIDDEN

        if self.is_same(entities):
            for child in self._children:
                child.hass = hass
            self._previous = entities
            self.visible = True
            return REFRESHED

        for child in self._children:
            child.dispose()
        children = []
        for derived in entities:
            child = ChildBadge(child_config(derived), hass, preview=self.preview)
            child.load()
            children.append(child)
        self._children = children
        self._previous = entities
        self.visible = True
        logger.debug("Rebuilt %d child badges", len(children))
        return REBUILT

    def layout(self) -> dict:
        if not self.visible:
            return {"display": "none"}
        return {
            "display": "flex",
            "flex_wrap": "wrap",
            "justify_content": "center",
            "gap": self.gap,
        }

    def render(self) -> BadgeRender:
        return BadgeRender(
            visible=self.visible,
            layout=self.layout(),
            children=[child.to_descriptor() for child in self._children],
        )
