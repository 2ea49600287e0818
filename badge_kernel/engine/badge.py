"""
Entity Filter Badge — intake, dirty check, rebuild, reconcile.

States:
  UNCONFIGURED → CONFIGURED → (SKIP | RECOMPUTE → HIDDEN | REFRESHED | REBUILT)

Each badge instance owns its watch set, cached references, derived list
and child set. The HassContext it is handed is shared and read-only.
"""

import logging
from typing import Callable, FrozenSet, List, Optional, Union

from badge_kernel.engine.builder import build_entity_list
from badge_kernel.engine.config import (
    compute_watch_set,
    process_config_entities,
    validate_badge_config,
)
from badge_kernel.engine.dirty import DirtyChecker
from badge_kernel.engine.reconciler import HIDDEN, REBUILT, REFRESHED, RenderReconciler
from badge_kernel.models.badge import (
    BadgeRender,
    BadgeStats,
    DerivedEntity,
    EntityFilterBadgeConfig,
    EntityFilterEntityConfig,
)
from badge_kernel.models.engine import EngineConfig
from badge_kernel.models.state import HassContext

logger = logging.getLogger(__name__)


class EntityFilterBadge:
    """Shows the configured entities that currently pass their filter."""

    def __init__(
        self,
        engine_config: Optional[EngineConfig] = None,
        on_recompute: Optional[Callable[[List[DerivedEntity]], None]] = None,
    ):
        self.engine_config = engine_config or EngineConfig()
        self.on_recompute = on_recompute
        self.stats = BadgeStats()

        self._hass: Optional[HassContext] = None
        self._config: Optional[EntityFilterBadgeConfig] = None
        self._config_entities: Optional[List[EntityFilterEntityConfig]] = None
        self._entities: List[DerivedEntity] = []
        self._dirty = DirtyChecker(identity_checks=self.engine_config.identity_checks)
        self._reconciler = RenderReconciler(
            gap=self.engine_config.gap,
            preview=self.engine_config.preview,
            identity_checks=self.engine_config.identity_checks,
        )

    @property
    def config(self) -> Optional[EntityFilterBadgeConfig]:
        return self._config

    @property
    def hass(self) -> Optional[HassContext]:
        return self._hass

    @property
    def watch_set(self) -> FrozenSet[str]:
        return self._dirty.watch_set

    @property
    def entities(self) -> List[DerivedEntity]:
        """The derived list from the latest recomputation."""
        return list(self._entities)

    @property
    def children(self):
        return self._reconciler.children

    @property
    def visible(self) -> bool:
        return self._reconciler.visible

    def set_config(self, config: Union[dict, EntityFilterBadgeConfig]) -> None:
        """
        Accept a new configuration. Raises ConfigurationError.

        Validation completes before any state is dropped, so a rejected
        config leaves the current render in place.
        """
        parsed = validate_badge_config(config)
        entities = process_config_entities(parsed.entities)
        watch_set = compute_watch_set(parsed, entities)

        self._reconciler.clear()
        self._entities = []
        self._config = parsed
        self._config_entities = entities
        self._dirty.reset(watch_set)
        self.stats.watch_set_size = len(watch_set)
        logger.info(
            "Configured entity filter badge: %d entities, %d watched",
            len(entities), len(watch_set),
        )

        if self._hass is not None:
            self.update(self._hass)

    def should_update(self, hass: HassContext) -> bool:
        """Run the dirty check. Always records the references it saw."""
        return self._dirty.check(hass)

    def update(self, hass: HassContext) -> bool:
        """
        Take a new snapshot from the host.
        Returns True if the derived list was recomputed.
        """
        self._hass = hass
        if self._config is None or self._config_entities is None:
            return False

        self.stats.updates += 1
        if not self.should_update(hass):
            self.stats.skipped_updates += 1
            return False

        entities = build_entity_list(self._config, self._config_entities, hass)
        self._entities = entities
        self.stats.recomputations += 1
        if self.on_recompute is not None:
            self.on_recompute(list(entities))

        outcome = self._reconciler.reconcile(entities, hass)
        if outcome == HIDDEN:
            self.stats.hidden += 1
        elif outcome == REFRESHED:
            self.stats.refreshes += 1
        elif outcome == REBUILT:
            self.stats.rebuilds += 1
        logger.debug(
            "Recomputed badge: %d of %d entities pass (%s)",
            len(entities), len(self._config_entities), outcome,
        )
        return True

    def render(self) -> BadgeRender:
        """Current output for the rendering host."""
        return self._reconciler.render()
