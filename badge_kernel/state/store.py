"""
State Store — the in-memory State Snapshot Source.

Updated by: the live connection layer (or the HTTP host)
Queried by: every badge instance, read-only

Copy-on-write: each mutation publishes a new states mapping and a new
StateObject only for entities whose content changed, so snapshots taken
earlier stay valid and unchanged entities keep their identity.
"""

import logging
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from badge_kernel.models.state import HassContext, LocaleContext, StateObject, UserInfo

logger = logging.getLogger(__name__)

_ENTITY_ID_RE = re.compile(r"^(?!.+__)(?!_)[\da-z_]+(?<!_)\.(?!_)[\da-z_]+(?<!_)$")


def valid_entity_id(entity_id: str) -> bool:
    """Check an id has the ``<domain>.<object_id>`` shape."""
    return isinstance(entity_id, str) and bool(_ENTITY_ID_RE.match(entity_id))


class StateStore:
    """
    In-memory snapshot source for the prototype.
    Production would be fed by the platform's websocket subscription.
    """

    def __init__(self, locale: Optional[LocaleContext] = None):
        self._states: Dict[str, StateObject] = {}
        self._locale = locale or LocaleContext()
        self._user: Optional[UserInfo] = None
        self._screen: frozenset = frozenset()
        self._clock: Optional[datetime] = None
        self._snapshot: Optional[HassContext] = None

    @property
    def states(self) -> Dict[str, StateObject]:
        """Current states mapping. Do not mutate."""
        return self._states

    def get_state(self, entity_id: str) -> Optional[StateObject]:
        return self._states.get(entity_id)

    def set_state(
        self,
        entity_id: str,
        state: str,
        attributes: Optional[dict] = None,
    ) -> StateObject:
        """Publish a state for one entity. Returns the current object."""
        return self.apply_batch([(entity_id, state, attributes)])[0]

    def remove_state(self, entity_id: str) -> bool:
        """Drop an entity. Returns False if it was not present."""
        if entity_id not in self._states:
            return False
        self.apply_batch([(entity_id, None, None)])
        return True

    def apply_batch(
        self, updates: Iterable[Tuple[str, Optional[str], Optional[dict]]]
    ) -> List[Optional[StateObject]]:
        """
        Apply several updates and publish them as one snapshot.

        Each update is ``(entity_id, state, attributes)``; a ``None`` state
        removes the entity.
        """
        updates = list(updates)
        for entity_id, _, _ in updates:
            if not valid_entity_id(entity_id):
                raise ValueError(f"Invalid entity ID: {entity_id!r}")

        states = dict(self._states)
        results: List[Optional[StateObject]] = []
        changed = 0
        now = datetime.utcnow()

        for entity_id, state, attributes in updates:
            current = states.get(entity_id)
            if state is None:
                if states.pop(entity_id, None) is not None:
                    changed += 1
                results.append(None)
                continue

            attributes = dict(attributes or {})
            if current and current.state == str(state) and current.attributes == attributes:
                results.append(current)
                continue

            new_obj = StateObject(
                entity_id=entity_id,
                state=str(state),
                attributes=attributes,
                last_changed=(
                    current.last_changed
                    if current and current.state == str(state)
                    else now
                ),
                last_updated=now,
            )
            states[entity_id] = new_obj
            results.append(new_obj)
            changed += 1

        if changed:
            self._states = states
            self._snapshot = None
        logger.debug("Applied %d state updates (%d changed)", len(updates), changed)
        return results

    def set_locale(self, locale: LocaleContext) -> None:
        """Replace the localization context. Equal contexts keep the old object."""
        if locale != self._locale:
            self._locale = locale
            self._snapshot = None

    def set_user(self, user: Optional[UserInfo]) -> None:
        self._user = user
        self._snapshot = None

    def set_screen(self, media_queries: Iterable[str]) -> None:
        """Record the media queries the current screen matches."""
        self._screen = frozenset(media_queries)
        self._snapshot = None

    def set_clock(self, now: Optional[datetime]) -> None:
        """Pin the clock seen by time conditions (``None`` follows wall time)."""
        self._clock = now
        self._snapshot = None

    def snapshot(self) -> HassContext:
        """Get the current immutable snapshot."""
        if self._snapshot is None:
            self._snapshot = HassContext(
                states=self._states,
                locale=self._locale,
                user=self._user,
                screen_matches=self._screen,
                now=self._clock,
            )
        return self._snapshot
