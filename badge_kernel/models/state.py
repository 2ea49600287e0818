"""State snapshot — what the live connection layer publishes to the engine."""

from datetime import datetime
from typing import Dict, FrozenSet, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class StateObject(BaseModel):
    """
    The value and attributes of one entity at a point in time.

    Published by the State Snapshot Source and never mutated afterwards.
    A new object is issued whenever the value or attributes change, so
    reference equality is the change signal.
    """

    model_config = ConfigDict(frozen=True)

    entity_id: str
    state: str
    attributes: dict = {}
    last_changed: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    @property
    def domain(self) -> str:
        return self.entity_id.split(".", 1)[0]

    def same_content(self, other: Optional["StateObject"]) -> bool:
        """Structural comparison used when identity cannot be trusted."""
        if other is None:
            return False
        return (
            self.entity_id == other.entity_id
            and self.state == other.state
            and self.attributes == other.attributes
        )


class LocaleContext(BaseModel):
    """Localization/formatting context. Replaced, never mutated, on change."""

    model_config = ConfigDict(frozen=True)

    language: str = "en"
    number_format: str = "language"
    time_format: str = "language"


class UserInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    is_admin: bool = False


class HassContext:
    """
    The platform-wide live object handed to every evaluation call.

    One instance per published snapshot: ``states`` is never modified in
    place, so holding on to an old context keeps the old view intact.
    """

    def __init__(
        self,
        states: Mapping[str, StateObject],
        locale: Optional[LocaleContext] = None,
        user: Optional[UserInfo] = None,
        screen_matches: FrozenSet[str] = frozenset(),
        now: Optional[datetime] = None,
    ):
        self.states: Dict[str, StateObject] = dict(states)
        self.locale = locale or LocaleContext()
        self.user = user
        self.screen_matches = frozenset(screen_matches)
        self._now = now

    def now(self) -> datetime:
        """Current time as seen by time-based conditions."""
        return self._now or datetime.now()

    def get(self, entity_id: str) -> Optional[StateObject]:
        return self.states.get(entity_id)
