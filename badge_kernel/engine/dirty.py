"""
Dirty Checker — decides whether a badge needs recomputing.

Precondition: the snapshot source issues a new StateObject exactly when
an entity's content changes (copy-on-write). Under that guarantee a
reference comparison per watched entity is authoritative and the cost
of a check is O(watch set), independent of how many entities the
platform holds. Hosts that cannot guarantee it run with
``identity_checks=False`` and pay for a structural comparison instead.

Only watched entities and the locale object are compared. Changes to the
user, the matched screen queries or the clock do not make a badge dirty
on their own; conditions on them are re-evaluated at the next cycle that
is dirty for another reason.
"""

from typing import Dict, FrozenSet, Iterable, Optional

from badge_kernel.models.state import HassContext, LocaleContext, StateObject


class DirtyChecker:
    """Holds the references observed at the previous check."""

    def __init__(self, watch_set: Iterable[str] = (), identity_checks: bool = True):
        self.identity_checks = identity_checks
        self._watch_set: FrozenSet[str] = frozenset(watch_set)
        self._previous: Optional[Dict[str, Optional[StateObject]]] = None
        self._locale: Optional[LocaleContext] = None

    @property
    def watch_set(self) -> FrozenSet[str]:
        return self._watch_set

    @property
    def has_baseline(self) -> bool:
        return self._previous is not None

    def reset(self, watch_set: Optional[Iterable[str]] = None) -> None:
        """Forget observed references so the next check reports a change."""
        if watch_set is not None:
            self._watch_set = frozenset(watch_set)
        self._previous = None
        self._locale = None

    def _same(self, old: Optional[StateObject], new: Optional[StateObject]) -> bool:
        if self.identity_checks or old is None or new is None:
            return old is new
        return new.same_content(old)

    def _same_locale(self, old: Optional[LocaleContext], new: LocaleContext) -> bool:
        if old is None:
            return False
        return old is new if self.identity_checks else old == new

    def check(self, hass: HassContext) -> bool:
        """
        Compare the watched references against the snapshot.

        The stored references are replaced by the ones just observed,
        whatever the outcome.
        """
        current = {entity_id: hass.get(entity_id) for entity_id in self._watch_set}
        previous, locale = self._previous, self._locale
        self._previous = current
        self._locale = hass.locale

        if previous is None or not self._same_locale(locale, hass.locale):
            return True

        for entity_id, state_obj in current.items():
            if not self._same(previous.get(entity_id), state_obj):
                return True
        return False
