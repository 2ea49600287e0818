"""Tests for the Dirty Checker."""

from datetime import datetime

from badge_kernel.engine.dirty import DirtyChecker
from badge_kernel.models.state import HassContext, LocaleContext, UserInfo
from badge_kernel.state.store import StateStore


class TestDirtyChecker:
    def setup_method(self):
        self.store = StateStore()
        self.store.set_state("sensor.a", "1")
        self.store.set_state("sensor.b", "1")
        self.store.set_state("sensor.unwatched", "1")
        self.checker = DirtyChecker({"sensor.a", "sensor.b"})

    def test_first_check_is_dirty(self):
        assert self.checker.check(self.store.snapshot()) is True
        assert self.checker.has_baseline

    def test_unchanged_is_clean(self):
        self.checker.check(self.store.snapshot())
        assert self.checker.check(self.store.snapshot()) is False

    def test_same_content_publish_is_clean(self):
        self.checker.check(self.store.snapshot())
        self.store.set_state("sensor.a", "1")
        assert self.checker.check(self.store.snapshot()) is False

    def test_watched_change_is_dirty(self):
        self.checker.check(self.store.snapshot())
        self.store.set_state("sensor.b", "2")
        assert self.checker.check(self.store.snapshot()) is True

    def test_unwatched_change_is_clean(self):
        self.checker.check(self.store.snapshot())
        self.store.set_state("sensor.unwatched", "2")
        self.store.set_state("sensor.new", "1")
        assert self.checker.check(self.store.snapshot()) is False

    def test_disappearing_and_appearing_entities(self):
        checker = DirtyChecker({"sensor.a", "sensor.later"})
        checker.check(self.store.snapshot())

        self.store.set_state("sensor.later", "on")
        assert checker.check(self.store.snapshot()) is True

        self.store.remove_state("sensor.a")
        assert checker.check(self.store.snapshot()) is True
        assert checker.check(self.store.snapshot()) is False

    def test_references_updated_regardless_of_outcome(self):
        self.checker.check(self.store.snapshot())
        self.store.set_state("sensor.a", "2")
        assert self.checker.check(self.store.snapshot()) is True
        # Compared against the latest observation, not the first one
        assert self.checker.check(self.store.snapshot()) is False

    def test_locale_change_is_dirty(self):
        self.checker.check(self.store.snapshot())
        self.store.set_locale(LocaleContext(language="fr"))
        assert self.checker.check(self.store.snapshot()) is True
        assert self.checker.check(self.store.snapshot()) is False

    def test_context_without_locale_change_is_clean(self):
        """User, screen and clock changes wait for the next watched change."""
        self.checker.check(self.store.snapshot())
        self.store.set_user(UserInfo(id="u2"))
        self.store.set_screen(["(min-width: 768px)"])
        self.store.set_clock(datetime(2026, 10, 17, 12, 0))
        assert self.checker.check(self.store.snapshot()) is False

        self.store.set_state("sensor.a", "2")
        assert self.checker.check(self.store.snapshot()) is True

    def test_reset_forces_dirty(self):
        self.checker.check(self.store.snapshot())
        self.checker.reset({"sensor.a"})
        assert self.checker.watch_set == {"sensor.a"}
        assert self.checker.check(self.store.snapshot()) is True

    def test_structural_fallback(self):
        """Without identity guarantees an equal-content copy is not a change."""
        checker = DirtyChecker({"sensor.a"}, identity_checks=False)
        hass = self.store.snapshot()
        checker.check(hass)

        copied = HassContext(
            states={"sensor.a": hass.get("sensor.a").model_copy()},
            locale=hass.locale,
        )
        assert checker.check(copied) is False

        self.store.set_state("sensor.a", "5")
        assert checker.check(self.store.snapshot()) is True
