"""Tests for the copy-on-write State Store."""

from datetime import datetime

import pytest

from badge_kernel.models.state import LocaleContext, UserInfo
from badge_kernel.state.store import StateStore, valid_entity_id


class TestEntityIds:
    @pytest.mark.parametrize("entity_id", ["light.kitchen", "sensor.temp_1", "sun.sun"])
    def test_valid(self, entity_id):
        assert valid_entity_id(entity_id)

    @pytest.mark.parametrize("entity_id", ["kitchen", "Light.kitchen", "light._x", "light.a__b", "", None])
    def test_invalid(self, entity_id):
        assert not valid_entity_id(entity_id)


class TestStateStore:
    def setup_method(self):
        self.store = StateStore()

    def test_new_identity_only_on_change(self):
        first = self.store.set_state("light.a", "on", {"brightness": 100})
        same = self.store.set_state("light.a", "on", {"brightness": 100})
        changed = self.store.set_state("light.a", "on", {"brightness": 50})

        assert same is first
        assert changed is not first
        assert self.store.get_state("light.a") is changed

    def test_untouched_entities_keep_identity(self):
        a = self.store.set_state("light.a", "on")
        self.store.set_state("light.b", "on")
        self.store.set_state("light.b", "off")
        assert self.store.get_state("light.a") is a

    def test_snapshots_are_isolated(self):
        self.store.set_state("light.a", "on")
        before = self.store.snapshot()
        self.store.set_state("light.a", "off")
        self.store.set_state("light.b", "on")
        after = self.store.snapshot()

        assert before.get("light.a").state == "on"
        assert before.get("light.b") is None
        assert after.get("light.a").state == "off"

    def test_snapshot_reused_until_change(self):
        self.store.set_state("light.a", "on")
        snap = self.store.snapshot()
        self.store.set_state("light.a", "on")
        assert self.store.snapshot() is snap

    def test_last_changed_tracks_state_only(self):
        first = self.store.set_state("light.a", "on", {"brightness": 1})
        second = self.store.set_state("light.a", "on", {"brightness": 2})
        assert second.last_changed == first.last_changed

    def test_remove(self):
        self.store.set_state("light.a", "on")
        assert self.store.remove_state("light.a") is True
        assert self.store.remove_state("light.a") is False
        assert self.store.snapshot().get("light.a") is None

    def test_batch(self):
        self.store.set_state("light.c", "on")
        results = self.store.apply_batch([
            ("light.a", "on", None),
            ("light.b", "off", {"x": 1}),
            ("light.c", None, None),
        ])
        assert [r.state if r else None for r in results] == ["on", "off", None]
        assert set(self.store.states) == {"light.a", "light.b"}

    def test_invalid_id_rejected_before_applying(self):
        with pytest.raises(ValueError):
            self.store.apply_batch([("light.a", "on", None), ("bogus", "on", None)])
        assert self.store.get_state("light.a") is None

    def test_locale_identity(self):
        original = self.store.snapshot().locale
        self.store.set_locale(LocaleContext())
        assert self.store.snapshot().locale is original
        self.store.set_locale(LocaleContext(language="de"))
        assert self.store.snapshot().locale.language == "de"

    def test_global_signals(self):
        now = datetime(2024, 1, 1, 12, 0)
        self.store.set_user(UserInfo(id="u1"))
        self.store.set_screen(["(min-width: 768px)"])
        self.store.set_clock(now)
        snap = self.store.snapshot()
        assert snap.user.id == "u1"
        assert "(min-width: 768px)" in snap.screen_matches
        assert snap.now() == now
