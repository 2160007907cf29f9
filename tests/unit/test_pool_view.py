"""Unit tests for per-request credential pool views."""

import random

import pytest

from src.core.credentials import PoolView
from src.core.exceptions import PoolExhaustedError


@pytest.mark.unit
class TestSelection:
    def test_pick_random_records_current_index(self):
        view = PoolView(["a", "b", "c"])
        picked = view.pick_random(random.Random(7))
        assert view.credentials[view.current_index] == picked

    def test_pick_next_cycles_through_every_credential(self):
        view = PoolView(["a", "b", "c", "d"])
        for start in range(4):
            view.current_index = start
            visited = [view.pick_next() for _ in range(len(view))]
            assert sorted(visited) == ["a", "b", "c", "d"]
            assert view.current_index == start

    def test_pick_next_wraps_around(self):
        view = PoolView(["a", "b"])
        view.current_index = 1
        assert view.pick_next() == "a"

    def test_empty_view_raises_pool_exhausted(self):
        view = PoolView([])
        with pytest.raises(PoolExhaustedError) as exc_info:
            view.pick_random()
        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "No credentials available"
        with pytest.raises(PoolExhaustedError):
            view.pick_next()


@pytest.mark.unit
class TestStoreDerivedViews:
    def test_from_store_uses_selectable_credentials(self, credential_store, fake_clock):
        credential_store.quarantine("cred-alpha", fake_clock.now + 60)
        view = PoolView.from_store(credential_store)
        assert view.credentials == ("cred-bravo", "cred-charlie")
        assert not view.is_override

    def test_view_is_fixed_after_store_changes(self, credential_store):
        view = PoolView.from_store(credential_store)
        credential_store.evict("cred-alpha")
        assert "cred-alpha" in view.credentials

    def test_mutations_forward_to_store(self, credential_store, fake_clock):
        view = PoolView.from_store(credential_store)
        view.evict("cred-alpha")
        view.quarantine("cred-bravo", fake_clock.now + 60)

        assert credential_store.build_selectable() == ["cred-charlie"]


@pytest.mark.unit
class TestOverrideViews:
    def test_single_entry_from_comma_list(self):
        view = PoolView.from_override("x, y ,z", random.Random(1))
        assert len(view) == 1
        assert view.credentials[0] in {"x", "y", "z"}
        assert view.is_override

    def test_blank_override_gives_empty_view(self):
        assert len(PoolView.from_override(" , ")) == 0

    def test_override_mutations_are_noops(self, credential_store, fake_clock):
        view = PoolView.from_override("cred-alpha")
        view.evict("cred-alpha")
        view.quarantine("cred-alpha", fake_clock.now + 60)
        assert "cred-alpha" in credential_store.build_selectable()
