# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for Session: key-value access and the two expiry clocks."""

from __future__ import annotations

import re

from flysession.session.session import Session


class TestSessionConstruction:
    def test_new_session_is_not_expired(self, store, clock):
        session = Session(store)
        assert session.is_new is True
        assert session.destroyed is False
        assert session.is_expired() is False

    def test_id_is_32_lowercase_hex(self, store):
        session = Session(store)
        assert re.fullmatch(r"[0-9a-f]{32}", session.id)

    def test_expiry_clocks_derive_from_store_durations(self, store, clock):
        session = Session(store)
        assert session.created == clock.start
        assert session.session_expiry == clock.start + 3600
        assert session.idle_expiry == clock.start + 1
        assert session.expires_at == clock.start + 1


class TestSessionAttributes:
    def test_set_then_get(self, store):
        session = Session(store)
        session.set("x", "y")
        assert session.get("x") == "y"
        assert session["x"] == "y"

    def test_get_missing_returns_none(self, store):
        session = Session(store)
        assert session.get("missing") is None

    def test_set_overwrites(self, store):
        session = Session(store)
        session["x"] = 1
        session.set("x", 2)
        assert session["x"] == 2
        assert len(session) == 1

    def test_remove(self, store):
        session = Session(store)
        session.set("x", "y")
        session.remove("x")
        assert session.get("x") is None

    def test_remove_missing_is_noop(self, store):
        session = Session(store)
        session.remove("never-set")
        assert len(session) == 0

    def test_clear(self, store):
        session = Session(store)
        session.set("a", 1)
        session.set("b", 2)
        session.clear()
        assert session.get("a") is None
        assert list(session.keys()) == []

    def test_keys(self, store):
        session = Session(store)
        session.set("a", 1)
        session.set("b", 2)
        assert set(session.keys()) == {"a", "b"}

    def test_set_does_not_touch_idle_expiry(self, store, clock):
        session = Session(store)
        before = session.idle_expiry
        clock.advance(0.5)
        session.set("x", "y")
        assert session.idle_expiry == before

    def test_sessions_with_equal_data_are_distinct(self, store):
        a, b = Session(store), Session(store)
        assert a != b
        assert len({a, b}) == 2

    def test_repr_lists_keys_not_values(self, store):
        session = Session(store)
        session.set("token", "s3cret")
        text = repr(session)
        assert "token" in text
        assert "s3cret" not in text


class TestSessionExpiry:
    def test_mark_accessed_extends_idle_only(self, store, clock):
        session = Session(store)
        lifetime = session.session_expiry
        clock.at(0.5)
        session.mark_accessed()
        assert session.idle_expiry == clock.start + 1.5
        assert session.session_expiry == lifetime

    def test_idle_timeout_scenario(self, store, clock):
        session = Session(store)
        session.set("x", "y")

        clock.at(0.5)
        session.mark_accessed()

        clock.at(1.2)
        assert session.is_expired() is False

        clock.at(1.6)
        assert session.is_expired() is True

    def test_expiry_boundary_is_exclusive(self, store, clock):
        session = Session(store)
        clock.at(1.0)
        assert session.is_expired() is False
        clock.at(1.0001)
        assert session.is_expired() is True

    def test_absolute_lifetime_wins_over_activity(self, store, clock):
        session = Session(store)
        # Touch the session every half second for just over an hour.
        for step in range(1, 7202):
            clock.at(step * 0.5)
            session.mark_accessed()
        assert clock.now > session.session_expiry
        assert session.idle_expiry > clock.now
        assert session.is_expired() is True


class TestSessionSnapshot:
    def test_restore_reproduces_state(self, store, clock):
        session = Session(store)
        session.set("cart", [1, 2])
        snapshot = session.snapshot()

        restored = Session.restore(
            store,
            snapshot["id"],
            snapshot["data"],
            created=snapshot["created"],
            session_expiry=snapshot["session_expiry"],
            idle_expiry=snapshot["idle_expiry"],
        )
        assert restored.id == session.id
        assert restored["cart"] == [1, 2]
        assert restored.expires_at == session.expires_at
        assert restored.is_new is False

    def test_snapshot_data_is_a_copy(self, store):
        session = Session(store)
        session.set("a", 1)
        snapshot = session.snapshot()
        snapshot["data"]["a"] = 99
        assert session["a"] == 1
