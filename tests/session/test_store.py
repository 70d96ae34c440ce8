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
"""Tests for AbstractSessionStore configuration and session id generation."""

from __future__ import annotations

import re
from datetime import timedelta

import pytest

from flysession.kernel.exceptions import ConfigurationException
from flysession.session.adapters.memory import InMemorySessionStore
from flysession.session.ports.outbound import SessionStore
from flysession.session.resolvers import CookieSessionIdResolver


class TestStoreConfiguration:
    def test_satisfies_session_store_protocol(self):
        store = InMemorySessionStore(timedelta(minutes=5), timedelta(hours=1))
        assert isinstance(store, SessionStore)

    def test_exposes_configuration(self):
        on_timeout = lambda s: None  # noqa: E731
        store = InMemorySessionStore(timedelta(minutes=5), timedelta(hours=1), on_timeout=on_timeout)
        assert store.max_session_idle_time == timedelta(minutes=5)
        assert store.max_session_lifetime == timedelta(hours=1)
        assert store.on_timeout is on_timeout
        assert store.on_destroy is None
        assert isinstance(store.resolver, CookieSessionIdResolver)

    @pytest.mark.parametrize(
        "idle, lifetime",
        [
            (timedelta(0), timedelta(hours=1)),
            (timedelta(minutes=5), timedelta(seconds=-1)),
            (300, timedelta(hours=1)),
        ],
    )
    def test_rejects_invalid_durations(self, idle, lifetime):
        with pytest.raises(ConfigurationException):
            InMemorySessionStore(idle, lifetime)

    def test_failing_random_source_is_fatal(self):
        def broken(n: int) -> bytes:
            raise OSError("no entropy")

        with pytest.raises(ConfigurationException, match="generation failed"):
            InMemorySessionStore(timedelta(minutes=5), timedelta(hours=1), random_source=broken)

    def test_short_random_source_is_fatal(self):
        with pytest.raises(ConfigurationException, match="malformed"):
            InMemorySessionStore(
                timedelta(minutes=5), timedelta(hours=1), random_source=lambda n: b"\x01" * (n - 1)
            )


class TestCreateSessionId:
    def test_format(self):
        store = InMemorySessionStore(timedelta(minutes=5), timedelta(hours=1))
        session_id = store.create_session_id()
        assert re.fullmatch(r"[0-9a-f]{32}", session_id)

    def test_ten_thousand_ids_are_unique(self):
        store = InMemorySessionStore(timedelta(minutes=5), timedelta(hours=1))
        ids = {store.create_session_id() for _ in range(10_000)}
        assert len(ids) == 10_000

    def test_uses_injected_random_source(self, counting_random):
        store = InMemorySessionStore(
            timedelta(minutes=5), timedelta(hours=1), random_source=counting_random
        )
        # The constructor draws one id from the source.
        assert store.create_session_id() == (2).to_bytes(16, "big").hex()

    @pytest.mark.parametrize(
        "candidate, valid",
        [
            ("0123456789abcdef0123456789abcdef", True),
            ("0123456789ABCDEF0123456789ABCDEF", False),
            ("0123456789abcdef", False),
            ("../../etc/passwd", False),
            ("", False),
        ],
    )
    def test_is_valid_session_id(self, candidate, valid):
        store = InMemorySessionStore(timedelta(minutes=5), timedelta(hours=1))
        assert store.is_valid_session_id(candidate) is valid
