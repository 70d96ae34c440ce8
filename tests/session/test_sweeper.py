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
"""Tests for SessionSweeper: background expiry sweeps."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

import pytest

from flysession.kernel.exceptions import ConfigurationException, SessionStorageException
from flysession.kernel.lifecycle import Lifecycle
from flysession.session.sweeper import SessionSweeper


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


class FlakyStore:
    """Store stub whose first sweep fails with a storage error."""

    def __init__(self) -> None:
        self.calls: list[int | None] = []

    async def sweep_expired(self, limit: int | None = None) -> int:
        self.calls.append(limit)
        if len(self.calls) == 1:
            raise SessionStorageException("backend down")
        return 0


class TestSessionSweeper:
    def test_implements_lifecycle(self, store):
        assert isinstance(SessionSweeper(store, timedelta(seconds=1)), Lifecycle)

    def test_rejects_non_positive_interval(self, store):
        with pytest.raises(ConfigurationException):
            SessionSweeper(store, timedelta(0))

    @pytest.mark.asyncio
    async def test_run_once_uses_batch_size(self, store, clock, request_factory):
        for _ in range(3):
            await store.load_session(request_factory())
        clock.at(5)

        sweeper = SessionSweeper(store, timedelta(seconds=1), batch_size=2)

        assert await sweeper.run_once() == 2
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_background_loop_sweeps_expired_sessions(self, store, clock, events, request_factory):
        await store.load_session(request_factory())
        clock.at(5)

        sweeper = SessionSweeper(store, timedelta(milliseconds=10))
        await sweeper.start()
        try:
            await _wait_for(lambda: len(store) == 0)
        finally:
            await sweeper.stop()

        assert [kind for kind, _ in events] == ["timeout", "destroy"]
        assert sweeper.running is False

    @pytest.mark.asyncio
    async def test_storage_failure_does_not_stop_loop(self, caplog):
        store = FlakyStore()
        sweeper = SessionSweeper(store, timedelta(milliseconds=10), batch_size=7)

        with caplog.at_level(logging.WARNING, logger="flysession.session.sweeper"):
            await sweeper.start()
            try:
                await _wait_for(lambda: len(store.calls) >= 2)
            finally:
                await sweeper.stop()

        assert store.calls[:2] == [7, 7]
        assert "Session sweep failed" in caplog.text

    @pytest.mark.asyncio
    async def test_start_and_stop_are_idempotent(self, store):
        sweeper = SessionSweeper(store, timedelta(seconds=60))
        await sweeper.start()
        await sweeper.start()
        assert sweeper.running is True
        await sweeper.stop()
        await sweeper.stop()
        assert sweeper.running is False
