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
"""SessionSweeper: background loop that destroys expired sessions."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Any

from flysession.kernel.exceptions import ConfigurationException, SessionStorageException
from flysession.session.ports.outbound import SessionStore

logger = logging.getLogger(__name__)


class SessionSweeper:
    """Runs ``store.sweep_expired()`` on a fixed delay until stopped.

    Each pass removes at most *batch_size* sessions so a single sweep never
    monopolises the store. Storage failures are logged and the loop carries on
    with the next pass.

    Usage::

        sweeper = SessionSweeper(store, interval=timedelta(minutes=1))
        await sweeper.start()
        # ... application runs ...
        await sweeper.stop()
    """

    def __init__(self, store: SessionStore, interval: timedelta, batch_size: int = 500) -> None:
        if interval <= timedelta(0):
            raise ConfigurationException("Sweep interval must be positive", context={"interval": interval})
        self._store = store
        self._interval = interval
        self._batch_size = batch_size
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run_loop())
        self._task.add_done_callback(self._loop_done_callback)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def run_once(self) -> int:
        """Run a single sweep pass and return the number of sessions removed."""
        return await self._store.sweep_expired(self._batch_size)

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval.total_seconds())
            try:
                await self.run_once()
            except SessionStorageException as exc:
                logger.warning("Session sweep failed: %s", exc)

    @staticmethod
    def _loop_done_callback(task: asyncio.Task[Any]) -> None:
        if not task.cancelled():
            exc = task.exception()
            if exc is not None:
                logger.error("Session sweeper stopped unexpectedly: %s", exc, exc_info=exc)
