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
"""In-memory session store: the reference SessionStore backend."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from flysession.kernel.exceptions import SessionStorageException
from flysession.session.session import Session
from flysession.session.store import AbstractSessionStore

logger = logging.getLogger(__name__)

_MAX_ID_ATTEMPTS = 8
_SWEEP_LOCK_BATCH = 500


class InMemorySessionStore(AbstractSessionStore):
    """Session store keeping an ``id -> Session`` index guarded by an asyncio.Lock.

    Suitable for development, testing, and single-process applications.
    Expired entries are removed lazily on lookup and by :meth:`sweep_expired`.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()
        super().__init__(*args, **kwargs)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    async def _lookup(self, session_id: str) -> Session | None:
        async with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            logger.debug("Unknown session id presented, issuing a new session")
            return None
        if session.is_expired():
            await self._expire(session)
            return None
        return session

    async def _create(self) -> Session:
        async with self._lock:
            for _ in range(_MAX_ID_ATTEMPTS):
                session = Session(self)
                if session.id not in self._sessions:
                    self._sessions[session.id] = session
                    return session
        raise SessionStorageException(
            f"Could not allocate an unused session id after {_MAX_ID_ATTEMPTS} attempts",
            context={"index_size": len(self._sessions)},
        )

    async def _persist(self, session: Session) -> None:
        async with self._lock:
            if not session.destroyed:
                self._sessions[session.id] = session

    async def _retire(self, session: Session) -> bool:
        async with self._lock:
            if session.destroyed:
                return False
            if self._sessions.get(session.id) is session:
                del self._sessions[session.id]
            session.mark_destroyed()
            return True

    async def sweep_expired(self, limit: int | None = None) -> int:
        """Destroy expired sessions, holding the lock for one batch at a time.

        Args:
            limit: Maximum number of sessions to destroy in this sweep.
                ``None`` sweeps the whole index.
        """
        async with self._lock:
            candidates = list(self._sessions)

        removed = 0
        for start in range(0, len(candidates), _SWEEP_LOCK_BATCH):
            if limit is not None and removed >= limit:
                break
            async with self._lock:
                expired = [
                    session
                    for session_id in candidates[start : start + _SWEEP_LOCK_BATCH]
                    if (session := self._sessions.get(session_id)) is not None and session.is_expired()
                ]
            expired.sort(key=lambda s: s.expires_at)
            for session in expired[: None if limit is None else limit - removed]:
                if await self._expire(session):
                    removed += 1
            # Let request handlers run between batches.
            await asyncio.sleep(0)

        if removed:
            logger.info("Session sweep removed %d expired sessions", removed)
        return removed
