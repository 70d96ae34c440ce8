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
"""Redis-backed session store."""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from redis.exceptions import RedisError

from flysession.kernel.exceptions import SessionStorageException
from flysession.session.session import Session
from flysession.session.store import AbstractSessionStore

logger = logging.getLogger(__name__)

_KEY_PREFIX = "flysession:session:"
_MAX_ID_ATTEMPTS = 8


class RedisSessionStore(AbstractSessionStore):
    """Session store backed by ``redis.asyncio``.

    Each session is stored as a JSON snapshot under ``flysession:session:<id>``
    with a TTL equal to the time left until its effective expiry, so Redis
    evicts idle and over-age sessions on its own. Attribute values must be
    JSON-serializable.

    Redis failures surface as :class:`SessionStorageException`.
    """

    def __init__(self, client: Any, *args: Any, **kwargs: Any) -> None:
        self._client = client
        super().__init__(*args, **kwargs)

    def _key(self, session_id: str) -> str:
        return f"{_KEY_PREFIX}{session_id}"

    def _ttl(self, session: Session) -> int:
        return max(1, math.ceil(session.expires_at - self.now()))

    def _encode(self, session: Session) -> bytes:
        try:
            return json.dumps(session.snapshot()).encode()
        except (TypeError, ValueError) as exc:
            raise SessionStorageException(
                f"Session '{session.id}' holds values that cannot be serialized: {exc}",
                context={"session_id": session.id},
            ) from exc

    async def _lookup(self, session_id: str) -> Session | None:
        try:
            raw = await self._client.get(self._key(session_id))
        except RedisError as exc:
            raise SessionStorageException(
                f"Failed to load session: {exc}", context={"session_id": session_id}
            ) from exc
        if raw is None:
            return None

        try:
            snapshot = json.loads(raw)
            session = Session.restore(
                self,
                session_id,
                snapshot["data"],
                created=float(snapshot["created"]),
                session_expiry=float(snapshot["session_expiry"]),
                idle_expiry=float(snapshot["idle_expiry"]),
            )
        except (json.JSONDecodeError, TypeError, KeyError, ValueError):
            logger.warning("Failed to deserialize session '%s', issuing a new session", session_id)
            return None

        if session.is_expired():
            await self._expire(session)
            return None
        return session

    async def _create(self) -> Session:
        for _ in range(_MAX_ID_ATTEMPTS):
            session = Session(self)
            try:
                created = await self._client.set(
                    self._key(session.id), self._encode(session), ex=self._ttl(session), nx=True
                )
            except RedisError as exc:
                raise SessionStorageException(f"Failed to create session: {exc}") from exc
            if created:
                return session
        raise SessionStorageException(
            f"Could not allocate an unused session id after {_MAX_ID_ATTEMPTS} attempts"
        )

    async def _persist(self, session: Session) -> None:
        payload = self._encode(session)
        try:
            # XX: write only over an existing key, so a session deleted elsewhere stays deleted.
            written = await self._client.set(
                self._key(session.id), payload, ex=self._ttl(session), xx=True
            )
        except RedisError as exc:
            raise SessionStorageException(
                f"Failed to store session: {exc}", context={"session_id": session.id}
            ) from exc
        if not written:
            logger.debug("Session %s was removed by another request, not persisting", session.id)
            session.mark_destroyed()

    async def _retire(self, session: Session) -> bool:
        if session.destroyed:
            return False
        try:
            deleted = await self._client.delete(self._key(session.id))
        except RedisError as exc:
            raise SessionStorageException(
                f"Failed to delete session: {exc}", context={"session_id": session.id}
            ) from exc
        session.mark_destroyed()
        # Several requests may hold copies of one session; only the one whose
        # DEL removed the key reports the destruction.
        return deleted > 0

    async def start(self) -> None:
        """Verify connectivity so a misconfigured backend fails at startup."""
        try:
            await self._client.ping()
        except RedisError as exc:
            raise SessionStorageException(f"Redis session backend unreachable: {exc}") from exc

    async def stop(self) -> None:
        """Close the Redis client."""
        await self._client.aclose()
