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
"""AbstractSessionStore: shared lifecycle logic for session backends.

Backends supply four hooks (``_lookup``, ``_create``, ``_persist``,
``_retire``); the base class turns them into the request/response contract:

- ``load_session`` resolves the transported id, falls back to a fresh session
  for unknown, malformed or expired ids, marks it accessed and attaches it to
  the request.
- ``store_session`` persists the session and writes its id to the response,
  or expires the id if the session was destroyed during the request.
- ``destroy_session`` retires the session once and fires ``on_destroy``.
- A timeout (found on lookup or by a sweep) fires ``on_timeout`` and then
  ``on_destroy``.

Callbacks run after the backend has finished mutating its index. A callback
that raises is logged and never aborts the store operation.
"""

from __future__ import annotations

import abc
import inspect
import logging
import re
import secrets
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from flysession.kernel.exceptions import ConfigurationException, MissingSessionContextException
from flysession.session.context import attach_session, find_session
from flysession.session.ports.outbound import SessionCallback, SessionIdResolver
from flysession.session.resolvers import CookieSessionIdResolver
from flysession.session.session import Session

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 16  # 128 bits

_SESSION_ID_RE = re.compile(r"[0-9a-f]{32}")

Clock = Callable[[], float]
RandomSource = Callable[[int], bytes]


class AbstractSessionStore(abc.ABC):
    """Base class for session stores.

    Args:
        max_session_idle_time: How long a session may go unused.
        max_session_lifetime: Absolute lifetime measured from creation.
        on_timeout: Called with a session destroyed because it expired.
        on_destroy: Called with every destroyed session, including timeouts.
        resolver: Session-id transport; defaults to a cookie.
        random_source: ``n -> n random bytes``; must be cryptographically strong.
        clock: Returns the current time in epoch seconds.

    Raises:
        ConfigurationException: If a duration is not positive or the random
            source cannot produce a valid id.
    """

    def __init__(
        self,
        max_session_idle_time: timedelta,
        max_session_lifetime: timedelta,
        *,
        on_timeout: SessionCallback | None = None,
        on_destroy: SessionCallback | None = None,
        resolver: SessionIdResolver | None = None,
        random_source: RandomSource = secrets.token_bytes,
        clock: Clock = time.time,
    ) -> None:
        for name, value in (
            ("max_session_idle_time", max_session_idle_time),
            ("max_session_lifetime", max_session_lifetime),
        ):
            if not isinstance(value, timedelta) or value <= timedelta(0):
                raise ConfigurationException(
                    f"{name} must be a positive timedelta, got {value!r}",
                    context={name: value},
                )

        self._max_session_idle_time = max_session_idle_time
        self._max_session_lifetime = max_session_lifetime
        self._on_timeout = on_timeout
        self._on_destroy = on_destroy
        self._resolver: SessionIdResolver = resolver or CookieSessionIdResolver()
        self._random_source = random_source
        self._clock = clock

        try:
            sample_id = self.create_session_id()
        except Exception as exc:
            raise ConfigurationException(f"Session id generation failed: {exc}") from exc
        if not self.is_valid_session_id(sample_id):
            raise ConfigurationException(
                "Random source produced a malformed session id",
                context={"session_id": sample_id},
            )

    @property
    def max_session_idle_time(self) -> timedelta:
        return self._max_session_idle_time

    @property
    def max_session_lifetime(self) -> timedelta:
        return self._max_session_lifetime

    @property
    def on_timeout(self) -> SessionCallback | None:
        return self._on_timeout

    @property
    def on_destroy(self) -> SessionCallback | None:
        return self._on_destroy

    @property
    def resolver(self) -> SessionIdResolver:
        return self._resolver

    def now(self) -> float:
        return self._clock()

    def create_session_id(self) -> str:
        """Generate a random 128-bit session id as 32 lowercase hex characters.

        Subclasses that override this should override :meth:`is_valid_session_id`
        to accept the new format.
        """
        return self._random_source(SESSION_ID_BYTES).hex()

    def is_valid_session_id(self, session_id: str) -> bool:
        return _SESSION_ID_RE.fullmatch(session_id) is not None

    # -- request/response contract -------------------------------------

    async def load_session(self, request: Any) -> Any:
        """Attach a live session to *request*, creating a new one if needed."""
        session: Session | None = None
        session_id = self._resolver.resolve_session_id(request)
        if session_id is not None:
            if self.is_valid_session_id(session_id):
                session = await self._lookup(session_id)
            else:
                logger.debug("Ignoring malformed session id from client")

        if session is None:
            session = await self._create()
            logger.debug("Created session %s", session.id)

        session.mark_accessed()
        return attach_session(request, session)

    async def store_session(self, request: Any, response: Any) -> Any:
        """Persist the request's session and write its id into *response*.

        Raises:
            MissingSessionContextException: If ``load_session`` did not run first.
        """
        session = find_session(request)
        if session is None:
            raise MissingSessionContextException(
                "store_session called for a request without a loaded session"
            )

        if not session.destroyed:
            await self._persist(session)

        # _persist may find the session gone and mark it destroyed.
        if session.destroyed:
            self._resolver.expire_session_id(response)
        else:
            self._resolver.write_session_id(response, session.id)
        return response

    async def destroy_session(self, session: Session) -> None:
        """Remove *session* and fire ``on_destroy``. No-op if already destroyed."""
        if not await self._retire(session):
            return
        logger.debug("Destroyed session %s", session.id)
        await self._dispatch(self._on_destroy, "on_destroy", session)

    async def sweep_expired(self, limit: int | None = None) -> int:
        """Destroy expired sessions. Backends with native expiry may return 0."""
        return 0

    async def _expire(self, session: Session) -> bool:
        """Retire a timed-out session, firing ``on_timeout`` then ``on_destroy``."""
        if not await self._retire(session):
            return False
        logger.debug("Session %s timed out", session.id)
        await self._dispatch(self._on_timeout, "on_timeout", session)
        await self._dispatch(self._on_destroy, "on_destroy", session)
        return True

    @staticmethod
    async def _dispatch(callback: SessionCallback | None, event: str, session: Session) -> None:
        if callback is None:
            return
        try:
            result = callback(session)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Session %s callback failed for session %s", event, session.id)

    # -- backend hooks ----------------------------------------------------

    @abc.abstractmethod
    async def _lookup(self, session_id: str) -> Session | None:
        """Return the live session for *session_id*.

        Return ``None`` for unknown ids. An expired session must be passed to
        :meth:`_expire` and ``None`` returned.
        """

    @abc.abstractmethod
    async def _create(self) -> Session:
        """Create and index a new session with an id unused by this store."""

    @abc.abstractmethod
    async def _persist(self, session: Session) -> None:
        """Write the session's current state to the backing index.

        A backend that finds the session already removed marks it destroyed
        instead of writing it back.
        """

    @abc.abstractmethod
    async def _retire(self, session: Session) -> bool:
        """Remove *session* from the index and mark it destroyed.

        Return ``True`` only if this call removed it, which is what fires the
        destroy callbacks. Return ``False`` without side effects if it was
        already destroyed.
        """
