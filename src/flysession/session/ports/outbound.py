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
"""Session store and session-id transport protocols."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from flysession.session.session import Session

# Lifecycle callback invoked with the affected session. May return an awaitable.
SessionCallback = Callable[["Session"], Any]


@runtime_checkable
class SessionStore(Protocol):
    """Lifecycle manager for sessions: id generation, lookup, persistence, destruction.

    Request and response types are left as ``Any`` so vendor types stay in the
    adapter layer. Backends normally extend
    :class:`~flysession.session.store.AbstractSessionStore` instead of
    implementing this protocol from scratch.
    """

    def create_session_id(self) -> str:
        """Return a fresh 128-bit id as 32 lowercase hex characters."""
        ...

    async def load_session(self, request: Any) -> Any:
        """Attach a live session to *request*, creating one when needed."""
        ...

    async def store_session(self, request: Any, response: Any) -> Any:
        """Persist the request's session and write its id to *response*."""
        ...

    async def destroy_session(self, session: Session) -> None:
        """Remove *session* from the store. No-op if already destroyed."""
        ...

    async def sweep_expired(self, limit: int | None = None) -> int:
        """Destroy up to *limit* expired sessions; return how many were removed."""
        ...


@runtime_checkable
class SessionIdResolver(Protocol):
    """Reads and writes the session id on the client transport (cookie, header)."""

    def resolve_session_id(self, request: Any) -> str | None: ...

    def write_session_id(self, response: Any, session_id: str) -> None: ...

    def expire_session_id(self, response: Any) -> None: ...
