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
"""Session: per-client key-value state with identity and two expiry clocks."""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flysession.session.store import AbstractSessionStore


class Session(MutableMapping[str, Any]):
    """Mutable mapping of session attributes bound to one owning store.

    The id, creation time and absolute expiry are fixed at construction.
    The idle expiry moves forward only through :meth:`mark_accessed`, which
    the store calls once per request; reading or writing attributes never
    touches the expiry clocks.

    Attributes:
        id: Opaque token generated by the owning store.
        is_new: ``True`` if the session was created during the current request.
    """

    def __init__(self, store: AbstractSessionStore) -> None:
        self._store = store
        self._id = store.create_session_id()
        self._data: dict[str, Any] = {}
        self._is_new = True
        self._destroyed = False

        now = store.now()
        self._created = now
        self._session_expiry = now + store.max_session_lifetime.total_seconds()
        self._idle_expiry = now + store.max_session_idle_time.total_seconds()

    @classmethod
    def restore(
        cls,
        store: AbstractSessionStore,
        session_id: str,
        data: dict[str, Any],
        *,
        created: float,
        session_expiry: float,
        idle_expiry: float,
    ) -> Session:
        """Rebuild a session previously persisted by *store*."""
        session = cls.__new__(cls)
        session._store = store
        session._id = session_id
        session._data = dict(data)
        session._is_new = False
        session._destroyed = False
        session._created = created
        session._session_expiry = session_expiry
        session._idle_expiry = idle_expiry
        return session

    def snapshot(self) -> dict[str, Any]:
        """Return the persisted form of this session (see :meth:`restore`)."""
        return {
            "id": self._id,
            "data": dict(self._data),
            "created": self._created,
            "session_expiry": self._session_expiry,
            "idle_expiry": self._idle_expiry,
        }

    @property
    def id(self) -> str:
        return self._id

    @property
    def store(self) -> AbstractSessionStore:
        return self._store

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def created(self) -> float:
        return self._created

    @property
    def session_expiry(self) -> float:
        return self._session_expiry

    @property
    def idle_expiry(self) -> float:
        return self._idle_expiry

    @property
    def expires_at(self) -> float:
        """The effective expiry: whichever of the two clocks runs out first."""
        return min(self._session_expiry, self._idle_expiry)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def mark_accessed(self) -> None:
        """Push the idle expiry to now + the store's max idle time."""
        self._idle_expiry = self._store.now() + self._store.max_session_idle_time.total_seconds()

    def is_expired(self) -> bool:
        return self._store.now() > self.expires_at

    def mark_destroyed(self) -> None:
        """Flag the session as destroyed. Called by the owning store only."""
        self._destroyed = True

    # -- attribute access ------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        """Remove *key* if present."""
        self._data.pop(key, None)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        self._data.clear()

    # Identity semantics: two sessions holding equal data are still distinct.
    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Session(id={self._id!r}, expires_at={self.expires_at:.3f}, keys={sorted(self._data)!r})"
