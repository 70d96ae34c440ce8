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
"""SessionFilter: binds a session to each request and persists it afterwards."""

from __future__ import annotations

from typing import Any

from flysession.session.ports.outbound import SessionStore
from flysession.web.filters import OncePerRequestFilter
from flysession.web.ports.filter import CallNext


class SessionFilter(OncePerRequestFilter):
    """Runs ``load_session`` before the handler and ``store_session`` after it.

    Must sit ahead of any filter or handler that calls
    :func:`~flysession.session.context.get_session`. If the downstream handler
    raises, nothing is persisted and the exception propagates unchanged.
    """

    def __init__(self, store: SessionStore) -> None:
        self._store = store

    @property
    def store(self) -> SessionStore:
        return self._store

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        request = await self._store.load_session(request)
        response = await call_next(request)
        return await self._store.store_session(request, response)
