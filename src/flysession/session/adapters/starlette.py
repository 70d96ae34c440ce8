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
"""Starlette wiring for session support."""

from __future__ import annotations

from starlette.middleware import Middleware

from flysession.session.filter import SessionFilter
from flysession.session.ports.outbound import SessionStore
from flysession.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from flysession.web.ports.filter import WebFilter


def session_middleware(store: SessionStore, *filters: WebFilter) -> Middleware:
    """Build a Starlette ``Middleware`` entry that loads and stores sessions.

    Extra *filters* run after the session filter and can already read the
    session::

        app = Starlette(routes=routes, middleware=[session_middleware(store)])
    """
    return Middleware(WebFilterChainMiddleware, filters=[SessionFilter(store), *filters])
