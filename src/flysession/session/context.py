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
"""Request-context accessors for the current session.

The session filter attaches the session to ``request.state.session``; handlers
read it back with :func:`get_session`::

    session = get_session(request)
    session["cart"] = cart_id
"""

from __future__ import annotations

from typing import Any

from flysession.kernel.exceptions import MissingSessionContextException
from flysession.session.session import Session

SESSION_STATE_ATTR = "session"


def attach_session(request: Any, session: Session) -> Any:
    """Bind *session* to *request* and return the request."""
    setattr(request.state, SESSION_STATE_ATTR, session)
    return request


def find_session(request: Any) -> Session | None:
    """Return the attached session, or ``None`` if no session was loaded."""
    state = getattr(request, "state", None)
    session = getattr(state, SESSION_STATE_ATTR, None)
    return session if isinstance(session, Session) else None


def get_session(request: Any) -> Session:
    """Return the attached session.

    Raises:
        MissingSessionContextException: If ``load_session`` never ran for this request.
    """
    session = find_session(request)
    if session is None:
        raise MissingSessionContextException(context={"path": _request_path(request)})
    return session


def _request_path(request: Any) -> str | None:
    url = getattr(request, "url", None)
    return getattr(url, "path", None)
