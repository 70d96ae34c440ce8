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
"""Session-id transports: where the id travels between client and server."""

from __future__ import annotations

from typing import Any, Literal

_DEFAULT_COOKIE_NAME = "FLYSESSION"
_DEFAULT_HEADER_NAME = "X-Session-Id"


class CookieSessionIdResolver:
    """Carries the session id in an HttpOnly cookie."""

    def __init__(
        self,
        cookie_name: str = _DEFAULT_COOKIE_NAME,
        *,
        max_age: int | None = None,
        secure: bool = False,
        samesite: Literal["lax", "strict", "none"] = "lax",
        path: str = "/",
    ) -> None:
        self._cookie_name = cookie_name
        self._max_age = max_age
        self._secure = secure
        self._samesite = samesite
        self._path = path

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    def resolve_session_id(self, request: Any) -> str | None:
        cookies = getattr(request, "cookies", {})
        return cookies.get(self._cookie_name) or None

    def write_session_id(self, response: Any, session_id: str) -> None:
        response.set_cookie(
            key=self._cookie_name,
            value=session_id,
            max_age=self._max_age,
            path=self._path,
            secure=self._secure,
            httponly=True,
            samesite=self._samesite,
        )

    def expire_session_id(self, response: Any) -> None:
        response.delete_cookie(
            key=self._cookie_name,
            path=self._path,
            secure=self._secure,
            httponly=True,
            samesite=self._samesite,
        )


class HeaderSessionIdResolver:
    """Carries the session id in a request/response header, for API clients."""

    def __init__(self, header_name: str = _DEFAULT_HEADER_NAME) -> None:
        self._header_name = header_name

    @property
    def header_name(self) -> str:
        return self._header_name

    def resolve_session_id(self, request: Any) -> str | None:
        headers = getattr(request, "headers", {})
        return headers.get(self._header_name) or None

    def write_session_id(self, response: Any, session_id: str) -> None:
        response.headers[self._header_name] = session_id

    def expire_session_id(self, response: Any) -> None:
        # An empty value tells the client to drop its stored id.
        response.headers[self._header_name] = ""
