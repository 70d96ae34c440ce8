"""Shared fixtures for session tests: a controllable clock and request builders."""

from __future__ import annotations

from datetime import timedelta

import pytest
from starlette.requests import Request

from flysession.session.adapters.memory import InMemorySessionStore


class FakeClock:
    """Callable clock returning a settable epoch time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.start = start
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def at(self, offset: float) -> None:
        """Move to *offset* seconds after the start time."""
        self.now = self.start + offset


class CountingRandom:
    """Deterministic random source: each call returns the next counter value."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, n: int) -> bytes:
        self.calls += 1
        return self.calls.to_bytes(n, "big")


def make_request(
    session_id: str | None = None,
    *,
    cookie_name: str = "FLYSESSION",
    headers: dict[str, str] | None = None,
) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if session_id is not None:
        raw_headers.append((b"cookie", f"{cookie_name}={session_id}".encode()))
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "query_string": b"",
            "headers": raw_headers,
        }
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def events() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def store(clock: FakeClock, events: list[tuple[str, str]]) -> InMemorySessionStore:
    return InMemorySessionStore(
        timedelta(seconds=1),
        timedelta(hours=1),
        on_timeout=lambda s: events.append(("timeout", s.id)),
        on_destroy=lambda s: events.append(("destroy", s.id)),
        clock=clock,
    )


@pytest.fixture
def counting_random() -> CountingRandom:
    return CountingRandom()


@pytest.fixture
def request_factory():
    """Build bare Starlette requests, optionally carrying a session cookie."""
    return make_request
