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
"""Build the session subsystem from configuration.

Reads :class:`~flysession.config.properties.session.SessionProperties` at
``flysession.session`` and assembles the store, filter and sweeper::

    support = configure_sessions(Config.from_file("flysession.yaml"), on_timeout=audit)
    app = Starlette(routes=routes, middleware=[session_middleware(support.store)])
    await support.start()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from flysession.config.properties.session import SessionProperties
from flysession.core.config import Config
from flysession.logging.port import LoggingPort
from flysession.logging.structlog_adapter import StructlogAdapter
from flysession.session.adapters.memory import InMemorySessionStore
from flysession.session.filter import SessionFilter
from flysession.session.ports.outbound import SessionCallback, SessionIdResolver
from flysession.session.resolvers import CookieSessionIdResolver, HeaderSessionIdResolver
from flysession.session.store import AbstractSessionStore
from flysession.session.sweeper import SessionSweeper

logger = logging.getLogger(__name__)


def create_resolver(properties: SessionProperties) -> SessionIdResolver:
    if properties.transport == "header":
        return HeaderSessionIdResolver(properties.header_name)
    return CookieSessionIdResolver(properties.cookie_name, secure=properties.cookie_secure)


def create_session_store(
    properties: SessionProperties,
    *,
    on_timeout: SessionCallback | None = None,
    on_destroy: SessionCallback | None = None,
    redis_client: Any = None,
    **store_kwargs: Any,
) -> AbstractSessionStore:
    """Instantiate the configured store backend.

    Extra keyword arguments (``random_source``, ``clock``) are passed through
    to the store constructor.
    """
    kwargs: dict[str, Any] = {
        "on_timeout": on_timeout,
        "on_destroy": on_destroy,
        "resolver": create_resolver(properties),
        **store_kwargs,
    }

    if properties.store == "redis":
        from flysession.session.adapters.redis import RedisSessionStore

        if redis_client is None:
            import redis.asyncio as aioredis

            redis_client = aioredis.from_url(properties.redis_url)
        logger.info("Using Redis session store")
        return RedisSessionStore(redis_client, properties.max_idle_time, properties.max_lifetime, **kwargs)

    logger.info("Using in-memory session store")
    return InMemorySessionStore(properties.max_idle_time, properties.max_lifetime, **kwargs)


@dataclass
class SessionSupport:
    """The assembled session components and their shared lifecycle."""

    properties: SessionProperties
    store: AbstractSessionStore
    filter: SessionFilter
    sweeper: SessionSweeper | None = None

    async def start(self) -> None:
        start = getattr(self.store, "start", None)
        if start is not None:
            await start()
        if self.sweeper is not None:
            await self.sweeper.start()

    async def stop(self) -> None:
        if self.sweeper is not None:
            await self.sweeper.stop()
        stop = getattr(self.store, "stop", None)
        if stop is not None:
            await stop()


def configure_sessions(
    config: Config, *, logging_adapter: LoggingPort | None = None, **store_options: Any
) -> SessionSupport:
    """Bind ``flysession.session`` properties and build store, filter and sweeper.

    If the config has a ``flysession.logging`` section it is applied first,
    through *logging_adapter* or a :class:`StructlogAdapter`.

    Raises:
        ConfigurationException: If the properties or store settings are invalid.
    """
    if config.get_section("flysession.logging"):
        (logging_adapter or StructlogAdapter()).configure(config)

    properties = config.bind(SessionProperties)
    store = create_session_store(properties, **store_options)
    # Redis expires keys natively; only the in-memory index needs sweeping.
    sweeper = None
    if properties.sweep_enabled and isinstance(store, InMemorySessionStore):
        sweeper = SessionSweeper(store, properties.sweep_interval, properties.sweep_batch_size)
    return SessionSupport(properties=properties, store=store, filter=SessionFilter(store), sweeper=sweeper)
