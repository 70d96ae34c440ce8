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
"""Logging contract for flysession applications.

flysession modules emit records through ``logging.getLogger(__name__)``.
A :class:`LoggingPort` decides how those records are rendered; it is applied
by :func:`~flysession.session.auto_configuration.configure_sessions` when the
config carries a ``flysession.logging`` section.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from flysession.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Sets up log output for the session subsystem."""

    def configure(self, config: Config) -> None:
        """Apply the ``flysession.logging`` section: format and levels."""
        ...

    def get_logger(self, name: str) -> Any:
        """Return a logger bound to *name*, e.g. for session callbacks."""
        ...

    def set_level(self, name: str, level: str) -> None:
        """Change the level of one logger, e.g. ``flysession.session.store``."""
        ...
