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
"""Lifecycle protocol for components that own background work or connections."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Start/stop contract for long-lived session infrastructure.

    The sweeper and network-backed stores implement this protocol. The host
    application calls ``start()`` once at startup and ``stop()`` at shutdown.
    """

    async def start(self) -> None:
        """Acquire resources or launch background tasks.

        A failure here should be raised so the application fails fast.
        """
        ...

    async def stop(self) -> None:
        """Release resources. Best-effort: must be safe to call twice."""
        ...
