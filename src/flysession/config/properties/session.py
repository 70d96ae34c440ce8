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
"""Session subsystem configuration properties."""

from __future__ import annotations

from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, Field

from flysession.core.config import config_properties


@config_properties(prefix="flysession.session")
class SessionProperties(BaseModel):
    """Configuration for the session subsystem (flysession.session.*)."""

    store: Literal["memory", "redis"] = "memory"
    max_idle_seconds: float = Field(default=1800, gt=0)
    max_lifetime_seconds: float = Field(default=86400, gt=0)

    transport: Literal["cookie", "header"] = "cookie"
    cookie_name: str = Field(default="FLYSESSION", min_length=1)
    cookie_secure: bool = False
    header_name: str = Field(default="X-Session-Id", min_length=1)

    redis_url: str = "redis://localhost:6379/0"

    sweep_enabled: bool = True
    sweep_interval_seconds: float = Field(default=60, gt=0)
    sweep_batch_size: int = Field(default=500, ge=1)

    @property
    def max_idle_time(self) -> timedelta:
        return timedelta(seconds=self.max_idle_seconds)

    @property
    def max_lifetime(self) -> timedelta:
        return timedelta(seconds=self.max_lifetime_seconds)

    @property
    def sweep_interval(self) -> timedelta:
        return timedelta(seconds=self.sweep_interval_seconds)
