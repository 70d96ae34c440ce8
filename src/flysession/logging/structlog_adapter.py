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
"""StructlogAdapter: LoggingPort implementation backed by structlog.

flysession modules log through ``logging.getLogger(__name__)``; once this
adapter is configured those records are rendered by structlog as console
or JSON output.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from flysession.core.config import Config

_DEFAULT_LEVEL = "INFO"


class StructlogAdapter:
    """Logging adapter driven by the ``flysession.logging`` config section.

    Keys:
        flysession.logging.level.root: root level (default ``INFO``)
        flysession.logging.level.<module>: per-module level overrides
        flysession.logging.format: ``console`` (default) or ``json``
    """

    def __init__(self) -> None:
        self._root_level: str = _DEFAULT_LEVEL
        self._format: str = "console"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        levels = dict(config.get_section("flysession.logging.level"))
        self._root_level = str(levels.pop("root", _DEFAULT_LEVEL)).upper()
        self._module_levels = {name: str(level).upper() for name, level in levels.items()}
        self._format = str(config.get("flysession.logging.format", "console")).lower()

        self._setup_structlog()
        for module, level in self._module_levels.items():
            self.set_level(module, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(getattr(logging, level.upper(), logging.INFO))

    def _setup_structlog(self) -> None:
        shared: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]
        formatter_processors: list[structlog.types.Processor] = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        ]
        if self._format == "json":
            formatter_processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        else:
            formatter_processors.append(structlog.dev.ConsoleRenderer())

        structlog.configure(
            processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        # Route plain stdlib records (logging.getLogger) through the same renderer.
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared,
                processors=formatter_processors,
            )
        )
        root = logging.getLogger()
        root.handlers[:] = [handler]
        root.setLevel(getattr(logging, self._root_level, logging.INFO))
