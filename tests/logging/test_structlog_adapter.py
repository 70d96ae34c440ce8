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
"""Tests for StructlogAdapter: the LoggingPort implementation."""

import logging

from flysession.core.config import Config
from flysession.logging.port import LoggingPort
from flysession.logging.structlog_adapter import StructlogAdapter


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"flysession": {"logging": {"level": {"root": "debug"}}}}))
        assert adapter._root_level == "DEBUG"
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_reads_format(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"flysession": {"logging": {"format": "JSON"}}}))
        assert adapter._format == "json"

    def test_configure_applies_module_levels(self):
        adapter = StructlogAdapter()
        config = Config(
            {"flysession": {"logging": {"level": {"root": "INFO", "flysession.session": "WARNING"}}}}
        )
        adapter.configure(config)
        assert adapter._module_levels == {"flysession.session": "WARNING"}
        assert logging.getLogger("flysession.session").level == logging.WARNING


class TestStructlogAdapterOutput:
    def test_stdlib_records_render_as_json(self, capsys):
        adapter = StructlogAdapter()
        adapter.configure(Config({"flysession": {"logging": {"format": "json"}}}))
        logging.getLogger("flysession.test").warning("session swept")
        out = capsys.readouterr().out
        assert '"event": "session swept"' in out
        assert '"logger": "flysession.test"' in out

    def test_get_logger_returns_usable_logger(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        logger = adapter.get_logger("flysession.test")
        logger.info("hello", session_id="abc")

    def test_set_level(self):
        adapter = StructlogAdapter()
        adapter.set_level("flysession.custom", "ERROR")
        assert logging.getLogger("flysession.custom").level == logging.ERROR
