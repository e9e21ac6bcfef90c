# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for the logging helpers."""
from __future__ import annotations

import logging

import pytest

from fixtures.settings_models import Person
from regsettings import RegistrySettings
from regsettings.core.logger import PROJECT_LOGGER, TRACE, Log


@pytest.mark.unit
class TestTraceLevel:
    def test_trace_level_registered(self):
        assert logging.getLevelName(TRACE) == "TRACE"
        assert hasattr(logging.getLogger("x"), "trace")

    def test_trace_with_context(self, caplog):
        logger = logging.getLogger("regsettings.test.trace")
        with caplog.at_level(TRACE, logger="regsettings.test.trace"):
            Log.trace(logger, "mapped %s", "Port", settings="App")

        rec = caplog.records[-1]
        assert rec.levelno == TRACE
        assert rec.getMessage() == "mapped Port"
        assert rec.ctx == {"settings": "App"}

    def test_trace_filtered_above_level(self, caplog):
        logger = logging.getLogger("regsettings.test.quiet")
        with caplog.at_level(logging.DEBUG, logger="regsettings.test.quiet"):
            Log.trace(logger, "hidden")
        assert not caplog.records

    def test_construction_traces_each_property(self, caplog, memory_store):
        with caplog.at_level(TRACE, logger="regsettings.settings"):
            RegistrySettings(Person, memory_store)

        traced = [r for r in caplog.records if r.levelno == TRACE and r.name == "regsettings.settings"]
        assert len(traced) == 1
        assert "Name" in traced[0].getMessage()


@pytest.mark.unit
class TestLoggers:
    def test_get_children(self):
        assert Log.get().name == PROJECT_LOGGER
        assert Log.get("stores").name == "regsettings.stores"
        assert Log.get("regsettings.settings").name == "regsettings.settings"

    def test_bind_merges_context(self, caplog):
        logger = logging.getLogger("regsettings.test.bind")
        log = Log.bind(logger, settings="App").bind(store="mem")

        with caplog.at_level(logging.INFO, logger="regsettings.test.bind"):
            log.info("loaded", extra={"ctx": {"count": 2}})

        rec = caplog.records[-1]
        assert rec.ctx == {"settings": "App", "store": "mem", "count": 2}

    def test_bound_context_not_shared(self):
        logger = logging.getLogger("regsettings.test.copy")
        base = Log.bind(logger, settings="App")
        base.bind(store="mem")

        assert base.extra["ctx"] == {"settings": "App"}
