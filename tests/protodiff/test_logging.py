"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import structlog

from protodiff.core.logging import setup_logging


def test_json_format_renders_event_and_context(capsys):
    setup_logging(level="INFO", fmt="json", stream="ext://sys.stdout")
    try:
        structlog.get_logger("protodiff.engine").info("scan.cycle_completed", validated=3)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "scan.cycle_completed"
        assert record["validated"] == 3
        assert record["level"] == "info"
        assert record["logger"] == "protodiff.engine"
        assert "timestamp" in record
    finally:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("PROTODIFF_LOG_LEVEL", "warning")
    setup_logging(stream="ext://sys.stderr")
    try:
        assert logging.getLogger("protodiff").getEffectiveLevel() == logging.WARNING
    finally:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
