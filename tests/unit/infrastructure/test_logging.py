"""Unit tests for logging configuration."""

from __future__ import annotations

import json

import pytest
import structlog

from provisioner.infrastructure.observability.logging import setup_logging


class TestLogging:
    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "bogus"])
    def test_setup_console(self, level: str) -> None:
        setup_logging(level, "console")

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging("INFO", "json")
        structlog.get_logger("test").info("hosted_zone_created", zone_id="Z1")
        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "hosted_zone_created"
        assert record["zone_id"] == "Z1"
        assert record["level"] == "info"
        assert "T" in record["timestamp"]

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging("WARNING", "json")
        structlog.get_logger("test").info("quiet")
        assert "quiet" not in capsys.readouterr().err
