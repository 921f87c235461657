"""Unit tests for logging setup."""

from __future__ import annotations

import logging
from io import StringIO

import pytest

from bucketload_cli.log import configure_logging, parse_level


class TestParseLevel:
    """Tests for parse_level."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("name", "level"),
        [
            ("debug", logging.DEBUG),
            ("info", logging.INFO),
            ("warn", logging.WARNING),
            ("warning", logging.WARNING),
            ("error", logging.ERROR),
            ("ERROR", logging.ERROR),
            (" Debug ", logging.DEBUG),
        ],
    )
    def test_known_levels(self, name: str, level: int) -> None:
        assert parse_level(name) == level

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["verbose", "", None, "trace"])
    def test_unknown_means_info(self, name: str | None) -> None:
        assert parse_level(name) == logging.INFO


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.unit
    def test_writes_formatted_records(self) -> None:
        stream = StringIO()
        configure_logging("info", stream=stream)

        logging.getLogger("bucketload_cli.upload").info("Found %d file(s)", 3)

        line = stream.getvalue()
        assert "INFO" in line
        assert "bucketload_cli.upload" in line
        assert "Found 3 file(s)" in line

    @pytest.mark.unit
    def test_level_filters(self) -> None:
        stream = StringIO()
        configure_logging("error", stream=stream)

        logging.getLogger("bucketload_cli.pool").warning("ignored")
        logging.getLogger("bucketload_cli.pool").error("kept")

        assert "ignored" not in stream.getvalue()
        assert "kept" in stream.getvalue()

    @pytest.mark.unit
    def test_reconfigure_replaces_handler(self) -> None:
        first, second = StringIO(), StringIO()
        configure_logging("info", stream=first)
        configure_logging("info", stream=second)

        logging.getLogger("bucketload_cli").info("once")

        assert first.getvalue() == ""
        assert second.getvalue().count("once") == 1
