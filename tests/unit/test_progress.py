"""Unit tests for progress observers."""

from __future__ import annotations

from io import StringIO

import pytest

from bucketload_cli.progress import ClickProgress, CountingProgress, NullProgress


class TestCountingProgress:
    """Tests for CountingProgress."""

    @pytest.mark.unit
    def test_counts(self) -> None:
        progress = CountingProgress()

        progress.start(3)
        progress.advance()
        progress.advance()
        progress.finish()

        assert progress.total == 3
        assert progress.completed == 2
        assert progress.finished is True


class TestNullProgress:
    """NullProgress accepts every event."""

    @pytest.mark.unit
    def test_accepts_events(self) -> None:
        progress = NullProgress()

        progress.start(1)
        progress.advance()
        progress.finish()


class TestClickProgress:
    """Tests for the click progress bar wrapper."""

    @pytest.mark.unit
    def test_renders_label(self) -> None:
        output = StringIO()
        progress = ClickProgress(label="Uploading", file=output)

        progress.start(2)
        progress.advance()
        progress.advance()
        progress.finish()

        assert "Uploading" in output.getvalue()

    @pytest.mark.unit
    def test_advance_before_start_is_ignored(self) -> None:
        progress = ClickProgress(file=StringIO())

        progress.advance()
        progress.finish()

    @pytest.mark.unit
    def test_finish_twice(self) -> None:
        progress = ClickProgress(file=StringIO())
        progress.start(1)

        progress.finish()
        progress.finish()
