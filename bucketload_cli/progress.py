"""Progress observers for upload runs.

The coordinator owns one observer per run and hands it to the worker pool;
nothing in bucketload keeps progress in module-level state. The pool
serializes ``advance`` calls, so observers need not be thread-safe.
"""

from __future__ import annotations

from typing import Any, Protocol

import click


class ProgressObserver(Protocol):
    """Receives one ``advance`` per finished file."""

    def start(self, total: int) -> None: ...

    def advance(self) -> None: ...

    def finish(self) -> None: ...


class NullProgress:
    """Observer that ignores every event."""

    def start(self, total: int) -> None:
        pass

    def advance(self) -> None:
        pass

    def finish(self) -> None:
        pass


class CountingProgress:
    """Observer that just counts, handy for scripting and tests."""

    def __init__(self) -> None:
        self.total: int | None = None
        self.completed = 0
        self.finished = False

    def start(self, total: int) -> None:
        self.total = total

    def advance(self) -> None:
        self.completed += 1

    def finish(self) -> None:
        self.finished = True


class ClickProgress:
    """Terminal progress bar built on ``click.progressbar``."""

    def __init__(self, label: str = "Uploading", **bar_options: Any) -> None:
        self.label = label
        self.bar_options = bar_options
        self._bar: Any = None

    def start(self, total: int) -> None:
        self._bar = click.progressbar(length=total, label=self.label, **self.bar_options)
        self._bar.__enter__()

    def advance(self) -> None:
        if self._bar is not None:
            self._bar.update(1)

    def finish(self) -> None:
        if self._bar is not None:
            self._bar.__exit__(None, None, None)
            self._bar = None
