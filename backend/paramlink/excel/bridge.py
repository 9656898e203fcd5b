"""Host access from the workbook worker.

Workbook I/O runs in a worker thread. Anything that touches the host
document is sent back to the coordination context and the worker waits for
that one call only.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from paramlink.excel.host import HostDocument

T = TypeVar("T")

HostCall = Callable[..., T]
HostRunner = Callable[[Callable[[Any], Any]], Awaitable[Any]]
ProgressCallback = Callable[[int], None]


class DirectBridge:
    """Runs host calls inline. For callers already in the host context."""

    def __init__(self, document: HostDocument, progress: ProgressCallback | None = None) -> None:
        self._document = document
        self._progress = progress

    def call(self, fn: HostCall[T], *args: Any) -> T:
        return fn(self._document, *args)

    def progress(self, percent: int) -> None:
        if self._progress is not None:
            self._progress(percent)


class HostBridge:
    """Marshals host calls from a worker thread onto an event loop.

    Args:
        loop: The coordination loop, which owns the host document.
        runner: Coroutine function run on the loop that calls fn(document)
            and returns its result, e.g. a wrapper around
            AsyncSession.run_sync.
        progress: Called on the loop with each progress percentage.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        runner: HostRunner,
        progress: ProgressCallback | None = None,
    ) -> None:
        self._loop = loop
        self._runner = runner
        self._progress = progress

    def _check_thread(self) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            return
        if running is self._loop:
            raise RuntimeError("HostBridge.call must not be used from the host loop")

    def call(self, fn: HostCall[T], *args: Any) -> T:
        """Run fn(document, *args) on the loop and wait for its result.

        Exceptions raised by fn are re-raised in the calling thread.
        """
        self._check_thread()
        future = asyncio.run_coroutine_threadsafe(
            self._runner(lambda document: fn(document, *args)), self._loop
        )
        return future.result()

    def progress(self, percent: int) -> None:
        if self._progress is not None:
            self._loop.call_soon_threadsafe(self._progress, percent)
