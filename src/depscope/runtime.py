"""Worker pools backing the analyser: asynchronous file reads and CPU work."""

from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, TypeVar

from depscope.errors import IOFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalyserRuntime:
    """Executors shared by every request issued through one analyser.

    File reads go to a dedicated I/O pool so they never block the event loop;
    parsing and extraction run on the worker pool.
    """

    def __init__(self, workers: int | None = None, io_workers: int | None = None) -> None:
        self._workers = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="depscope-worker")
        self._io = ThreadPoolExecutor(max_workers=io_workers, thread_name_prefix="depscope-io")
        self._closed = False

    async def read_bytes(self, path: Path) -> bytes:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._io, path.read_bytes)
        except OSError as e:
            raise IOFailure(path, e.strerror or str(e)) from e

    async def read_text(self, path: Path) -> str:
        data = await self.read_bytes(path)
        return data.decode("utf-8", errors="replace")

    async def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._workers, functools.partial(fn, *args, **kwargs))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._workers.shutdown(wait=True, cancel_futures=True)
        self._io.shutdown(wait=True, cancel_futures=True)
        logger.debug("Analyser runtime shut down")

    async def aclose(self) -> None:
        """Shut the pools down from a helper thread, keeping the event loop free."""
        await asyncio.to_thread(self.close)

    def __enter__(self) -> AnalyserRuntime:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    async def __aenter__(self) -> AnalyserRuntime:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
