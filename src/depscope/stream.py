"""Incremental, push-style stream of per-file import events.

This is a lightweight path for interactive consumers: it does not parse the
sources, it scans lines for the package and import declarations and emits one
``[class_fqn, import, ...]`` event per compilation unit as soon as the file
has been read.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from pathlib import Path

from depscope.discovery import list_compilation_units, scan_package_name
from depscope.errors import AnalysisError, InvalidPath, NoSources
from depscope.runtime import AnalyserRuntime

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "default"


def stream_class_name(path: Path, source: str) -> str:
    """``<package>.<FileStem>``, with ``default`` standing in for no package."""
    package = scan_package_name(source) or DEFAULT_PACKAGE
    return f"{package}.{path.stem}"


def scan_imports(source: str) -> list[str]:
    """Single-type imports, verbatim, in declaration order."""
    imports: list[str] = []
    for line in source.splitlines():
        # Several declarations may share a line; the text after the last ';' is not one.
        for statement in line.split(";")[:-1]:
            statement = statement.strip()
            if not statement.startswith("import "):
                continue
            imported = statement[len("import ") :].strip()
            if imported.startswith("static ") or imported.endswith("*"):
                continue
            imports.append(imported)
    return imports


class DependencyStream:
    """Cold stream of dependency events for the sources under *root*.

    Nothing happens until the stream is iterated; each iteration performs a
    fresh walk.  The terminal ``Error`` of the stream is the
    :class:`AnalysisError` raised out of the iteration (``InvalidPath``,
    ``NoSources`` or ``IOFailure``); normal exhaustion is ``Complete``.
    A stream serves one reader at a time.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        runtime: AnalyserRuntime | None = None,
        delay: float = 0.0,
    ) -> None:
        self.root = Path(root)
        self.runtime = runtime
        self.delay = delay
        self._reading = False

    def __aiter__(self) -> AsyncIterator[list[str]]:
        return self._events()

    async def _events(self) -> AsyncIterator[list[str]]:
        if self._reading:
            raise RuntimeError(f"stream for {self.root} already has a reader")
        self._reading = True
        runtime = self.runtime or AnalyserRuntime(workers=1, io_workers=1)
        try:
            root = self.root.absolute()
            if not root.is_dir():
                raise InvalidPath(self.root, "directory")

            java_files = await runtime.run(list_compilation_units, root)
            if not java_files:
                raise NoSources(self.root)
            logger.debug("Streaming %d files under %s", len(java_files), root)

            for java_file in java_files:
                if self.delay > 0:
                    await asyncio.sleep(self.delay)
                source = await runtime.read_text(java_file)
                logger.debug("Found file: %s", java_file.name)
                yield [stream_class_name(java_file, source), *scan_imports(source)]
        finally:
            self._reading = False
            if self.runtime is None:
                await runtime.aclose()

    async def subscribe(
        self,
        on_next: Callable[[list[str]], object],
        on_error: Callable[[AnalysisError], object] | None = None,
        on_complete: Callable[[], object] | None = None,
    ) -> None:
        """Push every event to *on_next*, then exactly one terminal callback.

        Without an *on_error* callback the terminal error is raised instead.
        """
        try:
            async for event in self:
                on_next(event)
        except AnalysisError as e:
            if on_error is None:
                raise
            on_error(e)
            return
        if on_complete is not None:
            on_complete()


def analyze_dependencies_stream(
    root: Path | str,
    *,
    runtime: AnalyserRuntime | None = None,
    delay: float = 0.0,
) -> DependencyStream:
    return DependencyStream(root, runtime=runtime, delay=delay)
