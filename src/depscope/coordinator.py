"""Concurrent class / package / project dependency analysis.

Every operation is a coroutine; wrap it in :func:`asyncio.ensure_future` to
get a one-shot deferred handle.  Per-file work fans out over the runtime's
worker pool and is fanned back in with :func:`gather_first_failure`, so the
first failing child fails its aggregate and cancels its siblings.
"""

from __future__ import annotations

import logging
from pathlib import Path

from depscope.discovery import (
    infer_package_name,
    list_direct_compilation_units,
    list_package_directories,
    require_directory,
    require_file,
)
from depscope.extractor import extract_dependencies
from depscope.futures import gather_first_failure
from depscope.model import ClassReport, PackageReport, ProjectReport
from depscope.parser import JavaSourceParser
from depscope.runtime import AnalyserRuntime
from depscope.stream import DependencyStream, analyze_dependencies_stream

logger = logging.getLogger(__name__)


def _analyse_source(parser: JavaSourceParser, source: str, path: Path) -> ClassReport:
    unit = parser.parse(source, path)
    return extract_dependencies(unit)


class DependencyAnalyser:
    """Entry point for bulk and incremental dependency analysis."""

    def __init__(
        self,
        runtime: AnalyserRuntime | None = None,
        *,
        workers: int | None = None,
        parser: JavaSourceParser | None = None,
    ) -> None:
        self._owns_runtime = runtime is None
        self.runtime = runtime or AnalyserRuntime(workers=workers)
        # Reflection-only resolution; project analyses derive their own parser.
        self.parser = parser or JavaSourceParser()

    # -- bulk API --------------------------------------------------------

    async def class_dependencies(self, path: Path | str) -> ClassReport:
        return await self._class_dependencies(Path(path), self.parser)

    async def package_dependencies(self, path: Path | str) -> PackageReport:
        return await self._package_dependencies(Path(path), self.parser)

    async def project_dependencies(self, path: Path | str) -> ProjectReport:
        root = require_directory(Path(path))
        # A parser private to this invocation: concurrent project analyses
        # never share a resolver configuration.
        parser = await self.runtime.run(self.parser.with_source_roots, [root])
        package_dirs = await self.runtime.run(list_package_directories, root)

        package_reports = await gather_first_failure(
            self._package_dependencies(package_dir, parser) for package_dir in package_dirs
        )

        report = ProjectReport(root.resolve().name)
        for package_report in package_reports:
            if package_report.is_empty():
                logger.debug("Skipping package %s: no dependencies", package_report.package_name)
                continue
            report.add_package_report(package_report)
        logger.debug(
            "Project %s: %d of %d packages reported",
            report.project_name,
            len(report.package_reports),
            len(package_reports),
        )
        return report

    async def _class_dependencies(self, path: Path, parser: JavaSourceParser) -> ClassReport:
        require_file(path)
        source = await self.runtime.read_text(path)
        return await self.runtime.run(_analyse_source, parser, source, path)

    async def _package_dependencies(
        self, directory: Path, parser: JavaSourceParser
    ) -> PackageReport:
        require_directory(directory)
        units = await self.runtime.run(list_direct_compilation_units, directory)
        if not units:
            return PackageReport(directory.name)

        package_name = await self.runtime.run(infer_package_name, directory, parser)
        class_reports = await gather_first_failure(
            self._class_dependencies(unit, parser) for unit in units
        )

        report = PackageReport(package_name)
        for class_report in class_reports:
            if class_report.is_empty():
                logger.debug("Skipping class %s: no dependencies", class_report.class_name)
                continue
            report.add_class_report(class_report)
        logger.debug(
            "Package %s: %d of %d classes reported",
            package_name,
            len(report.class_reports),
            len(class_reports),
        )
        return report

    # -- incremental API -------------------------------------------------

    def analyze_dependencies_stream(
        self, path: Path | str, *, delay: float = 0.0
    ) -> DependencyStream:
        return analyze_dependencies_stream(path, runtime=self.runtime, delay=delay)

    # -- lifecycle -------------------------------------------------------

    def close(self) -> None:
        if self._owns_runtime:
            self.runtime.close()

    async def aclose(self) -> None:
        if self._owns_runtime:
            await self.runtime.aclose()

    def __enter__(self) -> DependencyAnalyser:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    async def __aenter__(self) -> DependencyAnalyser:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
