"""Orchestration used by the CLI: one report level, or the staged run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from depscope.config import AnalyserConfig
from depscope.coordinator import DependencyAnalyser
from depscope.model import ClassReport, PackageReport, ProjectReport

logger = logging.getLogger(__name__)

LEVELS = ("class", "package", "project")


@dataclass
class StagedReports:
    class_report: ClassReport
    package_report: PackageReport
    project_report: ProjectReport


async def run_staged(
    analyser: DependencyAnalyser,
    class_file: Path,
    package_dir: Path,
    project_dir: Path,
) -> StagedReports:
    """Analyse a class, then a package, then a project, one after the other.

    Each stage starts only once the previous one succeeded; the first
    failure ends the run.
    """
    class_report = await analyser.class_dependencies(class_file)
    logger.info("=== Class Report ===\n%s", class_report)
    package_report = await analyser.package_dependencies(package_dir)
    logger.info("=== Package Report ===\n%s", package_report)
    project_report = await analyser.project_dependencies(project_dir)
    logger.info("=== Project Report ===\n%s", project_report)
    return StagedReports(class_report, package_report, project_report)


async def run(
    level: str, path: Path, config: AnalyserConfig
) -> ClassReport | PackageReport | ProjectReport:
    """Produce the report for *path* at *level*."""
    if level not in LEVELS:
        raise ValueError(f"unknown report level {level!r}")
    async with DependencyAnalyser(workers=config.workers) as analyser:
        if level == "class":
            return await analyser.class_dependencies(path)
        if level == "package":
            return await analyser.package_dependencies(path)
        return await analyser.project_dependencies(path)
