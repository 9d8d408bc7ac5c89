"""Dependency edges and the class / package / project report aggregates."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field

# Standard-library packages whose types never show up in a report.
EXCLUDED_PACKAGES = frozenset(
    {
        "java.lang",
        "java.util",
        "java.io",
        "java.math",
        "java.time",
        "java.text",
        "java.nio",
        "java.net",
    }
)


class DependencyKind(enum.Enum):
    """Syntactic role in which a compilation unit references a type."""

    IMPORT = "Import"
    EXTENDS = "Extends"
    IMPLEMENTS = "Implements"
    INSTANTIATION = "Instantiation"
    FIELD = "Field"
    METHOD_PARAMETER = "MethodParameter"
    METHOD_RETURN = "MethodReturn"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Dependency:
    """A typed edge from one compilation unit to a type it references."""

    source_type: str
    target_type: str
    kind: DependencyKind
    snippet: str
    line: int = 0  # 1-based, 0 when unknown

    def __post_init__(self) -> None:
        if self.source_type == self.target_type:
            raise ValueError(f"self-dependency on {self.source_type}")

    @property
    def has_line_number(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        text = f"{self.source_type} -> {self.target_type} ({self.kind}"
        if self.snippet and self.has_line_number:
            text += f": {self.snippet} at line: {self.line}"
        return text + ")"


@dataclass
class ClassReport:
    """Dependencies emitted by a single compilation unit."""

    class_name: str
    dependencies: set[Dependency] | frozenset[Dependency] = field(default_factory=set)

    def add_dependency(self, dependency: Dependency) -> None:
        if isinstance(self.dependencies, frozenset):
            raise RuntimeError(f"report for {self.class_name} is frozen")
        self.dependencies.add(dependency)

    def freeze(self) -> ClassReport:
        """Make the dependency set immutable once extraction has finished."""
        self.dependencies = frozenset(self.dependencies)
        return self

    def is_empty(self) -> bool:
        return not self.dependencies

    def targets(self) -> set[str]:
        return {dep.target_type for dep in self.dependencies}

    def __str__(self) -> str:
        lines = [f"Class: {self.class_name}", "Dependencies:"]
        lines.extend(f"  - {dep.kind}: {dep.target_type}" for dep in self.dependencies)
        return "\n".join(lines) + "\n"


@dataclass
class PackageReport:
    """Class reports of one package directory, in discovery order."""

    package_name: str
    class_reports: list[ClassReport] = field(default_factory=list)

    def add_class_report(self, report: ClassReport) -> None:
        self.class_reports.append(report)

    def is_empty(self) -> bool:
        return not self.class_reports

    def __str__(self) -> str:
        parts = [f"Package: {self.package_name}"]
        parts.extend(str(report) for report in self.class_reports)
        return "\n".join(parts) + "\n"


@dataclass
class ProjectReport:
    """Package reports of a project tree, in package-discovery order."""

    project_name: str
    package_reports: list[PackageReport] = field(default_factory=list)

    def add_package_report(self, report: PackageReport) -> None:
        self.package_reports.append(report)

    def is_empty(self) -> bool:
        return not self.package_reports

    def class_reports(self) -> Iterator[ClassReport]:
        for package in self.package_reports:
            yield from package.class_reports

    def __str__(self) -> str:
        parts = [f"Project: {self.project_name}"]
        parts.extend(str(report) for report in self.package_reports)
        return "\n".join(parts)
