"""depscope: static dependency analysis of Java source trees."""

from depscope.coordinator import DependencyAnalyser
from depscope.errors import AnalysisError, InvalidPath, IOFailure, NoSources, ParseFailure
from depscope.model import (
    EXCLUDED_PACKAGES,
    ClassReport,
    Dependency,
    DependencyKind,
    PackageReport,
    ProjectReport,
)
from depscope.stream import DependencyStream, analyze_dependencies_stream

__all__ = [
    "EXCLUDED_PACKAGES",
    "AnalysisError",
    "ClassReport",
    "Dependency",
    "DependencyAnalyser",
    "DependencyKind",
    "DependencyStream",
    "IOFailure",
    "InvalidPath",
    "NoSources",
    "PackageReport",
    "ParseFailure",
    "ProjectReport",
    "analyze_dependencies_stream",
]
