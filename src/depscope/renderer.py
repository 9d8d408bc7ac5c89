"""Render reports as text or JSON."""

from __future__ import annotations

import json
from pathlib import Path

from depscope.analysis import class_graph
from depscope.model import ClassReport, Dependency, PackageReport, ProjectReport

Report = ClassReport | PackageReport | ProjectReport


def _dependency_to_dict(dep: Dependency) -> dict:
    d: dict = {"target": dep.target_type, "kind": dep.kind.value, "snippet": dep.snippet}
    if dep.has_line_number:
        d["line"] = dep.line
    return d


def _class_to_dict(report: ClassReport) -> dict:
    # Sets have no order; sort for stable output.
    deps = sorted(report.dependencies, key=lambda d: (d.line, d.kind.value, d.target_type, d.snippet))
    return {
        "class": report.class_name,
        "dependencies": [_dependency_to_dict(dep) for dep in deps],
    }


def _package_to_dict(report: PackageReport) -> dict:
    return {
        "package": report.package_name,
        "classes": [_class_to_dict(cr) for cr in report.class_reports],
    }


def report_to_dict(report: Report) -> dict:
    """Serialize any report level into plain JSON-compatible data."""
    if isinstance(report, ClassReport):
        return _class_to_dict(report)
    if isinstance(report, PackageReport):
        return _package_to_dict(report)
    return {
        "project": report.project_name,
        "packages": [_package_to_dict(pr) for pr in report.package_reports],
        "graph": class_graph(report),
    }


def render_json(report: Report) -> str:
    return json.dumps(report_to_dict(report), indent=2)


def render_text(report: Report) -> str:
    return str(report)


def write_report(report: Report, output_path: Path, *, as_json: bool = False) -> None:
    """Write the rendered *report* to *output_path*."""
    text = render_json(report) if as_json else render_text(report)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text)
