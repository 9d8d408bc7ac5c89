"""Tests for the dependency model and report rendering."""

import pytest

from depscope.model import (
    EXCLUDED_PACKAGES,
    ClassReport,
    Dependency,
    DependencyKind,
    PackageReport,
    ProjectReport,
)


def _dep(target="q.Bar", kind=DependencyKind.IMPORT, snippet="import q.Bar;", line=2):
    return Dependency("p.Foo", target, kind, snippet, line)


class TestDependency:
    def test_equality_covers_all_fields(self):
        assert _dep() == _dep()
        assert hash(_dep()) == hash(_dep())
        assert _dep() != _dep(line=3)
        assert _dep() != _dep(snippet="import q.Bar ;")
        assert _dep() != _dep(kind=DependencyKind.FIELD)

    def test_self_dependency_rejected(self):
        with pytest.raises(ValueError):
            Dependency("p.Foo", "p.Foo", DependencyKind.FIELD, "field Foo", 1)

    def test_immutable(self):
        dep = _dep()
        with pytest.raises(AttributeError):
            dep.line = 5  # type: ignore[misc]

    def test_str_with_line(self):
        assert str(_dep()) == "p.Foo -> q.Bar (Import: import q.Bar; at line: 2)"

    def test_str_without_line(self):
        dep = _dep(line=0)
        assert not dep.has_line_number
        assert str(dep) == "p.Foo -> q.Bar (Import)"

    def test_kind_names(self):
        assert [str(k) for k in DependencyKind] == [
            "Import",
            "Extends",
            "Implements",
            "Instantiation",
            "Field",
            "MethodParameter",
            "MethodReturn",
        ]


class TestClassReport:
    def test_duplicates_suppressed(self):
        report = ClassReport("p.Foo")
        report.add_dependency(_dep())
        report.add_dependency(_dep())
        assert len(report.dependencies) == 1

    def test_frozen_after_extraction(self):
        report = ClassReport("p.Foo")
        report.add_dependency(_dep())
        report.freeze()
        with pytest.raises(RuntimeError):
            report.add_dependency(_dep(line=9))

    def test_str(self):
        report = ClassReport("p.Foo")
        report.add_dependency(_dep())
        report.add_dependency(_dep("q.Baz", DependencyKind.FIELD, "field Baz", 4))
        text = str(report)
        lines = text.splitlines()
        assert lines[0] == "Class: p.Foo"
        assert lines[1] == "Dependencies:"
        assert sorted(lines[2:]) == ["  - Field: q.Baz", "  - Import: q.Bar"]
        assert text.count("Class: ") == 1

    def test_equality_ignores_set_flavour(self):
        open_report = ClassReport("p.Foo", {_dep()})
        frozen = ClassReport("p.Foo", {_dep()}).freeze()
        assert open_report == frozen


class TestAggregates:
    def test_package_str_separates_classes_with_blank_line(self):
        package = PackageReport("p")
        package.add_class_report(ClassReport("p.A", {Dependency("p.A", "q.X", DependencyKind.FIELD, "field X", 3)}))
        package.add_class_report(ClassReport("p.B", {Dependency("p.B", "q.Y", DependencyKind.FIELD, "field Y", 3)}))
        text = str(package)
        assert text.startswith("Package: p\n")
        assert "  - Field: q.X\n\nClass: p.B" in text

    def test_project_str_and_class_iteration(self):
        project = ProjectReport("demo")
        first = PackageReport("p", [ClassReport("p.A")])
        second = PackageReport("r", [ClassReport("r.B"), ClassReport("r.C")])
        project.add_package_report(first)
        project.add_package_report(second)

        assert str(project).startswith("Project: demo\nPackage: p")
        assert [c.class_name for c in project.class_reports()] == ["p.A", "r.B", "r.C"]
        assert not project.is_empty()
        assert ProjectReport("empty").is_empty()

    def test_exclusion_set(self):
        assert EXCLUDED_PACKAGES == {
            "java.lang",
            "java.util",
            "java.io",
            "java.math",
            "java.time",
            "java.text",
            "java.nio",
            "java.net",
        }
