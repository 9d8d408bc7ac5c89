"""Tests for the concurrent class / package / project analysis API."""

import asyncio
from pathlib import Path

import pytest

from depscope.coordinator import DependencyAnalyser
from depscope.errors import InvalidPath, IOFailure, ParseFailure
from depscope.model import Dependency, DependencyKind

K = DependencyKind

FOO = "package p;\nimport java.util.List; import q.Bar;\npublic class Foo {}\n"
PLAIN = "package p;\nimport java.util.List;\nclass Plain { List<String> names; }\n"


class TestClassDependencies:
    @pytest.mark.asyncio
    async def test_single_file(self, analyser, write_java):
        path = write_java("p/Foo.java", FOO)
        report = await analyser.class_dependencies(path)
        assert report.class_name == "p.Foo"
        assert report.dependencies == {Dependency("p.Foo", "q.Bar", K.IMPORT, "import q.Bar;", 2)}

    @pytest.mark.asyncio
    async def test_missing_file(self, analyser, tmp_path):
        with pytest.raises(InvalidPath) as excinfo:
            await analyser.class_dependencies(tmp_path / "Missing.java")
        assert excinfo.value.path == tmp_path / "Missing.java"

    @pytest.mark.asyncio
    async def test_directory_is_not_a_file(self, analyser, tmp_path):
        with pytest.raises(InvalidPath):
            await analyser.class_dependencies(tmp_path)

    @pytest.mark.asyncio
    async def test_unparseable_file(self, analyser, write_java):
        path = write_java("Bad.java", "class {{{")
        with pytest.raises(ParseFailure) as excinfo:
            await analyser.class_dependencies(path)
        assert "Bad.java" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_read_error(self, analyser, write_java, monkeypatch):
        path = write_java("p/Foo.java", FOO)

        def _fail(self):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(Path, "read_bytes", _fail)
        with pytest.raises(IOFailure) as excinfo:
            await analyser.class_dependencies(path)
        assert excinfo.value.reason == "Permission denied"

    @pytest.mark.asyncio
    async def test_deferred_handle(self, analyser, write_java):
        path = write_java("p/Foo.java", FOO)
        deferred = asyncio.ensure_future(analyser.class_dependencies(path))
        report = await deferred
        assert deferred.done()
        assert deferred.result() is report


class TestPackageDependencies:
    @pytest.mark.asyncio
    async def test_empty_class_reports_skipped(self, analyser, tmp_path, write_java):
        write_java("p/Foo.java", FOO)
        write_java("p/Plain.java", PLAIN)
        report = await analyser.package_dependencies(tmp_path / "p")
        assert report.package_name == "p"
        assert [cr.class_name for cr in report.class_reports] == ["p.Foo"]

    @pytest.mark.asyncio
    async def test_discovery_order(self, analyser, tmp_path, write_java):
        for name in ("Charlie", "Alpha", "Bravo"):
            write_java(f"p/{name}.java", f"package p;\nclass {name} {{ Shared s; }}\n")
        report = await analyser.package_dependencies(tmp_path / "p")
        assert [cr.class_name for cr in report.class_reports] == ["p.Alpha", "p.Bravo", "p.Charlie"]

    @pytest.mark.asyncio
    async def test_nested_directories_not_included(self, analyser, tmp_path, write_java):
        write_java("p/Foo.java", FOO)
        write_java("p/sub/Inner.java", "package p.sub;\nclass Inner { Other o; }\n")
        report = await analyser.package_dependencies(tmp_path / "p")
        assert [cr.class_name for cr in report.class_reports] == ["p.Foo"]

    @pytest.mark.asyncio
    async def test_no_sources_is_an_empty_report(self, analyser, tmp_path):
        (tmp_path / "nothing").mkdir()
        report = await analyser.package_dependencies(tmp_path / "nothing")
        assert report.package_name == "nothing"
        assert report.is_empty()

    @pytest.mark.asyncio
    async def test_not_a_directory(self, analyser, tmp_path, write_java):
        with pytest.raises(InvalidPath):
            await analyser.package_dependencies(tmp_path / "missing")
        with pytest.raises(InvalidPath):
            await analyser.package_dependencies(write_java("p/Foo.java", FOO))

    @pytest.mark.asyncio
    async def test_one_bad_file_fails_the_package(self, analyser, tmp_path, write_java):
        write_java("p/Foo.java", FOO)
        write_java("p/Zed.java", "package p; class {{{")
        with pytest.raises(ParseFailure):
            await analyser.package_dependencies(tmp_path / "p")


@pytest.fixture
def project(tmp_path, write_java):
    root = tmp_path / "demo"
    write_java("demo/p1/A.java", "package p1;\nimport ext.Lib;\nclass A extends B { Lib lib; }\n")
    write_java("demo/p1/B.java", "package p1;\nclass B { A back; }\n")
    write_java("demo/p2/C.java", "package p2;\nimport java.util.Map;\nclass C { Map<String, String> m; }\n")
    return root


class TestProjectDependencies:
    @pytest.mark.asyncio
    async def test_empty_packages_skipped(self, analyser, project):
        report = await analyser.project_dependencies(project)
        assert report.project_name == "demo"
        assert [pr.package_name for pr in report.package_reports] == ["p1"]
        assert [cr.class_name for cr in report.package_reports[0].class_reports] == ["p1.A", "p1.B"]

    @pytest.mark.asyncio
    async def test_types_resolve_within_the_project(self, analyser, project):
        report = await analyser.project_dependencies(project)
        classes = {cr.class_name: cr for cr in report.class_reports()}
        assert (K.EXTENDS, "p1.B") in {(d.kind, d.target_type) for d in classes["p1.A"].dependencies}
        assert {(d.kind, d.target_type) for d in classes["p1.B"].dependencies} == {(K.FIELD, "p1.A")}

    @pytest.mark.asyncio
    async def test_package_level_resolution_is_lexical(self, analyser, project):
        report = await analyser.package_dependencies(project / "p1")
        b_report = report.class_reports[1]
        assert b_report.targets() == {"A"}

    @pytest.mark.asyncio
    async def test_root_with_sources_is_a_package(self, analyser, project, write_java):
        write_java("demo/Main.java", "class Main { Runner runner; }\n")
        report = await analyser.project_dependencies(project)
        assert [pr.package_name for pr in report.package_reports] == ["demo", "p1"]

    @pytest.mark.asyncio
    async def test_idempotent(self, analyser, project):
        first = await analyser.project_dependencies(project)
        second = await analyser.project_dependencies(project)
        assert first == second

    @pytest.mark.asyncio
    async def test_first_failure_fails_the_project(self, analyser, project, write_java):
        write_java("demo/p2/Broken.java", "package p2; interface {")
        with pytest.raises(ParseFailure):
            await analyser.project_dependencies(project)

    @pytest.mark.asyncio
    async def test_invalid_root(self, analyser, tmp_path):
        with pytest.raises(InvalidPath):
            await analyser.project_dependencies(tmp_path / "missing")

    @pytest.mark.asyncio
    async def test_empty_project(self, analyser, tmp_path):
        (tmp_path / "blank").mkdir()
        report = await analyser.project_dependencies(tmp_path / "blank")
        assert report.project_name == "blank"
        assert report.is_empty()

    @pytest.mark.asyncio
    async def test_concurrent_projects_keep_their_own_resolution(self, analyser, write_java, tmp_path):
        for name in ("one", "two"):
            write_java(f"{name}/core/Service.java", "package core;\nclass Service { Helper helper; }\n")
        write_java("one/core/Helper.java", "package core;\nclass Helper {}\n")

        first, second = await asyncio.gather(
            analyser.project_dependencies(tmp_path / "one"),
            analyser.project_dependencies(tmp_path / "two"),
        )
        assert next(first.class_reports()).targets() == {"core.Helper"}
        assert next(second.class_reports()).targets() == {"Helper"}

    @pytest.mark.asyncio
    async def test_cancellation_discards_work(self, analyser, project):
        task = asyncio.ensure_future(analyser.project_dependencies(project))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestStaged:
    @pytest.mark.asyncio
    async def test_class_then_package_then_project(self, analyser, project):
        from depscope.pipeline import run_staged

        staged = await run_staged(analyser, project / "p1" / "A.java", project / "p1", project)
        assert staged.class_report.class_name == "p1.A"
        assert staged.package_report.package_name == "p1"
        assert staged.project_report.project_name == "demo"

    @pytest.mark.asyncio
    async def test_first_failure_stops_the_run(self, analyser, project):
        from depscope.pipeline import run_staged

        with pytest.raises(InvalidPath):
            await run_staged(analyser, project / "Nope.java", project / "p1", project)


def test_analyser_owns_its_runtime():
    analyser = DependencyAnalyser(workers=1)
    analyser.close()
    analyser.close()
