"""End-to-end pipeline tests with a stubbed toolchain."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from linqpadc.errors import DependencyInstallError, MetadataError, UnexpectedError, UnsupportedKindError
from linqpadc.pipeline import compile_script, parse_script
from linqpadc.pipeline.build.exec import ExecResult
from linqpadc.pipeline.script.types import DEFAULT_IMPORTS
from linqpadc.pipeline.types import BuildState, OutputType

HELLO_BODY = 'void Main(string[] args) { write("hi"); }'


class _ToolchainStub:
    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.added: list[str] = []
        self.published: list[Path] = []

    def add_package(self, project_dir, package, *, version=None, cancel=None):
        _ = (version, cancel)
        self.added.append(package)
        code = 1 if package in self.failing else 0
        return ExecResult(argv=("dotnet",), cwd=project_dir, returncode=code, stdout="", stderr="restore failed")

    def publish(self, project_dir, *, output_dir, **kwargs):
        _ = kwargs
        self.published.append(output_dir)
        return ExecResult(argv=("dotnet",), cwd=project_dir, returncode=0, stdout="", stderr="")


def _nuget_header(*packages: str) -> str:
    refs = "".join(f"<NuGetReference>{name}</NuGetReference>" for name in packages)
    return f'<Query Kind="Program">{refs}</Query>'


def test_parse_script_success() -> None:
    outcome = parse_script(f'<Query Kind="Program" />\n{HELLO_BODY}')

    assert outcome.success
    assert outcome.error is None
    assert outcome.metadata.imports == DEFAULT_IMPORTS
    assert "static void Main(string[] args)" in outcome.code


def test_parse_script_failure_carries_no_partial_result() -> None:
    outcome = parse_script('<Query Kind="Statements" />\nConsole.WriteLine(1);')

    assert not outcome.success
    assert isinstance(outcome.error, UnsupportedKindError)
    assert outcome.metadata is None
    assert outcome.code is None


def test_source_only_scaffolds_without_building(write_script, tmp_path: Path) -> None:
    stub = _ToolchainStub()
    script = write_script(HELLO_BODY)

    outcome = compile_script(script, tmp_path / "out", OutputType.SOURCE_ONLY, toolchain=stub)

    assert outcome.success
    assert outcome.state is BuildState.DONE
    assert stub.published == []
    program = outcome.layout.program_file.read_text(encoding="utf-8")
    assert program.startswith("using System;\n")
    assert "namespace hello;" in program
    assert "public class Program\n{\nstatic void Main(string[] args)" in program
    assert outcome.layout.project_file.exists()
    assert outcome.layout.output_dir.is_dir()


def test_folder_output_publishes_to_dist(write_script, tmp_path: Path) -> None:
    stub = _ToolchainStub()

    outcome = compile_script(write_script(HELLO_BODY), tmp_path / "out", OutputType.COMPILED_FOLDER, toolchain=stub)

    assert outcome.state is BuildState.SUCCEEDED
    assert stub.published == [(tmp_path / "out").resolve() / "dist" / "hello"]


def test_case_duplicate_dependencies_install_once(write_script, tmp_path: Path) -> None:
    stub = _ToolchainStub()
    script = write_script(HELLO_BODY, header=_nuget_header("A", "a"))

    outcome = compile_script(script, tmp_path, OutputType.SOURCE_ONLY, toolchain=stub)

    assert outcome.success
    assert stub.added == ["A"]


def test_dependency_failure_stops_pipeline(write_script, tmp_path: Path) -> None:
    stub = _ToolchainStub(failing={"B"})
    script = write_script(HELLO_BODY, header=_nuget_header("A", "B", "C"))

    outcome = compile_script(script, tmp_path, OutputType.COMPILED_FOLDER, toolchain=stub)

    assert not outcome.success
    assert outcome.state is BuildState.FAILED
    assert isinstance(outcome.error, DependencyInstallError)
    assert outcome.error.dependency == "B"
    assert "restore failed" in outcome.diagnostics
    assert stub.added == ["A", "B"]
    assert stub.published == []
    # The scaffolded project is left in place.
    assert outcome.layout.program_file.exists()


def test_unsupported_kind_writes_nothing(write_script, tmp_path: Path) -> None:
    script = write_script("Console.WriteLine(1);", header='<Query Kind="Expression" />')

    outcome = compile_script(script, tmp_path / "out", OutputType.SOURCE_ONLY, toolchain=_ToolchainStub())

    assert isinstance(outcome.error, UnsupportedKindError)
    assert outcome.layout is None
    assert not (tmp_path / "out").exists()


def test_malformed_header(write_script, tmp_path: Path) -> None:
    script = write_script(HELLO_BODY, header='<Query Kind="Program"><Namespace></Query>')

    outcome = compile_script(script, tmp_path, OutputType.SOURCE_ONLY, toolchain=_ToolchainStub())

    assert isinstance(outcome.error, MetadataError)


def test_missing_script_is_unexpected(tmp_path: Path) -> None:
    outcome = compile_script(tmp_path / "absent.linq", tmp_path, OutputType.SOURCE_ONLY, toolchain=_ToolchainStub())

    assert isinstance(outcome.error, UnexpectedError)
    assert isinstance(outcome.error.__cause__, FileNotFoundError)


def test_cancelled_before_start(write_script, tmp_path: Path) -> None:
    cancel = threading.Event()
    cancel.set()

    outcome = compile_script(
        write_script(HELLO_BODY),
        tmp_path / "out",
        OutputType.SOURCE_ONLY,
        toolchain=_ToolchainStub(),
        cancel=cancel,
    )

    assert outcome.cancelled
    assert not outcome.success
    assert not (tmp_path / "out").exists()


def test_rerun_replaces_previous_output(write_script, tmp_path: Path) -> None:
    script = write_script(HELLO_BODY)
    first = compile_script(script, tmp_path / "out", OutputType.SOURCE_ONLY, toolchain=_ToolchainStub())
    (first.layout.source_dir / "leftover.cs").write_text("// old", encoding="utf-8")

    second = compile_script(script, tmp_path / "out", OutputType.SOURCE_ONLY, toolchain=_ToolchainStub())

    assert second.success
    assert not (second.layout.source_dir / "leftover.cs").exists()


def test_deeply_nested_body_still_parses() -> None:
    body = "void Main() { }\n" + "class A {" * 1000 + "}" * 1000

    outcome = parse_script(f'<Query Kind="Program" />\n{body}')

    assert outcome.success
    assert outcome.code.startswith("public class Program\n{\nstatic void Main() { }\n")


def test_parse_script_wraps_unexpected_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken(body: str) -> str:
        raise ValueError("transform exploded")

    monkeypatch.setattr("linqpadc.pipeline.compiler.transform_body", _broken)

    outcome = parse_script(f'<Query Kind="Program" />\n{HELLO_BODY}')

    assert not outcome.success
    assert isinstance(outcome.error, UnexpectedError)
    assert isinstance(outcome.error.__cause__, ValueError)
    assert outcome.code is None


def test_compile_script_wraps_unexpected_toolchain_errors(write_script, tmp_path: Path) -> None:
    class _ExplodingToolchain(_ToolchainStub):
        def publish(self, project_dir, **kwargs):
            raise RuntimeError("toolchain crashed")

    outcome = compile_script(write_script(HELLO_BODY), tmp_path, OutputType.COMPILED_FOLDER, toolchain=_ExplodingToolchain())

    assert not outcome.success
    assert outcome.state is BuildState.FAILED
    assert isinstance(outcome.error, UnexpectedError)
    assert "toolchain crashed" in str(outcome.error)
    assert outcome.layout.program_file.exists()
