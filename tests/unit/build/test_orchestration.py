"""Unit tests for dependency installation and build orchestration."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from linqpadc.config import BuildSettings
from linqpadc.errors import BuildError, CancelledError, DependencyInstallError
from linqpadc.pipeline.build.dependencies import install_dependencies
from linqpadc.pipeline.build.exec import ExecResult
from linqpadc.pipeline.build.orchestrator import BuildOrchestrator
from linqpadc.pipeline.scaffold.layout import resolve_layout
from linqpadc.pipeline.types import BuildState, OutputType


def _result(code: int = 0, stderr: str = "") -> ExecResult:
    return ExecResult(argv=("dotnet",), cwd=Path("/p"), returncode=code, stdout="", stderr=stderr)


class _ToolchainStub:
    def __init__(self, failing: set[str] | None = None, publish_code: int = 0, publish_error: BaseException | None = None):
        self.failing = failing or set()
        self.publish_code = publish_code
        self.publish_error = publish_error
        self.added: list[tuple[str, str | None]] = []
        self.published: list[dict] = []

    def add_package(self, project_dir, package, *, version=None, cancel=None):
        _ = (project_dir, cancel)
        self.added.append((package, version))
        if package in self.failing:
            return _result(1, stderr=f"error: package {package} not found")
        return _result()

    def publish(self, project_dir, **kwargs):
        _ = project_dir
        self.published.append(kwargs)
        if self.publish_error is not None:
            raise self.publish_error
        return _result(self.publish_code, stderr="error CS1002: ; expected")


def test_case_variants_install_once() -> None:
    stub = _ToolchainStub()

    installed = install_dependencies(stub, Path("/p"), ["A", "a"])

    assert installed == ["A"]
    assert stub.added == [("A", None)]


def test_first_failure_stops_installation() -> None:
    stub = _ToolchainStub(failing={"B"})

    with pytest.raises(DependencyInstallError) as excinfo:
        install_dependencies(stub, Path("/p"), ["A", "B", "C"])

    assert excinfo.value.dependency == "B"
    assert "package B not found" in excinfo.value.diagnostics
    assert [name for name, _ in stub.added] == ["A", "B"]


def test_versions_are_forwarded() -> None:
    stub = _ToolchainStub()

    install_dependencies(stub, Path("/p"), ["Dapper", "Polly"], versions={"dapper": "2.1.35"})

    assert stub.added == [("Dapper", "2.1.35"), ("Polly", None)]


def test_cancelled_install_attempts_nothing() -> None:
    stub = _ToolchainStub()
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(CancelledError):
        install_dependencies(stub, Path("/p"), ["A"], cancel=cancel)

    assert stub.added == []


def test_source_only_never_publishes(tmp_path: Path) -> None:
    stub = _ToolchainStub()
    orchestrator = BuildOrchestrator(stub, BuildSettings())

    state = orchestrator.run(resolve_layout(tmp_path, "hello"), OutputType.SOURCE_ONLY)

    assert state is BuildState.DONE
    assert stub.published == []


@pytest.mark.parametrize(
    ("output_type", "self_contained", "single_file"),
    [
        (OutputType.SINGLE_FILE_ARTIFACT, True, True),
        (OutputType.COMPILED_FOLDER, False, False),
    ],
)
def test_publish_strategy_per_output_type(
    tmp_path: Path, output_type: OutputType, self_contained: bool, single_file: bool
) -> None:
    stub = _ToolchainStub()
    layout = resolve_layout(tmp_path, "hello")
    orchestrator = BuildOrchestrator(stub, BuildSettings(runtime_identifier="osx-arm64"))

    state = orchestrator.run(layout, output_type)

    assert state is BuildState.SUCCEEDED
    assert stub.published == [
        {
            "runtime": "osx-arm64",
            "self_contained": self_contained,
            "single_file": single_file,
            "output_dir": layout.output_dir,
            "cancel": None,
        }
    ]


def test_failed_publish_raises_build_error(tmp_path: Path) -> None:
    orchestrator = BuildOrchestrator(_ToolchainStub(publish_code=1), BuildSettings())

    with pytest.raises(BuildError) as excinfo:
        orchestrator.run(resolve_layout(tmp_path, "hello"), OutputType.COMPILED_FOLDER)

    assert orchestrator.state is BuildState.FAILED
    assert "error CS1002" in excinfo.value.diagnostics


def test_cancel_before_publish(tmp_path: Path) -> None:
    cancel = threading.Event()
    cancel.set()
    stub = _ToolchainStub(publish_error=CancelledError())
    orchestrator = BuildOrchestrator(stub, BuildSettings())

    with pytest.raises(CancelledError):
        orchestrator.run(resolve_layout(tmp_path, "hello"), OutputType.COMPILED_FOLDER, cancel)

    assert stub.published == []
    assert orchestrator.state is BuildState.SCAFFOLDED


def test_cancel_raised_by_running_publish_is_terminal(tmp_path: Path) -> None:
    cancel = threading.Event()

    class _CancellingStub(_ToolchainStub):
        def publish(self, project_dir, **kwargs):
            cancel.set()
            raise CancelledError()

    orchestrator = BuildOrchestrator(_CancellingStub(), BuildSettings())

    with pytest.raises(CancelledError):
        orchestrator.run(resolve_layout(tmp_path, "hello"), OutputType.SINGLE_FILE_ARTIFACT, cancel)

    assert orchestrator.state is BuildState.CANCELLED
    assert orchestrator.state.terminal
