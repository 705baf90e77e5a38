"""Unit tests for project layout and scaffolding."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from linqpadc.config import BuildSettings
from linqpadc.errors import CancelledError
from linqpadc.pipeline.scaffold.layout import (
    prepare_directories,
    resolve_layout,
    sanitize_name,
)
from linqpadc.pipeline.scaffold.project import render_program, render_project, write_project


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("hello", "hello"),
        ("my script", "my_script"),
        ("data-load.v2", "data_load_v2"),
        ("Äpfel_2024", "Äpfel_2024"),
    ],
)
def test_sanitize_name(raw: str, expected: str) -> None:
    assert sanitize_name(raw) == expected


def test_layout_is_rooted_under_src_and_dist(tmp_path: Path) -> None:
    layout = resolve_layout(tmp_path, "my script")

    assert layout.name == "my_script"
    assert layout.source_dir == tmp_path.resolve() / "src" / "my_script"
    assert layout.output_dir == tmp_path.resolve() / "dist" / "my_script"
    assert layout.project_file.name == "my_script.csproj"
    assert layout.program_file.name == "Program.cs"


def test_prepare_directories_resets_existing_content(tmp_path: Path) -> None:
    layout = resolve_layout(tmp_path, "job")
    layout.source_dir.mkdir(parents=True)
    (layout.source_dir / "stale.cs").write_text("old", encoding="utf-8")
    layout.output_dir.mkdir(parents=True)
    (layout.output_dir / "job.dll").write_text("old", encoding="utf-8")

    prepare_directories(layout)

    assert layout.source_dir.is_dir()
    assert layout.output_dir.is_dir()
    assert list(layout.source_dir.iterdir()) == []
    assert list(layout.output_dir.iterdir()) == []


def test_prepare_directories_honours_cancellation(tmp_path: Path) -> None:
    layout = resolve_layout(tmp_path, "job")
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(CancelledError):
        prepare_directories(layout, cancel)

    assert not layout.source_dir.exists()


def test_render_program_orders_usings_and_declares_namespace() -> None:
    program = render_program(
        ["System.Linq", "System", "System.Linq"],
        "hello",
        "public class Program\n{\n}\n",
    )

    assert program == (
        "using System;\n"
        "using System.Linq;\n"
        "\n"
        "namespace hello;\n"
        "\n"
        "public class Program\n"
        "{\n"
        "}\n"
    )


def test_render_project_uses_settings() -> None:
    project = render_project("hello", BuildSettings(target_framework="net9.0"))

    assert "<OutputType>Exe</OutputType>" in project
    assert "<TargetFramework>net9.0</TargetFramework>" in project
    assert "<Nullable>enable</Nullable>" in project
    assert "<AssemblyName>hello</AssemblyName>" in project
    assert "<PublishAot>false</PublishAot>" in project


def test_write_project_writes_exactly_two_files(tmp_path: Path) -> None:
    layout = resolve_layout(tmp_path, "hello")
    prepare_directories(layout)

    write_project(layout, imports={"System"}, code="public class Program\n{\n}\n", settings=BuildSettings())

    assert sorted(p.name for p in layout.source_dir.iterdir()) == ["Program.cs", "hello.csproj"]
    assert layout.program_file.read_text(encoding="utf-8").startswith("using System;\n\nnamespace hello;\n")
