"""Write Program.cs and the .csproj for a scaffolded script."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from linqpadc.config import BuildSettings
from linqpadc.pipeline.scaffold.layout import ProjectLayout

logger = logging.getLogger(__name__)

PROJECT_TEMPLATE = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <OutputType>Exe</OutputType>
    <TargetFramework>{target_framework}</TargetFramework>
    <LangVersion>latest</LangVersion>
    <Nullable>enable</Nullable>
    <AssemblyName>{assembly_name}</AssemblyName>
    <RootNamespace>{assembly_name}</RootNamespace>
    <PublishAot>false</PublishAot>
  </PropertyGroup>
</Project>"""


def render_program(imports: Iterable[str], namespace: str, code: str) -> str:
    """Render Program.cs: sorted usings, file-scoped namespace, then code."""
    lines = [f"using {name};" for name in sorted(set(imports))]
    lines.extend(["", f"namespace {namespace};", "", code.rstrip("\n")])
    return "\n".join(lines) + "\n"


def render_project(assembly_name: str, settings: BuildSettings) -> str:
    """Render the SDK-style project descriptor."""
    return PROJECT_TEMPLATE.format(
        target_framework=settings.target_framework,
        assembly_name=assembly_name,
    )


def write_project(
    layout: ProjectLayout,
    *,
    imports: Iterable[str],
    code: str,
    settings: BuildSettings,
) -> None:
    """Write exactly Program.cs and <name>.csproj into the source directory."""
    layout.program_file.write_text(
        render_program(imports, layout.name, code),
        encoding="utf-8",
    )
    logger.debug("Written Program.cs to %s", layout.program_file)

    layout.project_file.write_text(render_project(layout.name, settings), encoding="utf-8")
    logger.debug("Written project file to %s", layout.project_file)
