"""The dotnet CLI as seen by the pipeline."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol

from linqpadc.config import BuildSettings
from linqpadc.pipeline.build.exec import ExecResult, run_command


class Toolchain(Protocol):
    """The two toolchain operations the pipeline consumes."""

    def add_package(
        self,
        project_dir: Path,
        package: str,
        *,
        version: str | None = None,
        cancel: threading.Event | None = None,
    ) -> ExecResult: ...

    def publish(
        self,
        project_dir: Path,
        *,
        runtime: str,
        self_contained: bool,
        single_file: bool,
        output_dir: Path,
        cancel: threading.Event | None = None,
    ) -> ExecResult: ...


class DotnetToolchain:
    """Runs ``dotnet add package`` and ``dotnet publish``."""

    def __init__(self, settings: BuildSettings | None = None):
        self.settings = settings or BuildSettings()

    def add_package_arguments(self, package: str, version: str | None = None) -> list[str]:
        argv = [self.settings.dotnet, "add", "package", package]
        if version:
            argv.extend(["--version", version])
        return argv

    def publish_arguments(
        self,
        *,
        runtime: str,
        self_contained: bool,
        single_file: bool,
        output_dir: Path,
    ) -> list[str]:
        argv = [
            self.settings.dotnet,
            "publish",
            "-c",
            self.settings.configuration,
            "-r",
            runtime,
            "--self-contained",
            "true" if self_contained else "false",
        ]
        if single_file:
            argv.append("/p:PublishSingleFile=true")
            if self.settings.trim_single_file:
                argv.extend(["/p:PublishTrimmed=true", "/p:TrimMode=link"])
        argv.extend(["-o", str(output_dir)])
        return argv

    def add_package(
        self,
        project_dir: Path,
        package: str,
        *,
        version: str | None = None,
        cancel: threading.Event | None = None,
    ) -> ExecResult:
        return run_command(
            self.add_package_arguments(package, version),
            cwd=project_dir,
            cancel=cancel,
            poll_interval=self.settings.poll_interval,
        )

    def publish(
        self,
        project_dir: Path,
        *,
        runtime: str,
        self_contained: bool,
        single_file: bool,
        output_dir: Path,
        cancel: threading.Event | None = None,
    ) -> ExecResult:
        argv = self.publish_arguments(
            runtime=runtime,
            self_contained=self_contained,
            single_file=single_file,
            output_dir=output_dir,
        )
        return run_command(
            argv,
            cwd=project_dir,
            cancel=cancel,
            poll_interval=self.settings.poll_interval,
        )
