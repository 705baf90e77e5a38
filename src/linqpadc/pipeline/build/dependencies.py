"""Sequential NuGet package installation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from pathlib import Path

from linqpadc.errors import DependencyInstallError
from linqpadc.pipeline.build.toolchain import Toolchain
from linqpadc.pipeline.scaffold.layout import check_cancelled
from linqpadc.pipeline.script.metadata import dedupe_case_insensitive

logger = logging.getLogger(__name__)


def install_dependencies(
    toolchain: Toolchain,
    project_dir: Path,
    dependencies: Sequence[str],
    *,
    versions: Mapping[str, str] | None = None,
    cancel: threading.Event | None = None,
) -> list[str]:
    """Add each package to the project, one at a time, in declaration order.

    Stops at the first failure. Packages added before it stay in the project.

    Returns:
        Packages that were added

    Raises:
        DependencyInstallError: Naming the first package that failed
        CancelledError: If cancelled before or during an install
    """
    versions = versions or {}
    installed: list[str] = []
    for package in dedupe_case_insensitive(dependencies):
        check_cancelled(cancel)
        version = versions.get(package.casefold())
        logger.debug("Adding NuGet package: %s%s", package, f" ({version})" if version else "")
        result = toolchain.add_package(project_dir, package, version=version, cancel=cancel)
        if result.returncode != 0:
            logger.debug("dotnet add package %s exited with %d", package, result.returncode)
            raise DependencyInstallError(package, result.diagnostics())
        installed.append(package)
    return installed
