"""Destination directory layout and lifecycle."""

from __future__ import annotations

import logging
import re
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path

from linqpadc.errors import CancelledError

logger = logging.getLogger(__name__)

_re_not_word = re.compile(r"[^\w]")

SOURCE_DIRNAME = "src"
OUTPUT_DIRNAME = "dist"


def sanitize_name(name: str) -> str:
    """Replace every non-word character with an underscore."""
    return _re_not_word.sub("_", name)


@dataclass(frozen=True)
class ProjectLayout:
    """Deterministic source/output directories for one script."""

    name: str
    source_dir: Path
    output_dir: Path

    @property
    def project_file(self) -> Path:
        return self.source_dir / f"{self.name}.csproj"

    @property
    def program_file(self) -> Path:
        return self.source_dir / "Program.cs"


def resolve_layout(output_root: Path, script_name: str) -> ProjectLayout:
    """Build the layout for a script under the destination root."""
    name = sanitize_name(script_name)
    root = output_root.resolve()
    return ProjectLayout(
        name=name,
        source_dir=root / SOURCE_DIRNAME / name,
        output_dir=root / OUTPUT_DIRNAME / name,
    )


def prepare_directories(layout: ProjectLayout, cancel: threading.Event | None = None) -> None:
    """Delete (if present) and recreate both directories.

    Not transactional: an interrupted run is repaired by the next call,
    which resets unconditionally.

    Raises:
        CancelledError: If the cancellation signal is set between steps
    """
    for directory, label in ((layout.source_dir, "source"), (layout.output_dir, "distribution")):
        check_cancelled(cancel)
        if directory.exists():
            logger.debug("Cleaning existing %s directory: %s", label, directory)
            shutil.rmtree(directory)

    for directory in (layout.source_dir, layout.output_dir):
        check_cancelled(cancel)
        directory.mkdir(parents=True, exist_ok=True)


def check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise CancelledError()
