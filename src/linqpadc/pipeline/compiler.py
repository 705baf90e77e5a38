"""End-to-end compilation of a LINQPad script."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from linqpadc.config import BuildSettings
from linqpadc.errors import CancelledError, CompileError, UnexpectedError
from linqpadc.pipeline.build.dependencies import install_dependencies
from linqpadc.pipeline.build.orchestrator import BuildOrchestrator
from linqpadc.pipeline.build.toolchain import DotnetToolchain, Toolchain
from linqpadc.pipeline.scaffold.layout import (
    ProjectLayout,
    check_cancelled,
    prepare_directories,
    resolve_layout,
)
from linqpadc.pipeline.scaffold.project import write_project
from linqpadc.pipeline.script.header import extract_header
from linqpadc.pipeline.script.metadata import parse_metadata
from linqpadc.pipeline.script.types import ScriptMetadata
from linqpadc.pipeline.transform.transformer import transform_body
from linqpadc.pipeline.types import BuildOutcome, BuildState, OutputType, ParseOutcome

logger = logging.getLogger(__name__)


def parse_script(script: str) -> ParseOutcome:
    """Extract, validate and transform a script without touching disk."""
    try:
        metadata, code = _parse(script)
    except CompileError as exc:
        return ParseOutcome.failure(exc)
    except Exception as exc:
        return ParseOutcome.failure(_unexpected("parsing", exc))
    return ParseOutcome.ok(metadata, code)


def _unexpected(during: str, exc: Exception) -> UnexpectedError:
    error = UnexpectedError(f"Unexpected error during {during}: {exc}")
    error.__cause__ = exc
    return error


def _parse(script: str) -> tuple[ScriptMetadata, str]:
    header = extract_header(script)
    metadata = parse_metadata(header.header)
    return metadata, transform_body(header.body)


def compile_script(
    script_path: Path,
    output_root: Path,
    output_type: OutputType,
    *,
    settings: BuildSettings | None = None,
    toolchain: Toolchain | None = None,
    cancel: threading.Event | None = None,
) -> BuildOutcome:
    """Compile a .linq file into ``<output_root>/src/<name>`` and ``dist/<name>``.

    Stages run strictly in order and stop at the first failure: parse,
    directory reset, scaffold, dependency install, build. Whatever the
    completed stages wrote stays on disk.

    Args:
        script_path: The .linq script
        output_root: Destination root holding src/ and dist/
        output_type: Which artifact shape to produce
        settings: Toolchain constants (defaults when omitted)
        toolchain: Toolchain adapter (dotnet CLI when omitted)
        cancel: Cancellation signal checked at every suspension point

    Returns:
        BuildOutcome carrying either the terminal state or the typed error
    """
    settings = settings or BuildSettings()
    toolchain = toolchain or DotnetToolchain(settings)
    layout: ProjectLayout | None = None

    try:
        check_cancelled(cancel)
        logger.debug("Processing LINQ file: %s", script_path)
        script = script_path.read_text(encoding="utf-8")

        metadata, code = _parse(script)
        logger.debug("Successfully parsed LINQPad script")

        layout = resolve_layout(output_root, script_path.stem)
        prepare_directories(layout, cancel)
        write_project(
            layout,
            imports=metadata.imports,
            code=code,
            settings=settings,
        )
        install_dependencies(
            toolchain,
            layout.source_dir,
            metadata.dependencies,
            versions=dict(metadata.dependency_versions),
            cancel=cancel,
        )
        logger.debug("Successfully generated source to %s", layout.source_dir)

        state = BuildOrchestrator(toolchain, settings).run(layout, output_type, cancel)
        if state is BuildState.SUCCEEDED:
            logger.debug("Successfully compiled script to %s", layout.output_dir)
        return BuildOutcome.ok(state, layout)
    except CancelledError as exc:
        logger.debug("Compilation cancelled")
        return BuildOutcome.failure(exc, state=BuildState.CANCELLED, layout=layout)
    except CompileError as exc:
        return BuildOutcome.failure(exc, layout=layout)
    except Exception as exc:
        logger.debug("Unexpected %s during compilation", type(exc).__name__, exc_info=True)
        return BuildOutcome.failure(_unexpected("compilation", exc), layout=layout)
