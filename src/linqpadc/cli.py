"""linqpadc command line: compile LINQPad scripts to executable applications."""

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from linqpadc import __version__
from linqpadc.config import load_build_settings
from linqpadc.errors import FormatError, MetadataError, UnexpectedError
from linqpadc.pipeline import OutputType, compile_script, parse_script
from linqpadc.pipeline.types import BuildOutcome, BuildState
from linqpadc.ui import Reporter, Spinner, configure_logging, console

EXIT_CANCELLED = 130
LINQ_SUFFIX = ".linq"

cli = typer.Typer(
    name="linqpadc",
    help="Compile LINQPad scripts to executable applications",
    no_args_is_help=True,
)


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show linqpadc version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Compile LINQPad scripts to executable applications."""


def _validate_linq_file(path: Path) -> Path:
    if not path.exists():
        raise typer.BadParameter("The specified LINQ file does not exist.")
    if path.suffix.lower() != LINQ_SUFFIX:
        raise typer.BadParameter("File must be a .linq file.")
    return path


@contextmanager
def _cancel_on_interrupt() -> Iterator[threading.Event]:
    """Turn Ctrl-C into a cancellation signal for the duration of a run."""
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    def _handler(signum, frame):
        cancel.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGINT, previous)


@cli.command(name="compile")
def compile_cmd(
    linq_file: Path = typer.Option(
        ...,
        "--linq-file",
        "-f",
        help="Path to the LINQPad .linq file",
        callback=_validate_linq_file,
    ),
    output_dir: Path = typer.Option(
        ...,
        "--output-dir",
        "-o",
        help="Output directory for results",
    ),
    output_type: OutputType = typer.Option(
        OutputType.COMPILED_FOLDER,
        "--output-type",
        "-t",
        help="Output type for compilation",
    ),
    create: bool = typer.Option(
        False,
        "--create",
        "-c",
        help="Create the output directory if it does not exist",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Build settings file (defaults to ./linqpadc.toml when present)",
    ),
) -> None:
    """Compile a .linq script into a .NET project and, optionally, publish it."""
    reporter = Reporter(verbose=verbose)
    configure_logging(verbose)

    try:
        settings = load_build_settings(config)
    except RuntimeError as exc:
        reporter.error(str(exc))
        raise typer.Exit(1) from exc

    if not output_dir.exists():
        if not create:
            reporter.error("Output directory does not exist. Use --create to create it.")
            raise typer.Exit(1)
        reporter.detail(f"Creating output directory: {output_dir.resolve()}")
        output_dir.mkdir(parents=True, exist_ok=True)

    reporter.detail(f"Processing LINQ file: {linq_file.resolve()}")
    reporter.detail(f"Output directory: {output_dir.resolve()}")
    reporter.detail(f"Output type: {output_type.value}")

    with _cancel_on_interrupt() as cancel:
        outcome = Spinner(f"Compiling {linq_file.name}").run(
            lambda: compile_script(
                linq_file,
                output_dir,
                output_type,
                settings=settings,
                cancel=cancel,
            )
        )

    raise typer.Exit(_report_outcome(outcome, reporter, output_dir))


def _report_outcome(outcome: BuildOutcome, reporter: Reporter, output_dir: Path) -> int:
    if outcome.cancelled:
        reporter.warning("Operation was cancelled")
        return EXIT_CANCELLED

    if not outcome.success:
        error = outcome.error
        if isinstance(error, (FormatError, MetadataError)):
            reporter.error(f"Failed to parse LINQ script: {error}")
        elif isinstance(error, UnexpectedError):
            reporter.error(f"Unexpected error: {error}")
        else:
            reporter.error(f"Compilation failed: {error}")
        if outcome.diagnostics:
            reporter.error(outcome.diagnostics)
        return 1

    assert outcome.layout is not None
    reporter.info("Successfully parsed LINQPad script")
    reporter.info(f"Successfully generated source to {outcome.layout.source_dir}")
    if outcome.state is BuildState.SUCCEEDED:
        reporter.info(f"Successfully compiled script to {outcome.layout.output_dir}")
    reporter.success(f"Successfully compiled to: {output_dir.resolve()}")
    return 0


@cli.command(name="parse")
def parse_cmd(
    linq_file: Path = typer.Argument(
        ...,
        help="Path to the LINQPad .linq file",
        callback=_validate_linq_file,
    ),
) -> None:
    """Show parsed metadata and the transformed program without writing anything."""
    reporter = Reporter()
    try:
        script = linq_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        reporter.error(f"Unexpected error: {exc}")
        raise typer.Exit(1) from exc

    outcome = parse_script(script)
    if not outcome.success:
        reporter.error(f"Failed to parse LINQ script: {outcome.error}")
        raise typer.Exit(1)

    assert outcome.metadata is not None and outcome.code is not None
    metadata = outcome.metadata
    console.print(f"[bold]Kind:[/bold] {metadata.kind}")
    console.print(f"[bold]NuGet references:[/bold] {', '.join(metadata.dependencies) or 'none'}")
    console.print(f"[bold]Namespaces:[/bold] {len(metadata.imports)}")
    for name in metadata.sorted_imports():
        console.print(f"  {name}", markup=False, highlight=False)
    console.print()
    typer.echo(outcome.code)


@cli.command(name="version")
def version_cmd() -> None:
    """Print the linqpadc version."""
    typer.echo(__version__)


if __name__ == "__main__":
    cli()
