"""Cancellable command runner for toolchain invocations."""

from __future__ import annotations

import logging
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path

from linqpadc.errors import CancelledError, UnexpectedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def diagnostics(self) -> str:
        """Combined captured output, stderr first."""
        return f"Process failed with exit code {self.returncode}\n{self.stderr}\n{self.stdout}".rstrip()


def run_command(
    argv: list[str],
    *,
    cwd: Path,
    cancel: threading.Event | None = None,
    poll_interval: float = 0.1,
) -> ExecResult:
    """Run command to completion and return structured result.

    Output is captured in full. While waiting, the cancellation event is
    polled every ``poll_interval`` seconds; when it fires the process is
    killed and reaped before CancelledError is raised.

    Raises:
        CancelledError: If cancelled before start or while running
        UnexpectedError: If the executable cannot be started
    """
    if cancel is not None and cancel.is_set():
        raise CancelledError()

    logger.debug("Running %s (cwd=%s)", " ".join(argv), cwd)
    try:
        proc = subprocess.Popen(
            argv,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise UnexpectedError(f"Could not start process {argv[0]}: {exc}") from exc

    with proc:
        try:
            stdout, stderr = _communicate(proc, cancel, poll_interval)
        except BaseException:
            proc.kill()
            raise

    result = ExecResult(
        argv=tuple(argv),
        cwd=cwd.resolve(),
        returncode=proc.returncode,
        stdout=stdout,
        stderr=stderr,
    )
    logger.debug("Process exited with %d: %s", result.returncode, " ".join(argv))
    return result


def _communicate(
    proc: subprocess.Popen[str],
    cancel: threading.Event | None,
    poll_interval: float,
) -> tuple[str, str]:
    if cancel is None:
        return proc.communicate()

    while True:
        try:
            return proc.communicate(timeout=poll_interval)
        except subprocess.TimeoutExpired:
            if cancel.is_set():
                logger.debug("Cancellation requested; killing pid %d", proc.pid)
                proc.kill()
                proc.communicate()
                raise CancelledError() from None
