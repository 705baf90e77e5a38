"""Typed failures raised by the compilation pipeline."""

from __future__ import annotations


class CompileError(RuntimeError):
    """Base class for every terminal pipeline failure."""

    stage = "compile"


class FormatError(CompileError):
    """Raised when the <Query> header boundaries cannot be located."""

    stage = "header"


class MetadataError(CompileError):
    """Raised when the header markup is malformed."""

    stage = "metadata"


class UnsupportedKindError(CompileError):
    """Raised when the script declares a kind other than Program."""

    stage = "metadata"

    def __init__(self, kind: str):
        super().__init__(
            f"The LINQPad compiler only supports 'C# Program' type compilations. Found: {kind}"
        )
        self.kind = kind


class DependencyInstallError(CompileError):
    """Raised when ``dotnet add package`` fails for one dependency."""

    stage = "dependencies"

    def __init__(self, dependency: str, diagnostics: str):
        super().__init__(f"Failed to add NuGet package {dependency}")
        self.dependency = dependency
        self.diagnostics = diagnostics


class BuildError(CompileError):
    """Raised when the publish step exits non-zero."""

    stage = "build"

    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(message)
        self.diagnostics = diagnostics


class CancelledError(CompileError):
    """Raised when the cancellation signal fires mid-flight."""

    stage = "cancelled"

    def __init__(self, message: str = "Operation was cancelled"):
        super().__init__(message)


class UnexpectedError(CompileError):
    """Catch-all for I/O and other unanticipated failures."""

    stage = "unexpected"
