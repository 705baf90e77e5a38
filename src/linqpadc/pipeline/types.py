"""Pipeline result types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linqpadc.errors import CompileError
    from linqpadc.pipeline.scaffold.layout import ProjectLayout
    from linqpadc.pipeline.script.types import ScriptMetadata


class OutputType(str, Enum):
    """Artifact shape requested by the caller."""

    SOURCE_ONLY = "source"
    SINGLE_FILE_ARTIFACT = "single-file"
    COMPILED_FOLDER = "folder"


class BuildState(str, Enum):
    """Build orchestration states."""

    SCAFFOLDED = "scaffolded"
    DONE = "done"
    BUILDING = "building"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in (BuildState.DONE, BuildState.SUCCEEDED, BuildState.FAILED, BuildState.CANCELLED)


TRANSITIONS: dict[BuildState, frozenset[BuildState]] = {
    BuildState.SCAFFOLDED: frozenset({BuildState.DONE, BuildState.BUILDING, BuildState.CANCELLED}),
    BuildState.BUILDING: frozenset({BuildState.SUCCEEDED, BuildState.FAILED, BuildState.CANCELLED}),
}


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parsing and transforming a script; never partially filled."""

    success: bool
    metadata: ScriptMetadata | None = None
    code: str | None = None
    error: CompileError | None = None

    @classmethod
    def ok(cls, metadata: ScriptMetadata, code: str) -> ParseOutcome:
        return cls(success=True, metadata=metadata, code=code)

    @classmethod
    def failure(cls, error: CompileError) -> ParseOutcome:
        return cls(success=False, error=error)


@dataclass(frozen=True)
class BuildOutcome:
    """Result of one compile invocation."""

    success: bool
    state: BuildState
    diagnostics: str | None = None
    error: CompileError | None = None
    layout: ProjectLayout | None = None

    @property
    def cancelled(self) -> bool:
        return self.state is BuildState.CANCELLED

    @classmethod
    def ok(cls, state: BuildState, layout: ProjectLayout) -> BuildOutcome:
        return cls(success=True, state=state, layout=layout)

    @classmethod
    def failure(
        cls,
        error: CompileError,
        *,
        state: BuildState = BuildState.FAILED,
        layout: ProjectLayout | None = None,
    ) -> BuildOutcome:
        return cls(
            success=False,
            state=state,
            diagnostics=getattr(error, "diagnostics", None) or None,
            error=error,
            layout=layout,
        )
