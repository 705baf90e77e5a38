"""Pick and run the publish strategy for an output type."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from linqpadc.config import BuildSettings
from linqpadc.errors import BuildError
from linqpadc.pipeline.build.toolchain import Toolchain
from linqpadc.pipeline.scaffold.layout import ProjectLayout, check_cancelled
from linqpadc.pipeline.types import TRANSITIONS, BuildState, OutputType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishPlan:
    """Publish flags for one artifact shape."""

    self_contained: bool
    single_file: bool


PUBLISH_PLANS: dict[OutputType, PublishPlan] = {
    OutputType.SINGLE_FILE_ARTIFACT: PublishPlan(self_contained=True, single_file=True),
    OutputType.COMPILED_FOLDER: PublishPlan(self_contained=False, single_file=False),
}


class BuildOrchestrator:
    """State machine driving one build: Scaffolded -> Done | Building -> Succeeded | Failed."""

    def __init__(self, toolchain: Toolchain, settings: BuildSettings):
        self.toolchain = toolchain
        self.settings = settings
        self.state = BuildState.SCAFFOLDED

    def _transition(self, target: BuildState) -> None:
        allowed = TRANSITIONS.get(self.state, frozenset())
        if target not in allowed:
            raise RuntimeError(f"invalid build transition {self.state.value} -> {target.value}")
        logger.debug("Build state %s -> %s", self.state.value, target.value)
        self.state = target

    def run(
        self,
        layout: ProjectLayout,
        output_type: OutputType,
        cancel: threading.Event | None = None,
    ) -> BuildState:
        """Run the strategy for output_type and return the terminal state.

        Raises:
            BuildError: If publish exits non-zero
            CancelledError: If cancelled before or during publish
        """
        plan = PUBLISH_PLANS.get(output_type)
        if plan is None:
            self._transition(BuildState.DONE)
            return self.state

        check_cancelled(cancel)
        self._transition(BuildState.BUILDING)
        try:
            result = self.toolchain.publish(
                layout.source_dir,
                runtime=self.settings.runtime_identifier,
                self_contained=plan.self_contained,
                single_file=plan.single_file,
                output_dir=layout.output_dir,
                cancel=cancel,
            )
        except BaseException:
            cancelled = cancel is not None and cancel.is_set()
            self._transition(BuildState.CANCELLED if cancelled else BuildState.FAILED)
            raise

        if result.returncode != 0:
            self._transition(BuildState.FAILED)
            raise BuildError("Build failed", result.diagnostics())

        self._transition(BuildState.SUCCEEDED)
        return self.state
