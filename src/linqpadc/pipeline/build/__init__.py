"""Dependency installation and publish orchestration."""

from linqpadc.pipeline.build.dependencies import install_dependencies
from linqpadc.pipeline.build.exec import ExecResult, run_command
from linqpadc.pipeline.build.orchestrator import PUBLISH_PLANS, BuildOrchestrator, PublishPlan
from linqpadc.pipeline.build.toolchain import DotnetToolchain, Toolchain

__all__ = [
    "PUBLISH_PLANS",
    "BuildOrchestrator",
    "DotnetToolchain",
    "ExecResult",
    "PublishPlan",
    "Toolchain",
    "install_dependencies",
    "run_command",
]
