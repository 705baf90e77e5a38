"""LINQPad script compilation pipeline."""

from linqpadc.pipeline.compiler import compile_script, parse_script
from linqpadc.pipeline.types import BuildOutcome, BuildState, OutputType, ParseOutcome

__all__ = [
    "BuildOutcome",
    "BuildState",
    "OutputType",
    "ParseOutcome",
    "compile_script",
    "parse_script",
]
