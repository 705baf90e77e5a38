"""LINQPad script header parsing."""

from linqpadc.pipeline.script.header import extract_header
from linqpadc.pipeline.script.metadata import parse_metadata
from linqpadc.pipeline.script.types import DEFAULT_IMPORTS, ScriptHeader, ScriptMetadata

__all__ = [
    "DEFAULT_IMPORTS",
    "ScriptHeader",
    "ScriptMetadata",
    "extract_header",
    "parse_metadata",
]
