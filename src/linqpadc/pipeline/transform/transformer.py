"""Rewrite a script body into a standalone program."""

from __future__ import annotations

from linqpadc.pipeline.transform.entrypoint import make_main_static
from linqpadc.pipeline.transform.hoist import hoist_nested_types

PROGRAM_CLASS = "Program"


def wrap_in_program_class(source: str) -> str:
    """Embed source verbatim as the member list of ``public class Program``."""
    if source and not source.endswith("\n"):
        source = f"{source}\n"
    return f"public class {PROGRAM_CLASS}\n{{\n{source}}}\n"


def transform_body(body: str) -> str:
    """Staticize Main, wrap in the Program class, then hoist nested types.

    Hoisting runs on the wrapped text, so the script's own type declarations
    (and everything nested in them) end up beside ``Program`` at namespace
    level instead of inside it.
    """
    return hoist_nested_types(wrap_in_program_class(make_main_static(body)))
