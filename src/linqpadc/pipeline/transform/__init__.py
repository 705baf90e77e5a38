"""Source rewriting for LINQPad program bodies."""

from linqpadc.pipeline.transform.entrypoint import make_main_static
from linqpadc.pipeline.transform.hoist import hoist_nested_types
from linqpadc.pipeline.transform.transformer import transform_body, wrap_in_program_class

__all__ = [
    "hoist_nested_types",
    "make_main_static",
    "transform_body",
    "wrap_in_program_class",
]
