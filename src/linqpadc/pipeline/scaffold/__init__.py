"""Project scaffolding for compiled scripts."""

from linqpadc.pipeline.scaffold.layout import (
    ProjectLayout,
    prepare_directories,
    resolve_layout,
    sanitize_name,
)
from linqpadc.pipeline.scaffold.project import render_program, render_project, write_project

__all__ = [
    "ProjectLayout",
    "prepare_directories",
    "render_program",
    "render_project",
    "resolve_layout",
    "sanitize_name",
    "write_project",
]
