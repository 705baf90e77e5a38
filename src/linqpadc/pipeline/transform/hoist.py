"""Hoist nested type declarations out to their enclosing namespace scope."""

from __future__ import annotations

import logging
import textwrap

from linqpadc.pipeline.transform.syntax import (
    NODE_NAMESPACE,
    NODE_TYPE,
    Node,
    parse_declarations,
)

logger = logging.getLogger(__name__)

DEFAULT_INDENT = "    "


def hoist_nested_types(source: str) -> str:
    """Move every type declared inside another type up to namespace level.

    Nested types (at any depth) are detached from their parents and appended,
    in document order, after the last member of the nearest enclosing
    namespace, or of the outermost scope when no namespace wraps them. Source
    without nested types is returned unchanged. If anything goes wrong while
    parsing or rendering (unbalanced braces, an unterminated literal, nesting
    too deep to recurse through), the source is also returned unchanged.
    """
    try:
        return _hoist(source)
    except Exception as exc:
        logger.debug("Skipping nested type hoisting: %s: %s", type(exc).__name__, exc)
        return source


def _hoist(source: str) -> str:
    tree = parse_declarations(source)
    renderer = _Renderer(source)
    hoisted = renderer.collect_scope(tree.members)
    if not renderer.changed:
        return source

    rendered = "".join(renderer.render(member) for member in tree.members)
    rendered += source[tree.members[-1].end:]
    if not hoisted:
        return rendered
    return f"{rendered.rstrip()}\n\n" + "\n\n".join(hoisted) + "\n"


class _Renderer:
    def __init__(self, source: str):
        self.source = source
        self.removed: set[int] = set()
        self.appended: dict[int, list[str]] = {}
        self.changed = False

    def collect_scope(self, members: list[Node]) -> list[str]:
        """Detach nested types below one namespace scope; return them rendered."""
        detached: list[Node] = []
        for member in members:
            if member.kind == NODE_NAMESPACE and member.is_container:
                extracted = self.collect_scope(member.members)
                if extracted:
                    self.appended[id(member)] = extracted
            elif member.kind == NODE_TYPE:
                detached.extend(self._detach_nested(member))
        return [self._standalone(node) for node in detached]

    def _detach_nested(self, node: Node) -> list[Node]:
        found: list[Node] = []
        for member in node.members:
            if member.kind == NODE_TYPE:
                self.removed.add(id(member))
                self.changed = True
                found.append(member)
                found.extend(self._detach_nested(member))
        return found

    def render(self, node: Node) -> str:
        leading = self.source[node.leading_start:node.start]
        return leading + self._render_body(node)

    def _render_body(self, node: Node) -> str:
        if not node.is_container:
            return self.source[node.start:node.end]

        head = self.source[node.start:node.open_end]
        last_end = node.members[-1].end if node.members else node.open_end
        inner = "".join(
            self.render(member) for member in node.members if id(member) not in self.removed
        )
        closing_gap = self.source[last_end:node.close_start]
        tail = self.source[node.close_start:node.end]

        extra = self.appended.get(id(node))
        if extra:
            indent = _member_indent(self.source, node)
            block = "\n\n".join(textwrap.indent(text, indent) for text in extra)
            closing_indent = closing_gap.rsplit("\n", 1)[-1] if "\n" in closing_gap else ""
            if not closing_indent.isspace():
                closing_indent = ""
            return f"{head}{inner.rstrip()}\n\n{block}\n{closing_indent}{tail}"
        return f"{head}{inner}{closing_gap}{tail}"

    def _standalone(self, node: Node) -> str:
        """Render a detached node flush-left, keeping its leading comments."""
        leading = self.source[node.leading_start:node.start]
        lines = leading.split("\n")
        kept = [line for line in lines[:-1] if line.strip()] + [lines[-1]]
        return textwrap.dedent("\n".join(kept) + self._render_body(node)).strip("\n")


def _member_indent(source: str, node: Node) -> str:
    for member in node.members:
        line_start = source.rfind("\n", 0, member.start) + 1
        prefix = source[line_start:member.start]
        if prefix and prefix.isspace():
            return prefix
    return DEFAULT_INDENT
