"""Types for parsed LINQPad scripts."""

from __future__ import annotations

from dataclasses import dataclass

PROGRAM_KIND = "Program"

DEFAULT_IMPORTS: frozenset[str] = frozenset(
    {
        "System",
        "System.Collections",
        "System.Collections.Generic",
        "System.Data",
        "System.Diagnostics",
        "System.IO",
        "System.Linq",
        "System.Linq.Expressions",
        "System.Reflection",
        "System.Text",
        "System.Text.RegularExpressions",
        "System.Threading",
        "System.Threading.Tasks",
        "System.Transactions",
        "System.Xml",
        "System.Xml.Linq",
        "System.Xml.XPath",
    }
)


@dataclass(frozen=True)
class ScriptHeader:
    """Raw split of a script into its <Query> header and program body."""

    header: str
    body: str


@dataclass(frozen=True)
class ScriptMetadata:
    """Deserialized <Query> header.

    ``dependency_versions`` holds ``(casefolded id, version)`` pairs for the
    packages that pin a version.
    """

    kind: str = PROGRAM_KIND
    dependencies: tuple[str, ...] = ()
    imports: frozenset[str] = DEFAULT_IMPORTS
    dependency_versions: tuple[tuple[str, str], ...] = ()

    def sorted_imports(self) -> list[str]:
        """Imports in emission order."""
        return sorted(self.imports)

    def version_for(self, dependency: str) -> str | None:
        return dict(self.dependency_versions).get(dependency.casefold())
