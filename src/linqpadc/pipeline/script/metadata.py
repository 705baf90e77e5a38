"""Deserialize the <Query> header into ScriptMetadata."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable

from linqpadc.errors import MetadataError, UnsupportedKindError
from linqpadc.pipeline.script.types import DEFAULT_IMPORTS, PROGRAM_KIND, ScriptMetadata

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "Query"
KIND_ATTRIBUTE = "Kind"
DEPENDENCY_ELEMENT = "NuGetReference"
IMPORT_ELEMENT = "Namespace"
VERSION_ATTRIBUTE = "Version"


def parse_metadata(header: str) -> ScriptMetadata:
    """Parse and validate a <Query> header.

    Raises:
        MetadataError: If the markup is malformed or the root is not <Query>
        UnsupportedKindError: If Kind is anything other than Program
    """
    try:
        root = ET.fromstring(header)
    except ET.ParseError as exc:
        raise MetadataError(
            f"The LINQPad script format and/or contents are not supported: {exc}"
        ) from exc

    if root.tag != ROOT_ELEMENT:
        raise MetadataError(
            f"The LINQPad script format and/or contents are not supported: "
            f"expected <{ROOT_ELEMENT}> root element, found <{root.tag}>"
        )

    kind = root.get(KIND_ATTRIBUTE, PROGRAM_KIND)
    if kind.casefold() != PROGRAM_KIND.casefold():
        raise UnsupportedKindError(kind)

    dependencies: list[str] = []
    versions: dict[str, str] = {}
    for element in root.findall(DEPENDENCY_ELEMENT):
        name = (element.text or "").strip()
        if not name:
            continue
        # Only the first declaration of a package may pin its version.
        if all(name.casefold() != seen.casefold() for seen in dependencies):
            version = (element.get(VERSION_ATTRIBUTE) or "").strip()
            if version:
                versions[name.casefold()] = version
        dependencies.append(name)

    declared_imports = [
        (element.text or "").strip() for element in root.findall(IMPORT_ELEMENT)
    ]

    metadata = ScriptMetadata(
        kind=kind,
        dependencies=tuple(dedupe_case_insensitive(dependencies)),
        imports=resolve_imports(declared_imports),
        dependency_versions=tuple(versions.items()),
    )

    logger.debug("Parsed query kind: %s", metadata.kind)
    logger.debug("Found %d NuGet references", len(metadata.dependencies))
    logger.debug("Found %d namespaces", len(declared_imports))
    return metadata


def dedupe_case_insensitive(values: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping first-seen casing and order."""
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        key = value.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(value)
    return unique


def resolve_imports(declared: Iterable[str]) -> frozenset[str]:
    """Union declared namespaces with the defaults, case-insensitively."""
    merged = {name.casefold(): name for name in DEFAULT_IMPORTS}
    for name in declared:
        if name:
            merged.setdefault(name.casefold(), name)
    return frozenset(merged.values())
