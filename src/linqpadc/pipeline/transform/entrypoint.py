"""Make the script's Main method static."""

from __future__ import annotations

import logging
import re

from linqpadc.pipeline.transform.lexer import LexError, mask_literals

logger = logging.getLogger(__name__)

_MODIFIERS = (
    "public", "private", "protected", "internal", "static", "unsafe", "new", "extern",
)

_re_main_signature = re.compile(
    r"(?<![\w.])"
    r"(?P<modifiers>(?:(?:" + "|".join(_MODIFIERS) + r")\s+)*)"
    r"(?P<shape>(?:async\s+)?(?:void|Task(?:\s*<\s*int\s*>)?))"
    r"\s+Main\s*\("
)


def make_main_static(source: str) -> str:
    """Insert ``static`` before the return type of every non-static Main.

    Accepted return shapes are ``void``, ``Task`` and ``Task<int>``, with or
    without ``async``. Comments and string literals are ignored when matching.
    Applying this twice gives the same result as applying it once.
    """
    try:
        searchable = mask_literals(source)
    except LexError as exc:
        # Unlexable text still gets the plain pattern match.
        logger.debug("Matching Main on raw text: %s", exc)
        searchable = source

    insertions: list[int] = []
    for match in _re_main_signature.finditer(searchable):
        if re.search(r"\bstatic\b", match.group("modifiers")):
            continue
        insertions.append(match.start("shape"))

    if not insertions:
        return source

    logger.debug("Marking %d Main declaration(s) static", len(insertions))
    for offset in reversed(insertions):
        source = f"{source[:offset]}static {source[offset:]}"
    return source
