"""Split a .linq script into its <Query> header and program body."""

from __future__ import annotations

from linqpadc.errors import FormatError
from linqpadc.pipeline.script.types import ScriptHeader

QUERY_START_TAG = "<Query"
QUERY_END_TAG = "</Query>"
QUERY_SELF_CLOSING_TAG = "/>"


def extract_header(script: str) -> ScriptHeader:
    """Locate the <Query> header and return it with the trimmed body.

    The header runs from the first ``<Query`` through whichever terminator
    comes first after it: the self-closing ``/>`` or ``</Query>``.

    Raises:
        FormatError: If the header start or both terminators are missing
    """
    xml_start = script.find(QUERY_START_TAG)
    if xml_start == -1:
        raise FormatError(
            "The LINQPad script format is not supported (missing <Query> header)."
        )

    self_closing_end = script.find(QUERY_SELF_CLOSING_TAG, xml_start)
    closing_end = script.find(QUERY_END_TAG, xml_start)

    if self_closing_end != -1 and (closing_end == -1 or self_closing_end < closing_end):
        xml_end = self_closing_end + len(QUERY_SELF_CLOSING_TAG)
    elif closing_end != -1:
        xml_end = closing_end + len(QUERY_END_TAG)
    else:
        raise FormatError(
            "The LINQPad script format is not supported (missing Query closing tag)."
        )

    return ScriptHeader(header=script[xml_start:xml_end], body=script[xml_end:].lstrip())
