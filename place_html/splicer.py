"""
Marker-delimited splicing of HTML into script files.

The placed block is a self-contained JavaScript snippet wrapped in two
sentinel comments. Re-placing replaces everything between (and including)
the sentinels, so repeated runs never stack blocks.
"""

from datetime import datetime
from typing import Optional

OPENING_COMMENT = "/*! -- START OF PLACED HTML -- */"
CLOSING_COMMENT = "/*! -- END OF PLACED HTML -- */"

# Fixed so the header does not depend on LC_TIME.
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_timestamp(moment: datetime) -> str:
    """
    Format a timestamp the way it appears in placed blocks and messages,
    e.g. "05 Oct, 2024 at 14:03:59 (+0200)".
    """
    month = MONTHS[moment.month - 1]
    return f"{moment:%d} {month}, {moment:%Y} at {moment:%H:%M:%S} ({moment:%z})"


def render_block(html: str, source_name: str, tool_name: str, moment: datetime) -> str:
    """
    Build the block that gets placed into a script file.

    Args:
        html: Contents of the HTML file, inserted verbatim.
        source_name: File name of the HTML file, mentioned in the header.
        tool_name: Name of the program doing the placement.
        moment: Time of placement.

    Returns:
        The block, starting with the opening and ending with the closing
        comment, without a trailing newline.
    """
    lines = [
        OPENING_COMMENT,
        "/*",
        f"'{tool_name}' placed the below part by copying the html from `{source_name}`.",
        format_timestamp(moment),
        "*/",
        "const template = document.createElement('template');",
        "template.innerHTML = `",
        html,
        "`;",
        CLOSING_COMMENT,
    ]
    return "\n".join(lines)


def find_placed_span(script: str) -> Optional[tuple[int, int]]:
    """
    Locate a previously placed block.

    The block is the last opening comment that is followed by a closing
    comment, paired with the first closing comment after it. Stray markers
    elsewhere in the script are left alone, so a block appended after an
    unpaired marker is found again on the next run.

    Returns:
        ``(start, end)`` covering the opening comment through the end of
        the closing comment, or None when no such pair exists.
    """
    start = script.rfind(OPENING_COMMENT)
    while start >= 0:
        closing = script.find(CLOSING_COMMENT, start + len(OPENING_COMMENT))
        if closing >= 0:
            return start, closing + len(CLOSING_COMMENT)
        start = script.rfind(OPENING_COMMENT, 0, start)

    return None


def has_placed_block(script: str) -> bool:
    return find_placed_span(script) is not None


def splice(script: str, block: str) -> str:
    """
    Place ``block`` into ``script``.

    An existing block is replaced in place; otherwise the block is appended
    after a blank line.
    """
    span = find_placed_span(script)
    if span is None:
        return f"{script}\n\n{block}"

    start, end = span
    return script[:start] + block + script[end:]


def strip(script: str) -> str:
    """
    Remove a placed block, including the blank line that appending added.

    Scripts without a block are returned unchanged.
    """
    span = find_placed_span(script)
    if span is None:
        return script

    start, end = span
    head = script[:start]
    if head.endswith("\n\n"):
        head = head[:-2]
    return head + script[end:]
