"""Cleanup of generated answers down to the markup the app renders.

The app renders only ``• `` bullets and ``**bold**``. Each step below is a
pure ``str -> str`` function; ``sanitize`` runs them in ``PIPELINE`` order.
"""

from __future__ import annotations

import re
from collections.abc import Callable

BULLET = "• "

_HEADING_RE = re.compile(r"^[ \t]*#{1,6}[ \t]+", re.MULTILINE)
_TRIPLE_EMPHASIS_RE = re.compile(r"\*\*\*(.+?)\*\*\*")
# Optional language tag only counts when the fence line ends right after it.
_CODE_FENCE_RE = re.compile(r"```(?:[\w+.-]*[ \t]*\n)?(.*?)```", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`([^`\n]*)`")
_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]*\)")
_BLANK_LINES_RE = re.compile(r"\n(?:[ \t]*\n){2,}")
_BULLET_RE = re.compile(r"^([ \t]*)[-*•][ \t]+", re.MULTILINE)


def strip_headings(text: str) -> str:
    return _HEADING_RE.sub("", text)


def collapse_emphasis(text: str) -> str:
    return _TRIPLE_EMPHASIS_RE.sub(r"**\1**", text)


def strip_code(text: str) -> str:
    text = _CODE_FENCE_RE.sub(lambda m: m.group(1).strip("\n"), text)
    text = _INLINE_CODE_RE.sub(r"\1", text)
    # Unbalanced leftovers
    return text.replace("`", "")


def strip_links(text: str) -> str:
    return _LINK_RE.sub(r"\1", text)


def collapse_blank_lines(text: str) -> str:
    return _BLANK_LINES_RE.sub("\n\n", text)


def normalize_bullets(text: str) -> str:
    return _BULLET_RE.sub(lambda m: m.group(1) + BULLET, text)


PIPELINE: tuple[Callable[[str], str], ...] = (
    strip_headings,
    collapse_emphasis,
    strip_code,
    strip_links,
    collapse_blank_lines,
    normalize_bullets,
)


def sanitize(text: str) -> str:
    for step in PIPELINE:
        text = step(text)
    return text.strip()
