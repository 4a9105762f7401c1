"""
HTML to Markdown converter.

Incident reports and comments come from the status API as a small,
fixed subset of HTML. This module turns them into lightweight markup
using a handful of ordered regex passes:

  1. <img src="..."> -> ![IMG](...)
  2. <a href="...">label</a> -> [label](...)
  3. opening / void tags (i, b, strong, pre, code, ol, ul, li, br, p)
  4. closing tags
  5. HTML entities

Anything outside that vocabulary is passed through as-is.
"""

from __future__ import annotations

import html
import re

_IMG_TAG_RE = re.compile(r'<img src="([^"]+)"[^>]*>')
_LINK_TAG_RE = re.compile(r'<a href="([^"]+)"[^>]*>([^<]+)</a>')
_TAG_START_RE = re.compile(r"<(strong|pre|code|ol|ul|li|br|i|b|p)[^>]*/?>(?:\Z|\n)?")
_TAG_END_RE = re.compile(r"</(strong|pre|code|ol|ul|li|i|b|p)/?>")

_BULLET = "• "

# Symmetric markers shared by opening and closing tags
_MARKERS = {
    "i": "*",
    "b": "**",
    "strong": "**",
    "pre": "`",
    "code": "```",
}


class _ListState:
    """Tracks which kind of list the next <li> belongs to."""

    NONE = "none"
    UNORDERED = "unordered"
    ORDERED = "ordered"

    def __init__(self) -> None:
        self.mode = self.NONE
        self.next_index = 0

    def start_ordered(self) -> None:
        self.mode = self.ORDERED
        self.next_index = 1

    def start_unordered(self) -> None:
        self.mode = self.UNORDERED
        self.next_index = 0

    def item_prefix(self) -> str:
        if self.mode != self.ORDERED:
            return _BULLET
        prefix = f"{self.next_index}. "
        self.next_index += 1
        return prefix


def _replace_image(match: re.Match[str]) -> str:
    return f"![IMG]({match.group(1)})"


def _replace_link(match: re.Match[str]) -> str:
    return f"[{match.group(2)}]({match.group(1)})"


def _replace_end_tag(match: re.Match[str]) -> str:
    return _MARKERS.get(match.group(1), "")


def html_to_markdown(text: str) -> str:
    """
    Convert a report/comment HTML fragment to Markdown.

    Never raises. Tags outside the supported set are left in place, and
    closing tags with no Markdown counterpart (e.g. ``</br>``) stay verbatim.

    Args:
        text: HTML fragment as returned by the API.

    Returns:
        The Markdown rendering with entities decoded.
    """
    if "<img" in text:
        text = _IMG_TAG_RE.sub(_replace_image, text)

    if "<a " in text:
        text = _LINK_TAG_RE.sub(_replace_link, text)

    lists = _ListState()

    def replace_start_tag(match: re.Match[str]) -> str:
        tag = match.group(1)
        if tag in _MARKERS:
            return _MARKERS[tag]
        if tag == "ol":
            lists.start_ordered()
        elif tag == "ul":
            lists.start_unordered()
        elif tag == "br":
            return "\n"
        elif tag == "li":
            return lists.item_prefix()
        return ""

    text = _TAG_START_RE.sub(replace_start_tag, text)
    text = _TAG_END_RE.sub(_replace_end_tag, text)

    return html.unescape(text)
