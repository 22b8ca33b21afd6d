"""Foldable HTML rendering of a heading tree."""

from __future__ import annotations

import html
import re
from collections.abc import Sequence

from .config import TocOptions
from .formatting import format_heading
from .models import FilteredHeading, TreeNode

WIKILINK_PATTERN = re.compile(r"\[\[#(?P<target>[^\]|]+)(?:\|(?P<display>[^\]]+))?\]\]")


def escape_html(text: str) -> str:
    """Escape the characters that are significant in HTML text and attributes."""
    return html.escape(text, quote=True)


def wikilink_to_html(text: str) -> str:
    """Convert same-document wikilinks in a formatted label into anchors.

    Text around the links is escaped as well, since the result is embedded
    as raw markup.

    Args:
        text: Formatted label, possibly containing ``[[#target|display]]`` or
            ``[[#target]]``.

    Returns:
        str: HTML fragment.

    Examples:
        wikilink_to_html("[[#A & B|A and B]]")
        # '<a class="internal-link" data-href="#A &amp; B">A and B</a>'
    """
    parts: list[str] = []
    offset = 0
    for match in WIKILINK_PATTERN.finditer(text):
        parts.append(escape_html(text[offset : match.start()]))
        target = match.group("target")
        display = match.group("display") or target
        parts.append(
            f'<a class="internal-link" data-href="#{escape_html(target)}">'
            f"{escape_html(display)}</a>"
        )
        offset = match.end()
    parts.append(escape_html(text[offset:]))
    return "".join(parts)


def build_tree(filtered: Sequence[FilteredHeading], options: TocOptions) -> list[TreeNode]:
    """Rebuild the heading hierarchy encoded by normalized depths.

    Args:
        filtered: Output of `filter_headings`.
        options: Options used to format each label.

    Returns:
        list[TreeNode]: Root nodes, in document order.

    Examples:
        build_tree(filter_headings(headings, options), options)
    """
    roots: list[TreeNode] = []
    stack: list[tuple[TreeNode, int]] = []

    for item in filtered:
        node = TreeNode(text=format_heading(item.heading.text, options))

        # The nearest open node with a smaller depth is the parent.
        while stack and stack[-1][1] >= item.depth:
            stack.pop()

        if stack:
            stack[-1][0].children.append(node)
        else:
            roots.append(node)
        stack.append((node, item.depth))

    return roots


def render_forest(nodes: Sequence[TreeNode], is_ordered: bool) -> str:
    """Render tree nodes as nested lists with collapsible sections.

    Nodes with children become an expanded ``<details>`` element whose
    summary is the label; leaves become plain list items. The same list tag
    is used at every level.

    Args:
        nodes: Sibling nodes to render.
        is_ordered: Use ``<ol>`` instead of ``<ul>``.

    Returns:
        str: HTML fragment containing one list element.

    Examples:
        render_forest([TreeNode("Intro")], is_ordered=False)  # "<ul><li>Intro</li></ul>"
    """
    tag = "ol" if is_ordered else "ul"
    items: list[str] = []
    for node in nodes:
        label = wikilink_to_html(node.text)
        if node.children:
            items.append(
                f"<li><details open><summary>{label}</summary>"
                f"{render_forest(node.children, is_ordered)}</details></li>"
            )
        else:
            items.append(f"<li>{label}</li>")
    return f"<{tag}>{''.join(items)}</{tag}>"
