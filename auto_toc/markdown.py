"""Markdown table of contents rendering."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .config import TocOptions
from .constants import INLINE_SEPARATOR, NO_HEADINGS_MESSAGE
from .formatting import format_heading
from .headings import filter_headings, is_heading_allowed, resolve_min_level
from .models import Heading, TocStyle


def render_markdown(headings: Sequence[Heading], options: TocOptions) -> str:
    """Render headings as a markdown table of contents.

    Args:
        headings: All headings of the document, in document order.
        options: Normalized rendering options.

    Returns:
        str: Title followed by the list. When no heading qualifies, an empty
            string if `hide_when_empty` is set, otherwise the title followed by
            an italic "no headings found" notice.

    Examples:
        render_markdown([Heading("Intro", 1), Heading("Setup", 2)], TocOptions())
        # "- [[#Intro]]\\n\\t- [[#Setup]]"
    """
    title = ""
    if options.title:
        separator = " " if options.style is TocStyle.INLINE_FIRST_LEVEL else "\n"
        title = f"{options.title}{separator}"

    body = STYLE_HANDLERS[options.style](headings, options)
    if body is None:
        if options.hide_when_empty:
            return ""
        return f"{title}_{NO_HEADINGS_MESSAGE}_"
    return title + body


def _render_nested_list(headings: Sequence[Heading], options: TocOptions) -> str | None:
    return _render_list(headings, options, ordered=False)


def _render_nested_ordered_list(headings: Sequence[Heading], options: TocOptions) -> str | None:
    return _render_list(headings, options, ordered=True)


def _render_list(headings: Sequence[Heading], options: TocOptions, ordered: bool) -> str | None:
    marker = "1." if ordered else "-"
    lines = [
        f"{options.indent_chars * item.depth}{marker} {format_heading(item.heading.text, options)}"
        for item in filter_headings(headings, options)
    ]
    return "\n".join(lines) if lines else None


def _render_inline_first_level(headings: Sequence[Heading], options: TocOptions) -> str | None:
    # Flat style: headings are tested one by one, exclusions never cascade.
    min_level = resolve_min_level(headings, options)
    items = [
        format_heading(heading.text, options)
        for heading in headings
        if heading.level == min_level
        and heading.text.strip()
        and is_heading_allowed(heading.text, options)
    ]
    return INLINE_SEPARATOR.join(items) if items else None


STYLE_HANDLERS: dict[TocStyle, Callable[[Sequence[Heading], TocOptions], str | None]] = {
    TocStyle.NESTED_LIST: _render_nested_list,
    TocStyle.NESTED_ORDERED_LIST: _render_nested_ordered_list,
    TocStyle.INLINE_FIRST_LEVEL: _render_inline_first_level,
}
