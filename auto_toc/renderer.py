"""Render entry points for a table of contents."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .config import ConfigError, TocOptions, parse_options_text
from .constants import NO_HEADINGS_MESSAGE, RENDER_ERROR_TEMPLATE
from .foldable import build_tree, render_forest
from .headings import filter_headings
from .markdown import render_markdown
from .models import Heading, OutputKind, RenderedToc, TocStyle

logger = logging.getLogger(__name__)


def render_toc(headings: Sequence[Heading], options: TocOptions) -> RenderedToc:
    """Render a table of contents for one document.

    The foldable HTML path is used when `options.foldable` is set and the
    style is not inline; every other combination renders markdown.

    Args:
        headings: All headings of the document, in document order.
        options: Normalized and validated options.

    Returns:
        RenderedToc: Markdown, or an HTML fragment with the title kept apart.

    Examples:
        render_toc(result.headings, TocOptions(foldable=True)).content
    """
    if options.debug_in_console:
        logger.debug("Options: %r", options)
        logger.debug("Headings: %r", list(headings))

    if options.foldable and options.style is not TocStyle.INLINE_FIRST_LEVEL:
        filtered = filter_headings(headings, options)
        if options.debug_in_console:
            logger.debug("Filtered headings: %r", filtered)

        if not filtered:
            if options.hide_when_empty:
                return RenderedToc(OutputKind.HTML, "")
            return RenderedToc(OutputKind.HTML, f"<em>{NO_HEADINGS_MESSAGE}</em>", options.title)

        is_ordered = options.style is TocStyle.NESTED_ORDERED_LIST
        html = render_forest(build_tree(filtered, options), is_ordered)
        return RenderedToc(OutputKind.HTML, html, options.title)

    markdown = render_markdown(headings, options)
    if options.debug_in_console:
        logger.debug("Markdown: %r", markdown)
    return RenderedToc(OutputKind.MARKDOWN, markdown)


def render_toc_block(
    source_text: str, headings: Sequence[Heading], base_options: TocOptions | None = None
) -> RenderedToc:
    """Render the table of contents described by a TOC block.

    Invalid options never propagate: they are reported as an inline markdown
    notice in place of the table of contents.

    Args:
        source_text: ``key: value`` option text from the block body.
        headings: All headings of the document, in document order.
        base_options: Settings the block text overrides.

    Returns:
        RenderedToc: Rendered table of contents, or the failure notice.

    Examples:
        render_toc_block("style: nestedOrderedList", headings, build_config(Path.cwd()))
    """
    try:
        options = parse_options_text(source_text, base_options)
    except ConfigError as error:
        if base_options is not None and base_options.debug_in_console:
            logger.debug("Could not render table of contents: %s", error)
        return RenderedToc(OutputKind.MARKDOWN, RENDER_ERROR_TEMPLATE.format(message=error))
    return render_toc(headings, options)
