"""Heading selection and depth normalization."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .config import TocOptions
from .models import FilteredHeading, Heading


def is_heading_allowed(text: str, options: TocOptions) -> bool:
    """Return whether a label passes the configured include/exclude test."""
    if options.pattern is None:
        return True
    return options.pattern.allows(text)


def resolve_min_level(headings: Sequence[Heading], options: TocOptions) -> int | None:
    """Resolve the effective minimum level.

    Auto-detection looks at every heading in the document, not only those
    that survive filtering.

    Args:
        headings: All headings of the document.
        options: Options holding `min_level`; ``0`` requests auto-detection.

    Returns:
        int | None: The configured level, the lowest level present, or None
            when auto-detection has no heading to look at.

    Examples:
        resolve_min_level([Heading("A", 2), Heading("B", 3)], TocOptions())  # 2
    """
    if options.min_level > 0:
        return options.min_level
    if not headings:
        return None
    return min(heading.level for heading in headings)


def compute_normalized_depths(levels: Iterable[int]) -> list[int]:
    """Convert raw heading levels into contiguous zero-based depths.

    Keeps a stack of the levels still open. Each level first closes every
    open level greater than or equal to itself, so skipped levels never
    create empty depths.

    Args:
        levels: Raw levels in document order.

    Returns:
        list[int]: One depth per level.

    Examples:
        compute_normalized_depths([1, 3, 3])  # [0, 1, 1]
        compute_normalized_depths([2, 1, 2])  # [0, 0, 1]
    """
    depths: list[int] = []
    level_stack: list[int] = []
    for level in levels:
        while level_stack and level_stack[-1] >= level:
            level_stack.pop()
        level_stack.append(level)
        depths.append(len(level_stack) - 1)
    return depths


def filter_headings(headings: Sequence[Heading], options: TocOptions) -> list[FilteredHeading]:
    """Select the headings to show and compute their normalized depths.

    A heading that fails an exclude pattern also removes every following
    heading with a greater level (its subsection). An include pattern is
    evaluated per heading, so a child can be kept while its parent is not.

    Args:
        headings: All headings of the document, in document order.
        options: Level bounds and include/exclude pattern.

    Returns:
        list[FilteredHeading]: Surviving headings in document order. Empty when
            `headings` is empty or nothing passes the filters.

    Examples:
        filter_headings([Heading("A", 1), Heading("B", 3)], TocOptions())
    """
    min_level = resolve_min_level(headings, options)
    if min_level is None:
        return []

    cascades = options.pattern is not None and options.pattern.is_exclude
    kept: list[Heading] = []
    unallowed_level = 0

    for heading in headings:
        if cascades and unallowed_level > 0 and heading.level > unallowed_level:
            continue
        if heading.level <= unallowed_level:
            unallowed_level = 0
        if not is_heading_allowed(heading.text, options):
            if cascades:
                unallowed_level = heading.level
            continue
        if heading.level < min_level:
            continue
        if options.max_level > 0 and heading.level > options.max_level:
            continue
        if not heading.text.strip():
            continue
        kept.append(heading)

    depths = compute_normalized_depths(heading.level for heading in kept)
    return [FilteredHeading(heading, depth) for heading, depth in zip(kept, depths)]
