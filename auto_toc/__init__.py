"""
auto-toc: automatic table of contents for Markdown documents.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    auto-toc notes.md --style nestedOrderedList

Library Usage:
    from auto_toc import Heading, TocOptions, render_toc

    headings = [Heading("Intro", 1), Heading("Setup", 2)]
    rendered = render_toc(headings, TocOptions(max_level=3))
    print(rendered.content)
"""

from .config import ConfigError, TocOptions, build_config, parse_options_text
from .exceptions import LineTooLongError, ParseError, TooManyHeadingsError
from .foldable import build_tree, render_forest
from .formatting import format_heading, strip_markup
from .headings import compute_normalized_depths, filter_headings
from .markdown import render_markdown
from .models import (
    FilteredHeading,
    FilterMode,
    Heading,
    HeadingPattern,
    OutputKind,
    RenderedToc,
    TocStyle,
    TreeNode,
)
from .parser import parse_markdown
from .renderer import render_toc, render_toc_block

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "filter_headings",
    "compute_normalized_depths",
    "format_heading",
    "strip_markup",
    "render_markdown",
    "build_tree",
    "render_forest",
    "render_toc",
    "render_toc_block",
    "parse_markdown",
    # Options
    "TocOptions",
    "build_config",
    "parse_options_text",
    # Data models
    "Heading",
    "FilteredHeading",
    "HeadingPattern",
    "FilterMode",
    "TocStyle",
    "TreeNode",
    "OutputKind",
    "RenderedToc",
    # Exceptions
    "ConfigError",
    "LineTooLongError",
    "ParseError",
    "TooManyHeadingsError",
    # Version
    "__version__",
]
