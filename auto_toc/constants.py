"""Constants used across the auto-toc package."""

from __future__ import annotations

import re

from .config import TocOptions

DEFAULT_OPTIONS = TocOptions()

# Markdown patterns
HEADING_PATTERN = re.compile(r"^ {0,3}(?P<marker>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
CLOSING_HASHES_PATTERN = re.compile(r"(?:^|[ \t]+)#+$")
CODE_FENCE_PATTERN = re.compile(r"^(?P<indent>\s{0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
CLOSING_FENCE_MAX_INDENT = 3

# Info strings that mark a fenced block as a table of contents
TOC_BLOCK_LANGUAGES = ("table-of-contents", "toc")

# Rendering
NO_HEADINGS_MESSAGE = "Table of contents: no headings found"
INLINE_SEPARATOR = " | "
RENDER_ERROR_TEMPLATE = "_💥 Could not render table of contents ({message})_"

# Files and limits
MARKDOWN_EXTENSIONS = (".md", ".markdown")
DEFAULT_MAX_FILE_SIZE = DEFAULT_OPTIONS.max_file_size
DEFAULT_MAX_LINE_LENGTH = DEFAULT_OPTIONS.max_line_length
