"""Data models for auto-toc."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto


class ParserState(Enum):
    """Parser states used while scanning Markdown content.

    Attributes:
        NORMAL: Default state for regular text.
        IN_FENCED_CODE: Inside a fenced code block.
        IN_INDENTED_CODE: Inside an indented code block.
        IN_TOC_BLOCK: Inside a fenced ``toc`` block whose body holds options.
    """

    NORMAL = auto()
    IN_FENCED_CODE = auto()
    IN_INDENTED_CODE = auto()
    IN_TOC_BLOCK = auto()


@dataclass
class ParserContext:
    """Encapsulate parser state while walking Markdown text.

    Attributes:
        state: Current parser state.
        fence_char: Fence character that opened a fenced code block, if any.
        fence_length: Number of fence characters that opened the block.
    """

    state: ParserState = ParserState.NORMAL
    fence_char: str | None = None
    fence_length: int = 0


class TocStyle(str, Enum):
    """Rendering styles for the markdown output."""

    NESTED_LIST = "nestedList"
    NESTED_ORDERED_LIST = "nestedOrderedList"
    INLINE_FIRST_LEVEL = "inlineFirstLevel"


class FilterMode(Enum):
    INCLUDE = auto()
    EXCLUDE = auto()


class OutputKind(Enum):
    MARKDOWN = auto()
    HTML = auto()


@dataclass(frozen=True)
class Heading:
    """A heading occurrence in document order.

    Attributes:
        text: Heading label; may be empty.
        level: Raw heading level (``1`` for ``#``); not validated.
        position: Zero-based source line the heading was read from.
    """

    text: str
    level: int
    position: int = 0


@dataclass(frozen=True)
class HeadingPattern:
    """Include or exclude test applied to heading labels.

    Attributes:
        mode: Whether a match keeps (`FilterMode.INCLUDE`) or drops
            (`FilterMode.EXCLUDE`) the heading.
        regex: Compiled expression searched anywhere in the label.

    Examples:
        HeadingPattern(FilterMode.EXCLUDE, re.compile("draft", re.I)).allows("Intro")  # True
    """

    mode: FilterMode
    regex: re.Pattern[str]

    @property
    def is_exclude(self) -> bool:
        return self.mode is FilterMode.EXCLUDE

    def allows(self, text: str) -> bool:
        found = self.regex.search(text) is not None
        return not found if self.is_exclude else found


@dataclass(frozen=True)
class FilteredHeading:
    """A heading that survived filtering, with its normalized depth."""

    heading: Heading
    depth: int


@dataclass
class TreeNode:
    """Formatted label and children used by the foldable renderer."""

    text: str
    children: list[TreeNode] = field(default_factory=list)


@dataclass(frozen=True)
class TocBlock:
    """Fenced TOC code block found in a document.

    Attributes:
        source: Option text between the fences, without the fences.
        start_line: Zero-based line of the opening fence.
    """

    source: str
    start_line: int


@dataclass
class ParseResult:
    """Structured result of parsing a Markdown document.

    Attributes:
        headings: Headings discovered outside code blocks, in document order.
        toc_blocks: TOC code blocks discovered in the document.
    """

    headings: list[Heading]
    toc_blocks: list[TocBlock]


@dataclass(frozen=True)
class RenderedToc:
    """Output of one render pass.

    Attributes:
        kind: Markdown to hand to a markdown renderer, or an HTML fragment.
        content: Rendered markdown or HTML; empty when nothing should show.
        title: Markdown title to render ahead of an HTML fragment. Always
            empty for markdown output, where the title is part of `content`.
    """

    kind: OutputKind
    content: str
    title: str = ""
