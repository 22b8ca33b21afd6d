"""Markdown heading and TOC block extraction."""

from __future__ import annotations

from pathlib import Path

from .config import ConfigError, TocOptions, validate_config
from .constants import (
    CLOSING_FENCE_MAX_INDENT,
    CLOSING_HASHES_PATTERN,
    CODE_FENCE_PATTERN,
    HEADING_PATTERN,
    TOC_BLOCK_LANGUAGES,
)
from .exceptions import LineTooLongError, ParseError, TooManyHeadingsError
from .filesystem import safe_read
from .models import Heading, ParseResult, ParserContext, ParserState, TocBlock


def _leading_whitespace_columns(line: str) -> int:
    """Compute the column width of leading whitespace.

    Tabs advance to the next multiple of four columns to match Markdown
    indentation rules.

    Examples:
        _leading_whitespace_columns("    text")  # 4
        _leading_whitespace_columns(" \\ttext")  # 4
    """
    columns = 0
    for character in line:
        if character == " ":
            columns += 1
        elif character == "\t":
            columns += 4 - (columns % 4)
        else:
            break
    return columns


def _try_open_fence(ctx: ParserContext, line: str) -> bool:
    """Detect the start of a fenced code block.

    Blocks whose info string names a table of contents enter
    `ParserState.IN_TOC_BLOCK` instead of `ParserState.IN_FENCED_CODE`.

    Args:
        ctx: Parser context to update when a fence opens.
        line: Current line being scanned.

    Returns:
        bool: True when the line begins a fence and the context is updated.

    Examples:
        _try_open_fence(ParserContext(), "```toc\\n")  # True, IN_TOC_BLOCK
    """
    if ctx.state is not ParserState.NORMAL:
        return False

    fence_match = CODE_FENCE_PATTERN.match(line)
    if not fence_match:
        return False

    indent_columns = _leading_whitespace_columns(fence_match.group("indent") or "")
    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    fence_sequence = fence_match.group("fence")
    info_words = fence_match.group("info").split()
    is_toc = bool(info_words) and info_words[0] in TOC_BLOCK_LANGUAGES

    ctx.state = ParserState.IN_TOC_BLOCK if is_toc else ParserState.IN_FENCED_CODE
    ctx.fence_char = fence_sequence[0]
    ctx.fence_length = len(fence_sequence)
    return True


def _try_close_fence(ctx: ParserContext, line: str) -> bool:
    """Attempt to close the active fenced block.

    Returns:
        bool: True when the line closes the fence; otherwise False.
    """
    if ctx.state not in (ParserState.IN_FENCED_CODE, ParserState.IN_TOC_BLOCK):
        return False
    if ctx.fence_char is None:
        return False

    stripped_line = line.lstrip(" \t")
    if not stripped_line or stripped_line[0] != ctx.fence_char:
        return False

    fence_run_length = len(stripped_line) - len(stripped_line.lstrip(ctx.fence_char))
    if fence_run_length < ctx.fence_length:
        return False
    if stripped_line[fence_run_length:].strip():
        return False
    if _leading_whitespace_columns(line) > CLOSING_FENCE_MAX_INDENT:
        return False

    ctx.state = ParserState.NORMAL
    ctx.fence_char = None
    ctx.fence_length = 0
    return True


def _try_enter_indented_code(ctx: ParserContext, line: str, previous_blank: bool) -> bool:
    """Detect entry into an indented code block.

    An indented line only opens a code block after a blank line (or at the
    start of the document); otherwise it continues the preceding paragraph.
    """
    if ctx.state is not ParserState.NORMAL or not previous_blank:
        return False

    if line.strip() and _leading_whitespace_columns(line) >= 4:
        ctx.state = ParserState.IN_INDENTED_CODE
        return True

    return False


def _try_exit_indented_code(ctx: ParserContext, line: str) -> bool:
    """Determine whether to stay in an indented code block.

    Returns:
        bool: True when the line is still code (blank or indented); False when
            the parser resumes normal processing with this line.
    """
    if ctx.state is not ParserState.IN_INDENTED_CODE:
        return False

    if line.strip() == "" or _leading_whitespace_columns(line) >= 4:
        return True

    ctx.state = ParserState.NORMAL
    return False


def extract_heading(line: str, position: int = 0) -> Heading | None:
    """Read an ATX heading from a single line.

    Args:
        line: Line to inspect, with or without its line ending.
        position: Zero-based line number recorded on the heading.

    Returns:
        Heading | None: The heading, or None when the line is not one. An
            optional closing sequence of ``#`` is removed from the text.

    Examples:
        extract_heading("## Install ##")  # Heading("Install", 2, 0)
        extract_heading("#hashtag")  # None
    """
    match = HEADING_PATTERN.match(line.rstrip("\r\n"))
    if not match:
        return None
    text = CLOSING_HASHES_PATTERN.sub("", match.group("text") or "")
    return Heading(text=text.strip(), level=len(match.group("marker")), position=position)


def _line_length(line: str) -> int:
    length = len(line)
    if line.endswith("\n"):
        length -= 1
        if length > 0 and line[length - 1] == "\r":
            length -= 1
    return length


def parse_markdown(
    content: str, max_line_length: int | None = None, config: TocOptions | None = None
) -> ParseResult:
    """Parse Markdown content to extract headings and TOC blocks.

    Headings inside fenced or indented code are ignored. Fenced blocks with a
    ``toc`` or ``table-of-contents`` info string are collected with their
    option text; a block left open runs to the end of the document.

    Args:
        content: The markdown content to parse.
        max_line_length: Optional override for the maximum allowed line length
            (excluding line endings).
        config: Options providing parsing limits. Defaults to a new
            `TocOptions` when omitted.

    Returns:
        ParseResult: Headings and TOC blocks.

    Raises:
        ConfigError: If the configuration fails validation.
        LineTooLongError: If a line outside code exceeds the maximum length.
        TooManyHeadingsError: If the document has more headings than allowed.

    Examples:
        parse_markdown("# Title\\n\\n```toc\\nstyle: inlineFirstLevel\\n```\\n")
    """
    config = config or TocOptions()
    validate_config(config)
    effective_max_line_length = (
        config.max_line_length if max_line_length is None else max_line_length
    )

    lines = content.splitlines(keepends=True)
    headings: list[Heading] = []
    toc_blocks: list[TocBlock] = []

    ctx = ParserContext()
    block_start = 0
    block_lines: list[str] = []
    previous_blank = True

    for line_number, line in enumerate(lines):
        if ctx.state is ParserState.IN_TOC_BLOCK:
            if _try_close_fence(ctx, line):
                toc_blocks.append(TocBlock("".join(block_lines), block_start))
                block_lines = []
                previous_blank = False
            else:
                block_lines.append(line)
            continue

        if ctx.state is ParserState.IN_FENCED_CODE:
            if _try_close_fence(ctx, line):
                previous_blank = False
            continue

        if ctx.state is ParserState.IN_INDENTED_CODE:
            if _try_exit_indented_code(ctx, line):
                previous_blank = not line.strip()
                continue

        if _try_open_fence(ctx, line):
            block_start = line_number
            continue

        if _try_enter_indented_code(ctx, line, previous_blank):
            continue

        previous_blank = not line.strip()

        if _line_length(line) > effective_max_line_length:
            raise LineTooLongError(line_number + 1, effective_max_line_length)

        heading = extract_heading(line, line_number)
        if heading is not None:
            headings.append(heading)
            if len(headings) > config.max_headings:
                raise TooManyHeadingsError(config.max_headings)

    if ctx.state is ParserState.IN_TOC_BLOCK:
        toc_blocks.append(TocBlock("".join(block_lines), block_start))

    return ParseResult(headings=headings, toc_blocks=toc_blocks)


class ParseFileError(Exception):
    """Raised when parsing a Markdown file fails."""


def parse_file(
    filepath: Path,
    max_line_length: int | None = None,
    config: TocOptions | None = None,
) -> ParseResult:
    """Read and parse a Markdown file.

    Args:
        filepath: Path to the markdown file to parse.
        max_line_length: Optional override for the maximum allowed line length.
        config: Options providing parsing limits; defaults to a new
            `TocOptions` when omitted.

    Returns:
        ParseResult: Document lines, headings and TOC blocks.

    Raises:
        ParseFileError: If configuration is invalid, a limit is exceeded, or
            the file cannot be read or decoded.

    Examples:
        result = parse_file(Path("notes.md"), 120, options)
    """
    config = config or TocOptions()
    try:
        validate_config(config)
    except ConfigError as error:
        raise ParseFileError(str(error)) from error

    effective_max_line_length = (
        config.max_line_length if max_line_length is None else max_line_length
    )
    if effective_max_line_length <= 0:
        raise ParseFileError("`max_line_length` override must be a positive integer")

    try:
        with safe_read(filepath) as file:
            content = file.read()
    except UnicodeDecodeError as error:
        raise ParseFileError(f"Invalid UTF-8 sequence in {filepath}: {error}") from error
    except IOError as error:
        raise ParseFileError(str(error)) from error

    try:
        return parse_markdown(content, effective_max_line_length, config)
    except LineTooLongError as error:
        raise ParseFileError(
            f"{filepath} contains a line at line {error.line_number} "
            f"exceeding the maximum allowed length of {error.max_line_length} characters."
        ) from error
    except TooManyHeadingsError as error:
        raise ParseFileError(
            f"{filepath} contains too many headings (limit: {error.limit})."
        ) from error
    except ParseError as error:
        raise ParseFileError(f"{filepath}: {error}") from error
