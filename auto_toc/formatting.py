"""Heading label formatting: markup stripping and link wrapping."""

from __future__ import annotations

import re

from .config import TocOptions

HTML_TAG_PATTERN = re.compile(r"</?[A-Za-z][^<>]*>")
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\([^)]*\)")
ALIASED_WIKILINK_PATTERN = re.compile(r"!?\[\[[^\]|]*\|([^\]]*)\]\]")
WIKILINK_PATTERN = re.compile(r"!?\[\[([^\]]*)\]\]")

# Applied in order; bold before italic so ``***x***`` loses every marker.
EMPHASIS_PATTERNS = (
    re.compile(r"\*\*(?!\s)(.+?)(?<!\s)\*\*"),
    re.compile(r"(?<!\w)__(?!\s)(.+?)(?<!\s)__(?!\w)"),
    re.compile(r"\*(?!\s)(.+?)(?<!\s)\*"),
    re.compile(r"(?<!\w)_(?!\s)(.+?)(?<!\s)_(?!\w)"),
    re.compile(r"~~(.+?)~~"),
    re.compile(r"==(.+?)=="),
)

# Characters that end or split a wikilink target.
LINK_BREAKING_PATTERN = re.compile(r"[\[\]|#^]")
DISPLAY_BREAKING_PATTERN = re.compile(r"[\[\]]")

_PLACEHOLDER = "\x00{}\x00"
_PLACEHOLDER_PATTERN = re.compile(r"\x00(\d+)\x00")


def is_escaped(text: str, pos: int) -> bool:
    """Determine whether a character is escaped by preceding backslashes.

    Examples:
        is_escaped("\\\\`", 2)  # False, two backslashes
        is_escaped("\\`", 1)  # True, one backslash
    """
    backslash_count = 0
    i = pos - 1
    while i >= 0 and text[i] == "\\":
        backslash_count += 1
        i -= 1
    return backslash_count % 2 == 1


def find_inline_code_spans(text: str) -> list[tuple[int, int, int]]:
    """Locate inline code spans delimited by equal-length backtick runs.

    Args:
        text: The text to scan for inline code spans.

    Returns:
        list[tuple[int, int, int]]: Start (inclusive), end (exclusive) and
            delimiter length of each span.

    Examples:
        find_inline_code_spans("`code`")  # [(0, 6, 1)]
        find_inline_code_spans("``a ` b`` text")  # [(0, 9, 2)]
    """
    spans = []
    i = 0

    while i < len(text):
        if text[i] != "`" or is_escaped(text, i):
            i += 1
            continue

        start = i
        while i < len(text) and text[i] == "`":
            i += 1
        opening = i - start

        # Scan for a closing run of the same length; shorter or longer runs
        # are part of the span content.
        j = i
        while j < len(text):
            if text[j] != "`":
                j += 1
                continue
            run_start = j
            while j < len(text) and text[j] == "`":
                j += 1
            if j - run_start == opening:
                spans.append((start, j, opening))
                i = j
                break
        else:
            # Unmatched opening run is literal text.
            i = start + opening

    return spans


def _unwrap_emphasis(text: str) -> str:
    for pattern in EMPHASIS_PATTERNS:
        text = pattern.sub(r"\1", text)
    return text


def strip_markup(text: str) -> str:
    """Remove inline markup from a heading label, keeping its visible text.

    Strips emphasis (``**``, ``__``, ``*``, ``_``, ``~~``, ``==``), the
    backticks of inline code, HTML tags, markdown links and images, and
    wikilinks. Inline code content is left untouched by the other rules.

    Args:
        text: Raw heading label.

    Returns:
        str: Label without markup, trimmed.

    Examples:
        strip_markup("**Bold** and `*code*`")  # "Bold and *code*"
        strip_markup("See [[Page|the page]] <br>")  # "See the page"
    """
    # NUL delimits the code placeholders below.
    text = text.replace("\x00", "")
    code_texts: list[str] = []
    parts: list[str] = []
    offset = 0
    for start, end, delimiter in find_inline_code_spans(text):
        parts.append(text[offset:start])
        content = text[start + delimiter : end - delimiter]
        if len(content) > 2 and content.startswith(" ") and content.endswith(" "):
            content = content[1:-1]
        code_texts.append(content)
        parts.append(_PLACEHOLDER.format(len(code_texts) - 1))
        offset = end
    parts.append(text[offset:])
    stripped = "".join(parts)

    stripped = HTML_TAG_PATTERN.sub("", stripped)
    stripped = IMAGE_PATTERN.sub(r"\1", stripped)
    stripped = LINK_PATTERN.sub(r"\1", stripped)
    stripped = ALIASED_WIKILINK_PATTERN.sub(r"\1", stripped)
    stripped = WIKILINK_PATTERN.sub(r"\1", stripped)
    stripped = _unwrap_emphasis(stripped)

    stripped = _PLACEHOLDER_PATTERN.sub(lambda match: code_texts[int(match.group(1))], stripped)
    return stripped.strip()


def link_target(label: str) -> str:
    """Build a same-document link target from a raw heading label.

    Examples:
        link_target("Setup [beta] | Linux")  # "Setup beta Linux"
    """
    return " ".join(LINK_BREAKING_PATTERN.sub(" ", label).split())


def format_heading(label: str, options: TocOptions) -> str:
    """Render a heading label for display in the table of contents.

    With `include_links`, the label becomes a wikilink to the heading. When
    formatting is stripped, the link target keeps the original label (minus
    link-breaking characters) so it still resolves, and the stripped text is
    shown as the alias.

    Args:
        label: Raw heading label.
        options: Options providing `include_links` and `strip_formatting`.

    Returns:
        str: Formatted label.

    Examples:
        format_heading("Intro", TocOptions())  # "[[#Intro]]"
        format_heading("**Intro**", TocOptions(strip_formatting=True))  # "[[#**Intro**|Intro]]"
        format_heading("**Intro**", TocOptions(include_links=False))  # "**Intro**"
    """
    display = strip_markup(label) if options.strip_formatting else label
    if not options.include_links:
        return display

    target = link_target(label)
    if not target:
        return display

    display = " ".join(DISPLAY_BREAKING_PATTERN.sub("", display).split())
    if not display or (display == target and not options.strip_formatting):
        return f"[[#{target}]]"
    return f"[[#{target}|{display}]]"
