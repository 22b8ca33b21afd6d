"""Options loading, option-text parsing and validation."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

from .models import FilterMode, HeadingPattern, TocStyle


@dataclass(frozen=True)
class TocOptions:
    """Options for rendering one table of contents.

    Attributes:
        title: Markdown placed before the table of contents; empty for none.
        style: List style (`TocStyle` member, or its value / an alias such as
            ``"ordered"`` before normalization).
        min_level: Smallest heading level to include; ``0`` detects the
            lowest level present in the document.
        max_level: Largest heading level to include; ``0`` means no cap.
        include_links: Whether labels become same-document links.
        strip_formatting: Whether inline markup is removed from labels.
        hide_when_empty: Whether to render nothing when no heading survives.
        foldable: Whether to emit collapsible HTML instead of markdown. Has no
            effect with the inline style.
        pattern: Include or exclude test for heading labels. Accepts a
            ``/regex/flags`` string before normalization via the ``include``
            and ``exclude`` keys of `apply_overrides`.
        indent_chars: Characters used to indent nested list entries.
        debug_in_console: Whether render steps are logged at DEBUG level.
        max_file_size: Maximum file size in bytes that will be read.
        max_line_length: Maximum line length allowed during parsing.
        max_headings: Maximum number of headings a document may contain.

    Examples:
        TocOptions(title="**Contents**", style=TocStyle.NESTED_ORDERED_LIST, max_level=3)
    """

    title: str = ""
    style: TocStyle = TocStyle.NESTED_LIST
    min_level: int = 0
    max_level: int = 0

    # Labels
    include_links: bool = True
    strip_formatting: bool = False

    # Output
    hide_when_empty: bool = False
    foldable: bool = False
    pattern: HeadingPattern | None = None
    indent_chars: str = "\t"
    debug_in_console: bool = False

    # Limits
    max_file_size: int = 10 * 1024 * 1024
    max_line_length: int = 10_000
    max_headings: int = 10_000


class ConfigError(ValueError):
    """Exception raised when options are invalid.

    Examples:
        raise ConfigError("`max_level` must be >= `min_level`")
    """


STYLE_ALIASES = {
    "ordered": TocStyle.NESTED_ORDERED_LIST,
    "unordered": TocStyle.NESTED_LIST,
    "inline": TocStyle.INLINE_FIRST_LEVEL,
}

# Keys accepted in a TOC block, mapped to option fields. The pattern keys are
# handled separately because both feed `pattern`.
OPTION_TEXT_KEYS = {
    "title": "title",
    "style": "style",
    "minLevel": "min_level",
    "maxLevel": "max_level",
    "includeLinks": "include_links",
    "stripFormatting": "strip_formatting",
    "hideWhenEmpty": "hide_when_empty",
    "foldable": "foldable",
    "debugInConsole": "debug_in_console",
}
PATTERN_KEYS = {"include": FilterMode.INCLUDE, "exclude": FilterMode.EXCLUDE}

_BOOLEAN_FIELDS = (
    "include_links",
    "strip_formatting",
    "hide_when_empty",
    "foldable",
    "debug_in_console",
)
_LEVEL_FIELDS = ("min_level", "max_level")
_LIMIT_FIELDS = ("max_file_size", "max_line_length", "max_headings")

_REGEX_LITERAL = re.compile(r"^/(?P<body>.*)/(?P<flags>[a-z]*)$", re.DOTALL)
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "u": 0}


def parse_pattern(value: str, mode: FilterMode) -> HeadingPattern:
    """Compile a ``/regex/flags`` literal into a `HeadingPattern`.

    Args:
        value: Pattern literal, for example ``/^Draft/i``.
        mode: Include or exclude semantics for the pattern.

    Returns:
        HeadingPattern: Compiled pattern.

    Raises:
        ConfigError: If the literal is not slash-delimited, uses an
            unsupported flag, or is not a valid regular expression.

    Examples:
        parse_pattern("/appendix/i", FilterMode.EXCLUDE)
    """
    key = mode.name.lower()
    match = _REGEX_LITERAL.match(value.strip())
    if not match:
        raise ConfigError(f"`{key}` must be a regular expression such as /pattern/i, got {value!r}")

    flags = 0
    for flag in match.group("flags"):
        if flag not in _REGEX_FLAGS:
            raise ConfigError(f"Unsupported flag {flag!r} in `{key}` (supported: i, m, s, u)")
        flags |= _REGEX_FLAGS[flag]

    try:
        regex = re.compile(match.group("body"), flags)
    except re.error as error:
        raise ConfigError(f"Invalid regular expression in `{key}`: {error}") from error
    return HeadingPattern(mode=mode, regex=regex)


def load_config(search_path: Path) -> TocOptions:
    """Load persistent settings from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root,
    reading ``[tool.auto-toc]`` from `pyproject.toml` and ``[auto-toc]`` or
    ``[tool.auto-toc]`` from `.auto-toc.toml`. Files that cannot be read or
    decoded are skipped.

    Args:
        search_path: Directory used as the starting point for lookup.

    Returns:
        TocOptions: Loaded settings, or defaults when nothing is found.

    Raises:
        ConfigError: If a settings table is not a mapping or contains
            unsupported keys or values.

    Examples:
        load_config(Path("notes"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "auto-toc")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".auto-toc.toml", table_paths=[("auto-toc",), ("tool", "auto-toc")]
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return TocOptions()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> TocOptions | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> TocOptions:
    table_display = ".".join(table_path)

    if raw_config is None or raw_config == {}:
        return TocOptions()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    try:
        return normalize_config(apply_overrides(TocOptions(), **raw_config))
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def parse_options_text(source_text: str, base: TocOptions | None = None) -> TocOptions:
    """Parse the ``key: value`` body of a TOC block on top of `base`.

    Args:
        source_text: Block body, one option per line. Blank lines are ignored.
        base: Settings the block overrides. Defaults to a new `TocOptions`.

    Returns:
        TocOptions: Normalized and validated options.

    Raises:
        ConfigError: If a line is malformed, a key is unknown, a value has the
            wrong type, or both ``include`` and ``exclude`` are given.

    Examples:
        parse_options_text("style: nestedOrderedList\\nmaxLevel: 3")
        parse_options_text("exclude: /^Draft/i", load_config(Path.cwd()))
    """
    base = base or TocOptions()
    changes: dict[str, object] = {}
    pattern_keys: list[str] = []

    for line_number, line in enumerate(source_text.splitlines(), start=1):
        if not line.strip():
            continue
        key, separator, raw_value = line.partition(":")
        key = key.strip()
        value = raw_value.strip()
        if not separator or not key:
            raise ConfigError(f"Invalid option on line {line_number}: {line.strip()!r}")

        if key in PATTERN_KEYS:
            pattern_keys.append(key)
            changes["pattern"] = parse_pattern(value, PATTERN_KEYS[key])
            continue

        field_name = OPTION_TEXT_KEYS.get(key)
        if field_name is None:
            raise ConfigError(f"Unknown option `{key}` on line {line_number}")
        changes[field_name] = _coerce_option_value(field_name, key, value)

    if len(pattern_keys) > 1:
        raise ConfigError("Only one of `include` or `exclude` can be set")

    options = replace(base, **changes)
    options = normalize_config(options)
    validate_config(options)
    return options


def _coerce_option_value(field_name: str, key: str, value: str) -> object:
    if field_name in _BOOLEAN_FIELDS:
        if value not in ("true", "false"):
            raise ConfigError(f"`{key}` must be true or false, got {value!r}")
        return value == "true"
    if field_name in _LEVEL_FIELDS:
        try:
            return int(value)
        except ValueError as error:
            raise ConfigError(f"`{key}` must be an integer, got {value!r}") from error
    return value


def normalize_config(config: TocOptions) -> TocOptions:
    """Resolve style aliases into `TocStyle` members.

    Raises:
        ConfigError: If the style is not a known name or alias.
    """
    style = config.style
    if isinstance(style, TocStyle):
        return config
    if not isinstance(style, str):
        raise ConfigError("`style` must be a string")
    if style in STYLE_ALIASES:
        return replace(config, style=STYLE_ALIASES[style])
    try:
        return replace(config, style=TocStyle(style))
    except ValueError as error:
        valid = ", ".join([*(member.value for member in TocStyle), *STYLE_ALIASES])
        raise ConfigError(f"`style` must be one of: {valid}") from error


def validate_config(config: TocOptions) -> None:
    """Validate a `TocOptions` instance.

    Args:
        config: Options to validate.

    Returns:
        None.

    Raises:
        ConfigError: If levels are negative or inconsistent, flags are not
            booleans, the indent is empty, the pattern has the wrong type, or
            numeric limits are non-positive.

    Examples:
        validate_config(TocOptions(min_level=2, max_level=4))
    """
    config = normalize_config(config)

    _ensure_integers({name: getattr(config, name) for name in (*_LEVEL_FIELDS, *_LIMIT_FIELDS)})

    if config.min_level < 0:
        raise ConfigError("`min_level` must be >= 0")
    if config.max_level < 0:
        raise ConfigError("`max_level` must be >= 0")
    if config.min_level and config.max_level and config.max_level < config.min_level:
        raise ConfigError("`max_level` must be >= `min_level`")

    for name in _BOOLEAN_FIELDS:
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"`{name}` must be a boolean")

    if not isinstance(config.title, str):
        raise ConfigError("`title` must be a string")
    if not isinstance(config.indent_chars, str) or not config.indent_chars:
        raise ConfigError("`indent_chars` must not be empty")
    if config.pattern is not None and not isinstance(config.pattern, HeadingPattern):
        raise ConfigError("`pattern` must be a HeadingPattern")

    _ensure_positive({name: getattr(config, name) for name in _LIMIT_FIELDS})


def apply_overrides(config: TocOptions, **overrides: object) -> TocOptions:
    """Apply override values to a `TocOptions`.

    ``include`` and ``exclude`` are accepted as ``/regex/flags`` strings and
    replace `pattern`; values set to None are ignored.

    Args:
        config: Base options to update.
        overrides: Override values keyed by option field name.

    Returns:
        TocOptions: New options with the overrides applied. The original
        options are returned when no changes are supplied.

    Raises:
        ConfigError: If both ``include`` and ``exclude`` are supplied or a
            pattern cannot be compiled.
        TypeError: If an override name is not defined on `TocOptions`.

    Examples:
        updated = apply_overrides(options, title="## Contents", exclude="/^Draft/")
    """
    changes = {key: value for key, value in overrides.items() if value is not None}

    patterns = [key for key in PATTERN_KEYS if key in changes]
    if len(patterns) > 1:
        raise ConfigError("Only one of `include` or `exclude` can be set")
    for key in patterns:
        raw_pattern = changes.pop(key)
        if not isinstance(raw_pattern, str):
            raise ConfigError(f"`{key}` must be a string")
        changes["pattern"] = parse_pattern(raw_pattern, PATTERN_KEYS[key])

    unknown = set(changes) - {option.name for option in fields(TocOptions)}
    if unknown:
        raise TypeError(f"Unknown option(s): {', '.join(sorted(unknown))}")

    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> TocOptions:
    """Load, override, and validate settings.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by option names; None values are
            ignored.

    Returns:
        TocOptions: Validated options ready for rendering.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        options = build_config(Path.cwd(), style="ordered", max_level=3)
    """
    config = load_config(search_path)
    try:
        config = apply_overrides(config, **overrides)
    except TypeError as error:
        raise ConfigError(str(error)) from error
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
