"""
Renders the table of contents of a markdown file.
Each ```toc block in the file is rendered with its own options; without a
block, the whole document is rendered once. The file is never modified.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import click

from .config import ConfigError, build_config
from .filesystem import (
    collect_file_stat,
    enforce_file_size,
    get_max_file_size,
    get_max_line_length,
    normalize_filepath,
)
from .models import OutputKind, RenderedToc, TocStyle
from .parser import ParseFileError, parse_file
from .renderer import render_toc, render_toc_block

__all__ = ["cli"]

logger = logging.getLogger(__name__)

STYLE_CHOICES = [style.value for style in TocStyle] + ["ordered", "unordered", "inline"]


def format_output(rendered: RenderedToc) -> str:
    """Join an HTML fragment with its markdown title for printing."""
    if rendered.kind is OutputKind.HTML and rendered.title and rendered.content:
        return f"{rendered.title}\n{rendered.content}"
    return rendered.content


@click.command()
@click.version_option(package_name="auto-toc")
@click.option("--title", help="Markdown shown above the table of contents")
@click.option("--style", type=click.Choice(STYLE_CHOICES), help="List style")
@click.option("--min-level", type=int, help="Minimum heading level (0 = auto)")
@click.option("--max-level", type=int, help="Maximum heading level (0 = no limit)")
@click.option("--links/--no-links", "include_links", default=None, help="Link to each heading")
@click.option(
    "--strip-formatting/--no-strip-formatting",
    default=None,
    help="Remove inline markup from labels",
)
@click.option(
    "--hide-when-empty/--show-when-empty", default=None, help="Print nothing without headings"
)
@click.option("--foldable/--no-foldable", default=None, help="Render collapsible HTML")
@click.option("--include", help="Only list headings matching /regex/flags")
@click.option("--exclude", help="Skip headings (and their subsections) matching /regex/flags")
@click.option("--indent-chars", help="Indentation characters")
@click.option("--debug", is_flag=True, help="Log render steps to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    title: str | None = None,
    style: str | None = None,
    min_level: int | None = None,
    max_level: int | None = None,
    include_links: bool | None = None,
    strip_formatting: bool | None = None,
    hide_when_empty: bool | None = None,
    foldable: bool | None = None,
    include: str | None = None,
    exclude: str | None = None,
    indent_chars: str | None = None,
    debug: bool = False,
):
    """
    Print the table of contents of a Markdown file.

    Raises:
        click.BadParameter: If the path or the option overrides are invalid.
        click.ClickException: If reading or parsing the file fails.

    Examples:
        auto-toc notes.md --style nestedOrderedList --max-level 3
    """
    logging.basicConfig(format="%(name)s: %(message)s")
    logging.getLogger("auto_toc").setLevel(logging.DEBUG)

    base_dir = Path.cwd().resolve()
    try:
        filepath = normalize_filepath(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        options = build_config(
            filepath.parent,
            title=title,
            style=style,
            min_level=min_level,
            max_level=max_level,
            include_links=include_links,
            strip_formatting=strip_formatting,
            hide_when_empty=hide_when_empty,
            foldable=foldable,
            include=include,
            exclude=exclude,
            indent_chars=indent_chars,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error
    if debug:
        options = replace(options, debug_in_console=True)

    try:
        max_file_size = get_max_file_size(default=options.max_file_size)
        max_line_length = get_max_line_length(default=options.max_line_length)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        enforce_file_size(collect_file_stat(filepath), max_file_size, filepath)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    try:
        result = parse_file(filepath, max_line_length, options)
    except ParseFileError as error:
        raise click.ClickException(str(error)) from error

    if result.toc_blocks:
        outputs = []
        for block in result.toc_blocks:
            if debug:
                logger.debug("Rendering TOC block at line %d", block.start_line + 1)
            outputs.append(format_output(render_toc_block(block.source, result.headings, options)))
    else:
        outputs = [format_output(render_toc(result.headings, options))]

    # Hidden tables of contents print nothing, not even a separator.
    outputs = [output for output in outputs if output]
    for index, output in enumerate(outputs):
        if index:
            click.echo()
        click.echo(output)


if __name__ == "__main__":
    cli()
