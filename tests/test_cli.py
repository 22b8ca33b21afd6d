from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import auto_toc.cli as cli_module
from auto_toc.cli import cli
from auto_toc.constants import NO_HEADINGS_MESSAGE


def _write(tmp_path: Path, filename: str, content: str) -> Path:
    path = tmp_path / filename
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_cli_prints_toc_for_whole_document(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(
        tmp_path,
        "doc.md",
        """
        # Introduction
        ### Basics
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output == "- [[#Introduction]]\n\t- [[#Basics]]\n"
    assert target.read_text(encoding="utf-8").startswith("# Introduction")


def test_cli_renders_each_toc_block(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(
        tmp_path,
        "blocks.md",
        """
        ```toc
        style: inlineFirstLevel
        ```
        # One
        ## One.One
        # Two
        ```table-of-contents
        maxLevel: 1
        includeLinks: false
        ```
        """,
    )
    original = target.read_text(encoding="utf-8")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output == "[[#One]] | [[#Two]]\n\n- One\n- Two\n"
    assert target.read_text(encoding="utf-8") == original


def test_cli_reports_invalid_block_inline(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(
        tmp_path,
        "broken.md",
        """
        ```toc
        style: sideways
        ```
        # Heading
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output.startswith("_💥 Could not render table of contents (`style` must be")


def test_cli_overrides(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(
        tmp_path,
        "override.md",
        """
        # Keep
        ## Draft section
        ### Draft child
        # Also keep
        """,
    )

    result = cli_runner.invoke(
        cli,
        [
            "--style",
            "ordered",
            "--no-links",
            "--exclude",
            "/draft/i",
            "--title",
            "**Contents**",
            str(target),
        ],
    )

    assert result.exit_code == 0
    assert result.output == "**Contents**\n1. Keep\n1. Also keep\n"


def test_cli_foldable_prints_title_and_html(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(
        tmp_path,
        "fold.md",
        """
        # A
        ## B
        """,
    )

    result = cli_runner.invoke(cli, ["--foldable", "--title", "TOC", str(target)])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "TOC"
    assert lines[1].startswith("<ul><li><details open><summary>")


def test_cli_empty_document_prints_notice(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "empty.md", "No headings here.\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output == f"_{NO_HEADINGS_MESSAGE}_\n"


def test_cli_reads_settings_from_pyproject(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_pyproject(
        tmp_path,
        """
        [tool.auto-toc]
        include_links = false
        indent_chars = "  "
        """,
    )
    target = _write(
        tmp_path,
        "configured.md",
        """
        # A
        ## B
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output == "- A\n  - B\n"


def test_cli_links_flag_overrides_settings(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_pyproject(
        tmp_path,
        """
        [tool.auto-toc]
        include_links = false
        """,
    )
    target = _write(tmp_path, "links.md", "# A\n")

    result = cli_runner.invoke(cli, ["--links", str(target)])

    assert result.exit_code == 0
    assert result.output == "- [[#A]]\n"


def test_cli_rejects_invalid_pattern(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "doc.md", "# A\n")

    result = cli_runner.invoke(cli, ["--include", "not-a-regex", str(target)])

    assert result.exit_code != 0
    assert "must be a regular expression" in result.output


def test_cli_rejects_both_patterns(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "doc.md", "# A\n")

    result = cli_runner.invoke(cli, ["--include", "/a/", "--exclude", "/b/", str(target)])

    assert result.exit_code != 0
    assert "Only one of `include` or `exclude`" in result.output


def test_cli_rejects_non_markdown_files(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "notes.txt", "# A\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code != 0
    assert "is not a Markdown file" in result.output


def test_cli_rejects_files_outside_working_directory(cli_runner, tmp_path, monkeypatch):
    outside = _write(tmp_path, "outside.md", "# A\n")
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    result = cli_runner.invoke(cli, [str(outside)])

    assert result.exit_code != 0
    assert "outside of the working directory" in result.output


def test_cli_enforces_max_file_size(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AUTO_TOC_MAX_FILE_SIZE", "4")
    target = _write(tmp_path, "big.md", "# A long heading\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code != 0
    assert "exceeds the maximum allowed size" in result.output


def test_cli_enforces_max_line_length(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AUTO_TOC_MAX_LINE_LENGTH", "5")
    target = _write(tmp_path, "long.md", "# A long heading\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code != 0
    assert "exceeding the maximum allowed length" in result.output


def test_cli_debug_flag_configures_logging(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    calls = []
    monkeypatch.setattr(cli_module.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    target = _write(tmp_path, "debug.md", "# A\n")

    result = cli_runner.invoke(cli, ["--debug", str(target)])

    assert result.exit_code == 0
    assert "- [[#A]]" in result.output
    assert calls == [{"format": "%(name)s: %(message)s"}]
    assert logging.getLogger("auto_toc").level == logging.DEBUG


def test_cli_block_debug_option_logs_without_flag(cli_runner, tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_module.logging, "basicConfig", lambda **kwargs: None)
    target = _write(
        tmp_path,
        "debug-block.md",
        """
        # A

        ```toc
        debugInConsole: true
        ```
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert "- [[#A]]" in result.output
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Options:") for message in messages)
    assert not any(message.startswith("Rendering TOC block") for message in messages)


def test_cli_debug_flag_logs_block_lines(cli_runner, tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_module.logging, "basicConfig", lambda **kwargs: None)
    target = _write(tmp_path, "lines.md", "# A\n\n```toc\n```\n")

    result = cli_runner.invoke(cli, ["--debug", str(target)])

    assert result.exit_code == 0
    messages = [record.getMessage() for record in caplog.records]
    assert "Rendering TOC block at line 3" in messages


def test_cli_hidden_blocks_print_nothing(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_module.logging, "basicConfig", lambda **kwargs: None)
    target = _write(
        tmp_path,
        "hidden.md",
        """
        Just text.

        ```toc
        hideWhenEmpty: true
        ```

        ```toc
        hideWhenEmpty: true
        foldable: true
        ```
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output == ""


def test_cli_skips_hidden_block_between_outputs(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_module.logging, "basicConfig", lambda **kwargs: None)
    target = _write(
        tmp_path,
        "mixed.md",
        """
        # A
        ```toc
        ```
        ```toc
        include: /nothing/
        hideWhenEmpty: true
        ```
        ```toc
        style: inlineFirstLevel
        ```
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output == "- [[#A]]\n\n[[#A]]\n"
