from __future__ import annotations

import os
from pathlib import Path

import pytest

from auto_toc.filesystem import (
    collect_file_stat,
    contains_symlink,
    enforce_file_size,
    get_max_file_size,
    get_max_line_length,
    normalize_filepath,
    safe_read,
)


def test_get_max_file_size_defaults_without_env(monkeypatch):
    monkeypatch.delenv("AUTO_TOC_MAX_FILE_SIZE", raising=False)
    assert get_max_file_size(default=123) == 123


def test_get_max_file_size_reads_env(monkeypatch):
    monkeypatch.setenv("AUTO_TOC_MAX_FILE_SIZE", "2048")
    assert get_max_file_size() == 2048


@pytest.mark.parametrize("value", ["invalid", "0", "-5"])
def test_get_max_file_size_rejects_bad_values(monkeypatch, value: str):
    monkeypatch.setenv("AUTO_TOC_MAX_FILE_SIZE", value)
    with pytest.raises(ValueError, match="AUTO_TOC_MAX_FILE_SIZE"):
        get_max_file_size()


@pytest.mark.parametrize("value", ["invalid", "0"])
def test_get_max_line_length_rejects_bad_values(monkeypatch, value: str):
    monkeypatch.setenv("AUTO_TOC_MAX_LINE_LENGTH", value)
    with pytest.raises(ValueError, match="AUTO_TOC_MAX_LINE_LENGTH"):
        get_max_line_length()


def test_normalize_filepath_missing_file(tmp_path: Path):
    with pytest.raises(ValueError, match="does not exist"):
        normalize_filepath(str(tmp_path / "missing.md"), tmp_path)


def test_normalize_filepath_accepts_markdown_extensions(tmp_path: Path):
    for name in ("a.md", "b.MARKDOWN"):
        target = tmp_path / name
        target.write_text("# A\n", encoding="utf-8")
        assert normalize_filepath(str(target), tmp_path.resolve()) == target.resolve()


def test_normalize_filepath_rejects_directories(tmp_path: Path):
    folder = tmp_path / "folder.md"
    folder.mkdir()
    with pytest.raises(ValueError, match="not a regular file"):
        normalize_filepath(str(folder), tmp_path.resolve())


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_symlinks_are_rejected(tmp_path: Path):
    source = tmp_path / "source.md"
    source.write_text("# A\n", encoding="utf-8")
    link = tmp_path / "alias.md"
    try:
        os.symlink(source, link)
    except OSError:
        pytest.skip("Symlinks cannot be created here")

    assert contains_symlink(link) is True
    with pytest.raises(ValueError, match="Symlinks are not supported"):
        normalize_filepath(str(link), tmp_path.resolve())
    with pytest.raises(IOError, match="Symlinks are not supported"):
        collect_file_stat(link)


def test_enforce_file_size(tmp_path: Path):
    target = tmp_path / "doc.md"
    target.write_text("# Heading\n", encoding="utf-8")
    stat_result = collect_file_stat(target)

    enforce_file_size(stat_result, 100, target)
    with pytest.raises(IOError, match="exceeds the maximum allowed size"):
        enforce_file_size(stat_result, 5, target)


def test_safe_read_reports_missing_file(tmp_path: Path):
    with pytest.raises(IOError, match="Error accessing"):
        safe_read(tmp_path / "missing.md")


def test_safe_read_returns_text_handle(tmp_path: Path):
    target = tmp_path / "doc.md"
    target.write_text("# Café\n", encoding="utf-8")

    with safe_read(target) as handle:
        assert handle.read() == "# Café\n"
