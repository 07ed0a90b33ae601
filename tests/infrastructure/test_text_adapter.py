from __future__ import annotations

import logging

import pytest

from domain.visibility.errors import (
    InsufficientMemoryError,
    InvalidHeightMapError,
    MalformedGridError,
)
from domain.visibility.services import analyze_forest
from infrastructure.forest.text_adapter import TextHeightMapAdapter, parse_height_map


# ===========================================================================
# parse_height_map
# ===========================================================================
def test_parse_height_map_sample(sample_matrix):
    text = "30373\n25512\n65332\n33549\n35390\n"
    assert parse_height_map(text) == sample_matrix


def test_parse_height_map_ignores_trailing_whitespace_and_blank_lines():
    assert parse_height_map("12 \r\n34\n\n\n") == [[1, 2], [3, 4]]


def test_parse_height_map_rejects_non_digit():
    with pytest.raises(InvalidHeightMapError) as exc_info:
        parse_height_map("123\n4x6\n")
    assert exc_info.value.line == 2
    assert exc_info.value.column == 2
    assert "line 2, column 2" in str(exc_info.value)


def test_parse_height_map_rejects_non_ascii_digit():
    with pytest.raises(InvalidHeightMapError):
        parse_height_map("1²3\n")  # superscript two


def test_parse_height_map_rejects_ragged_lines():
    with pytest.raises(MalformedGridError, match="Line 2 has 2 heights, expected 3"):
        parse_height_map("123\n45\n678\n")


def test_parse_height_map_rejects_empty_text():
    with pytest.raises(InvalidHeightMapError, match="Empty height map"):
        parse_height_map("\n\n")


# ===========================================================================
# TextHeightMapAdapter
# ===========================================================================
def test_load_heights_sample_fixture(sample_path, sample_matrix):
    adapter = TextHeightMapAdapter()
    assert adapter.load_heights(sample_path) == sample_matrix


def test_load_heights_feeds_analysis(sample_path):
    analysis = analyze_forest(TextHeightMapAdapter().load_heights(sample_path))
    assert analysis.visible_count == 21
    assert analysis.max_scenic_score == 8


def test_load_heights_accepts_extensionless_file(tmp_path):
    p = tmp_path / "input"
    p.write_text("99\n19\n")
    assert TextHeightMapAdapter().load_heights(p) == [[9, 9], [1, 9]]


def test_file_not_found_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        TextHeightMapAdapter().load_heights(tmp_path / "missing.txt")


def test_unsupported_extension_rejected(tmp_path):
    p = tmp_path / "heights.csv"
    p.write_text("1,2\n")
    with pytest.raises(InvalidHeightMapError, match="Unsupported file extension"):
        TextHeightMapAdapter().load_heights(p)


def test_empty_file_rejected(tmp_path):
    p = tmp_path / "empty.txt"
    p.write_bytes(b"")
    with pytest.raises(InvalidHeightMapError, match="Empty file"):
        TextHeightMapAdapter().load_heights(p)


def test_symlink_rejected(tmp_path, sample_path):
    link = tmp_path / "link.txt"
    link.symlink_to(sample_path)
    with pytest.raises(InvalidHeightMapError, match="Symlinks"):
        TextHeightMapAdapter().load_heights(link)


def test_memory_budget_exceeded(sample_path):
    adapter = TextHeightMapAdapter(max_bytes=10)
    with pytest.raises(InsufficientMemoryError):
        adapter.load_heights(sample_path)


def test_non_utf8_rejected(tmp_path):
    p = tmp_path / "latin1.txt"
    p.write_bytes(b"12\xff\n")
    with pytest.raises(InvalidHeightMapError, match="UTF-8"):
        TextHeightMapAdapter().load_heights(p)


def test_permission_error_logged_by_name(tmp_path, monkeypatch, caplog):
    p = tmp_path / "secret.txt"
    p.write_text("12\n")

    def _raise_permission_error(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr("pathlib.Path.read_text", _raise_permission_error)

    caplog.set_level(logging.ERROR)
    with pytest.raises(PermissionError):
        TextHeightMapAdapter().load_heights(p)
    assert "Failed to read secret.txt" in caplog.text
    assert str(tmp_path) not in caplog.text


def test_load_logs_dimensions(sample_path, caplog):
    caplog.set_level(logging.DEBUG, logger="infrastructure.forest.text_adapter")
    TextHeightMapAdapter().load_heights(sample_path)
    assert "Height map sample.txt: Loaded 5x5 grid" in caplog.text
