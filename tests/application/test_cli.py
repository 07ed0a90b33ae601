import errno
from contextlib import nullcontext

import numpy as np
import pytest

from application.cli import build_parser, main, select_repository
from infrastructure.forest import GeoTiffHeightMapAdapter, TextHeightMapAdapter


def test_both_parts_by_default(sample_path, capsys):
    assert main([str(sample_path)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["Answer for part 1 is 21", "Answer for part 2 is 8"]


@pytest.mark.parametrize(
    "part, expected", [("1", "Answer for part 1 is 21"), ("2", "Answer for part 2 is 8")]
)
def test_single_part(sample_path, capsys, part, expected):
    assert main([str(sample_path), "--part", part]) == 0
    assert capsys.readouterr().out.strip() == expected


def test_workers_flag(sample_path, capsys):
    assert main([str(sample_path), "-w", "3"]) == 0
    assert "Answer for part 2 is 8" in capsys.readouterr().out


def test_invalid_part_exits(sample_path):
    with pytest.raises(SystemExit):
        build_parser().parse_args([str(sample_path), "--part", "3"])


def test_invalid_workers_returns_failure(sample_path, caplog):
    assert main([str(sample_path), "--workers", "0"]) == 1
    assert "--workers must be >= 1" in caplog.text


def test_missing_file_returns_failure(tmp_path, capsys, caplog):
    assert main([str(tmp_path / "nope.txt")]) == 1
    assert capsys.readouterr().out == ""
    assert "Height map not found: nope.txt" in caplog.text


def test_directory_returns_failure(tmp_path, capsys, caplog):
    d = tmp_path / "forest"
    d.mkdir()
    (d / "input.txt").write_text("12\n")
    assert main([str(d)]) == 1
    assert capsys.readouterr().out == ""
    assert "forest" in caplog.text
    assert str(tmp_path) not in caplog.text


def test_read_error_returns_failure(tmp_path, monkeypatch, capsys, caplog):
    p = tmp_path / "forest.txt"
    p.write_text("12\n")

    def _raise_io_error(self, *args, **kwargs):
        raise OSError(errno.EIO, "Input/output error")

    monkeypatch.setattr("pathlib.Path.read_text", _raise_io_error)

    assert main([str(p)]) == 1
    assert capsys.readouterr().out == ""
    assert "Could not read forest.txt (Input/output error)" in caplog.text


def test_malformed_map_returns_failure(tmp_path, caplog):
    p = tmp_path / "ragged.txt"
    p.write_text("123\n45\n")
    assert main([str(p)]) == 1
    assert "MalformedGridError" in caplog.text


def test_invalid_character_returns_failure(tmp_path, caplog):
    p = tmp_path / "bad.txt"
    p.write_text("12\n3a\n")
    assert main([str(p)]) == 1
    assert "InvalidHeightMapError" in caplog.text


def test_geotiff_input(tmp_path, monkeypatch, capsys):
    p = tmp_path / "forest.tif"
    p.write_bytes(b"x")

    class FakeDataset:
        count = 1
        height, width = 3, 3
        dtypes = ("uint8",)
        nodata = None

        def read(self, band, *, masked):
            return np.array([[1, 1, 1], [1, 5, 1], [1, 1, 1]], dtype=np.uint8)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr("rasterio.open", lambda path: FakeDataset())
    monkeypatch.setattr("rasterio.Env", lambda *a, **k: nullcontext())

    assert main([str(p)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["Answer for part 1 is 9", "Answer for part 2 is 1"]


def test_select_repository_by_extension(tmp_path):
    assert isinstance(select_repository(tmp_path / "a.TIF"), GeoTiffHeightMapAdapter)
    assert isinstance(select_repository(tmp_path / "a.tiff"), GeoTiffHeightMapAdapter)
    assert isinstance(select_repository(tmp_path / "input"), TextHeightMapAdapter)
    assert isinstance(select_repository(tmp_path / "a.txt"), TextHeightMapAdapter)
