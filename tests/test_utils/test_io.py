"""Tests for pcfuse.utils.io: ASCII PLY export and PLY reading."""

from pathlib import Path

import numpy as np
import pytest

from pcfuse.fusion.store import PointSnapshot, Vertex
from pcfuse.utils import io as ply_io
from pcfuse.utils.io import PlyExportError, color_bytes, format_ply, read_ply, write_ascii_ply

TWO_VERTICES = PointSnapshot.from_vertices([
    Vertex((0.5, -0.25, 1.0), (1.0, 0.5, 0.0, 1.0)),
    Vertex((-1.0, 2.0, 0.125), (0.2, 0.4, 0.6, 0.8)),
])


class TestFormatPly:
    def test_two_vertices(self):
        lines = format_ply(TWO_VERTICES).splitlines()
        assert lines[:11] == [
            "ply",
            "format ascii 1.0",
            "element vertex 2",
            "property float x",
            "property float y",
            "property float z",
            "property uchar red",
            "property uchar green",
            "property uchar blue",
            "property uchar alpha",
            "end_header",
        ]
        assert lines[11:] == [
            "0.5 -0.25 1.0 255 127 0 255",
            "-1.0 2.0 0.125 51 102 153 204",
        ]

    def test_empty_snapshot(self):
        text = format_ply(PointSnapshot.empty())
        assert "element vertex 0" in text
        assert text.rstrip().endswith("end_header")

    def test_color_bytes_truncate(self):
        np.testing.assert_array_equal(
            color_bytes(np.array([[0.999, 1.0, 1.5, -0.1]])), [[254, 255, 255, 0]]
        )


class TestWriteAsciiPly:
    def test_written_file_reads_back(self, tmp_path: Path):
        path = write_ascii_ply(tmp_path / "out" / "cloud.ply", TWO_VERTICES)
        assert path.exists()
        snap = read_ply(path)
        assert len(snap) == 2
        np.testing.assert_allclose(snap.positions, TWO_VERTICES.positions)
        np.testing.assert_allclose(snap.colors[0], (1.0, 127 / 255, 0.0, 1.0))

    def test_encoding_failure_writes_nothing(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "cloud.ply"
        path.write_text("previous export")
        monkeypatch.setattr(ply_io, "format_ply", lambda snapshot: "ply\né\n")

        with pytest.raises(PlyExportError):
            write_ascii_ply(path, TWO_VERTICES)
        assert path.read_text() == "previous export"
        assert [p.name for p in tmp_path.iterdir()] == ["cloud.ply"]

    def test_write_failure_leaves_no_temp_file(self, tmp_path: Path, monkeypatch):
        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(ply_io.os, "replace", fail)
        with pytest.raises(OSError):
            write_ascii_ply(tmp_path / "cloud.ply", TWO_VERTICES)
        assert list(tmp_path.iterdir()) == []


class TestReadPly:
    def test_missing_colors_default_white(self, tmp_path: Path):
        path = tmp_path / "xyz.ply"
        path.write_text(
            "ply\nformat ascii 1.0\nelement vertex 1\n"
            "property float x\nproperty float y\nproperty float z\nend_header\n1 2 3\n"
        )
        snap = read_ply(path)
        np.testing.assert_allclose(snap.positions, [[1, 2, 3]])
        np.testing.assert_allclose(snap.colors, [[1, 1, 1, 1]])
