"""Tests for packed plane buffers and their samplers."""

import numpy as np
import pytest

from pcfuse.fusion.planes import (
    PixelBuffer,
    PlaneBuffer,
    PlaneDescriptor,
    YCbCrBuffer,
    pack_planes,
)


class TestPackPlanes:
    def test_descriptors(self):
        a = np.zeros((3, 4), dtype=np.float32)
        b = np.zeros((2, 2, 2), dtype=np.uint8)
        data, planes = pack_planes([a, b], row_padding=4)
        assert planes[0] == PlaneDescriptor(
            offset=0, width=4, height=3, bytes_per_row=20, dtype="<f4", components=1
        )
        assert planes[1].offset == 60
        assert planes[1].bytes_per_row == 8
        assert planes[1].components == 2
        assert len(data) == 60 + 16


class TestPixelBuffer:
    def test_value_honours_row_stride(self):
        arr = np.arange(20, dtype=np.float32).reshape(4, 5)
        buf = PixelBuffer.from_array(arr, row_padding=7)
        assert buf.planes[0].bytes_per_row == 27
        with buf.locked():
            for row in range(4):
                for col in range(5):
                    assert buf.value(col, row) == arr[row, col]

    def test_plane_view_matches_array(self):
        arr = np.random.default_rng(0).integers(0, 3, (6, 7), dtype=np.uint8)
        buf = PixelBuffer.from_array(arr, row_padding=1)
        with buf.locked():
            np.testing.assert_array_equal(buf.plane(0), arr)
            assert not buf.plane(0).flags.writeable

    def test_size(self):
        buf = PixelBuffer.from_array(np.zeros((3, 5), dtype=np.float32))
        assert buf.size == (5, 3)

    def test_read_without_lock_raises(self):
        buf = PixelBuffer.from_array(np.zeros((2, 2), dtype=np.float32))
        with pytest.raises(RuntimeError, match="locked"):
            buf.value(0, 0)

    def test_lock_released_on_exception(self):
        buf = PixelBuffer.from_array(np.zeros((2, 2), dtype=np.float32))
        with pytest.raises(KeyError):
            with buf.locked():
                assert buf.is_locked
                raise KeyError("boom")
        assert not buf.is_locked
        with buf.locked():  # would deadlock if the lock leaked
            pass

    def test_nested_lock_keeps_views_until_outermost_exit(self):
        buf = PixelBuffer.from_array(np.full((2, 2), 3.0, dtype=np.float32))
        with buf.locked():
            with buf.locked():
                assert buf.value(1, 1) == 3.0
            assert buf.is_locked
            assert buf.value(0, 0) == 3.0
        assert not buf.is_locked

    def test_to_array_copies(self):
        arr = np.ones((2, 3), dtype=np.float32)
        out = PixelBuffer.from_array(arr).to_array()
        np.testing.assert_array_equal(out, arr)
        out[0, 0] = 5.0

    def test_rejects_non_2d(self):
        with pytest.raises(ValueError):
            PixelBuffer.from_array(np.zeros(4, dtype=np.float32))

    def test_plane_past_buffer_end_rejected(self):
        desc = PlaneDescriptor(offset=0, width=4, height=4, bytes_per_row=4)
        with pytest.raises(ValueError, match="past the end"):
            PlaneBuffer(bytes(8), [desc])

    def test_short_stride_rejected(self):
        desc = PlaneDescriptor(offset=0, width=4, height=2, bytes_per_row=2, dtype="<f4")
        with pytest.raises(ValueError, match="stride"):
            PlaneBuffer(bytes(64), [desc])


class TestYCbCrBuffer:
    def test_chroma_byte_indexing(self):
        # hand-packed: 4x4 luma with 8-byte rows, 2x2 CbCr with 6-byte rows
        luma_bpr, chroma_bpr = 8, 6
        data = bytearray(4 * luma_bpr + 2 * chroma_bpr)
        for row in range(4):
            for col in range(4):
                data[row * luma_bpr + col] = 10 * row + col
        chroma_base = 4 * luma_bpr
        for crow in range(2):
            for ccol in range(2):
                idx = chroma_base + crow * chroma_bpr + ccol * 2
                data[idx] = 100 + 10 * crow + ccol
                data[idx + 1] = 200 + 10 * crow + ccol
        buf = YCbCrBuffer(bytes(data), [
            PlaneDescriptor(offset=0, width=4, height=4, bytes_per_row=luma_bpr),
            PlaneDescriptor(offset=chroma_base, width=2, height=2, bytes_per_row=chroma_bpr, components=2),
        ])
        with buf.locked():
            assert buf.ycbcr(0, 0) == (0, 100, 200)
            assert buf.ycbcr(3, 1) == (13, 101, 201)
            assert buf.ycbcr(2, 3) == (32, 111, 211)

    def test_from_planes_roundtrip_samples(self):
        rng = np.random.default_rng(1)
        luma = rng.integers(0, 256, (6, 8), dtype=np.uint8)
        chroma = rng.integers(0, 256, (3, 4, 2), dtype=np.uint8)
        buf = YCbCrBuffer.from_planes(luma, chroma, row_padding=3)
        with buf.locked():
            y, cb, cr = buf.ycbcr(5, 4)
        assert y == luma[4, 5]
        assert (cb, cr) == tuple(chroma[2, 2])

    def test_colors_vectorized_matches_scalar(self):
        rng = np.random.default_rng(2)
        luma = rng.integers(16, 236, (4, 4), dtype=np.uint8)
        chroma = rng.integers(16, 241, (2, 2, 2), dtype=np.uint8)
        buf = YCbCrBuffer.from_planes(luma, chroma)
        cols = np.array([0, 1, 3])
        rows = np.array([0, 2, 3])
        with buf.locked():
            batch = buf.colors(cols, rows)
            for i in range(3):
                np.testing.assert_allclose(batch[i], buf.color(cols[i], rows[i]))
        assert batch.shape == (3, 4)

    def test_chroma_shape_validated(self):
        with pytest.raises(ValueError, match="4:2:0"):
            YCbCrBuffer.from_planes(np.zeros((4, 4)), np.zeros((4, 4, 2)))

    def test_needs_two_planes(self):
        desc = PlaneDescriptor(offset=0, width=2, height=2, bytes_per_row=2)
        with pytest.raises(ValueError, match="luma and a chroma"):
            YCbCrBuffer(bytes(4), [desc])
