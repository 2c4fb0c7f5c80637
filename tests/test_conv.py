# -*- coding: utf-8 -*-
"""Tests for the convolution engine."""

import math

import numpy as np
import pytest

from conv.exceptions import AllocationError, WorkerFailure
from conv.kernels import LAPLACIAN_KERNEL
from conv.partition import WorkPartition, partition_rows
from conv.standard import Standard
from conv.threaded import Threaded
from ppm.image import Image


def random_image(width, height, seed=0):
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    return Image(width, height, pixels)


def reference_filter(image, kernel=LAPLACIAN_KERNEL):
    """Straightforward per-pixel convolution with wrap-around."""
    width, height = image.width, image.height
    src = image.pixels.tolist()
    out = np.zeros((height, width, 3), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            acc = [0, 0, 0]
            for fy in range(3):
                for fx in range(3):
                    sx = (x - 1 + fx) % width
                    sy = (y - 1 + fy) % height
                    for c in range(3):
                        acc[c] += src[sy][sx][c] * kernel[fy][fx]
            out[y, x] = [min(max(v, 0), 255) for v in acc]
    return out


# ============================================================
# partition.py
# ============================================================

class TestPartition:
    def test_even_split(self):
        assert partition_rows(8, 4) == [
            WorkPartition(0, 2), WorkPartition(2, 2),
            WorkPartition(4, 2), WorkPartition(6, 2),
        ]

    def test_last_absorbs_remainder(self):
        sizes = [p.size for p in partition_rows(10, 4)]
        assert sizes == [3, 3, 3, 1]

    def test_fewer_rows_than_workers(self):
        sizes = [p.size for p in partition_rows(3, 4)]
        assert sizes == [0, 0, 0, 3]

    def test_share_capped_by_remaining_rows(self):
        sizes = [p.size for p in partition_rows(5, 4)]
        assert sizes == [2, 2, 1, 0]

    def test_single_worker(self):
        assert partition_rows(7, 1) == [WorkPartition(0, 7)]

    @pytest.mark.parametrize("height", [1, 2, 3, 4, 5, 7, 10, 31, 100, 257])
    @pytest.mark.parametrize("workers", [1, 2, 3, 4, 6, 16])
    def test_exact_coverage(self, height, workers):
        parts = partition_rows(height, workers)
        assert len(parts) == workers
        assert sum(p.size for p in parts) == height
        assert all(p.size >= 0 for p in parts)
        assert parts[0].start == 0
        for prev, nxt in zip(parts, parts[1:]):
            assert nxt.start == prev.stop
        assert parts[-1].stop == height
        if height >= workers:
            share = math.ceil(height / workers)
            assert all(p.size <= share for p in parts[:-1])

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            partition_rows(10, 0)

    def test_empty_partition_is_falsy(self):
        assert not WorkPartition(3, 0)
        assert WorkPartition(3, 1).stop == 4


# ============================================================
# standard.py / threaded.py
# ============================================================

class TestKernelValidation:
    def test_even_kernel_rejected(self):
        with pytest.raises(ValueError):
            Standard([[1, 1], [1, 1]])

    def test_non_square_kernel_rejected(self):
        with pytest.raises(ValueError):
            Threaded([[1, 1, 1]])

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            Threaded(num_workers=0)


class TestLaplacian:
    def test_single_pixel_becomes_black(self):
        img = Image(1, 1, np.array([[[200, 17, 255]]], dtype=np.uint8))
        result, elapsed = Threaded().run(img)
        assert result.size == (1, 1)
        assert tuple(result.pixels[0, 0]) == (0, 0, 0)
        assert elapsed >= 0.0

    def test_uniform_image_becomes_black(self):
        img = Image(5, 4, np.full((4, 5, 3), 123, dtype=np.uint8))
        result, _ = Threaded().run(img)
        assert not result.pixels.any()

    def test_clamps_high(self):
        pixels = np.zeros((3, 3, 3), dtype=np.uint8)
        pixels[1, 1] = 255
        result, _ = Standard().run(Image(3, 3, pixels))
        # 8 * 255 clamps to 255, neighbours get -255 and clamp to 0.
        assert tuple(result.pixels[1, 1]) == (255, 255, 255)
        assert result.pixels.sum() == 255 * 3

    def test_clamps_low(self):
        pixels = np.full((3, 3, 3), 255, dtype=np.uint8)
        pixels[1, 1] = 0
        result, _ = Standard().run(Image(3, 3, pixels))
        assert tuple(result.pixels[1, 1]) == (0, 0, 0)

    def test_wraps_around_edges(self):
        pixels = np.zeros((4, 5, 3), dtype=np.uint8)
        pixels[0, 0] = [10, 20, 30]
        result, _ = Standard().run(Image(5, 4, pixels))
        assert tuple(result.pixels[0, 0]) == (80, 160, 240)
        # The bright corner is a neighbour of the opposite corner only through wrap-around.
        assert tuple(result.pixels[3, 4]) == (0, 0, 0)
        np.testing.assert_array_equal(result.pixels, reference_filter(Image(5, 4, pixels)))

    @pytest.mark.parametrize("width,height", [(1, 1), (1, 5), (5, 1), (2, 2), (7, 6), (13, 9)])
    def test_matches_reference(self, width, height):
        img = random_image(width, height, seed=width + height)
        expected = reference_filter(img)
        standard, _ = Standard().run(img)
        threaded, _ = Threaded().run(img)
        np.testing.assert_array_equal(standard.pixels, expected)
        np.testing.assert_array_equal(threaded.pixels, expected)

    @pytest.mark.parametrize("workers", [1, 2, 3, 4, 8, 64])
    def test_worker_count_does_not_change_result(self, workers):
        img = random_image(31, 23, seed=5)
        expected, _ = Standard().run(img)
        result, _ = Threaded(num_workers=workers).run(img)
        np.testing.assert_array_equal(result.pixels, expected.pixels)

    def test_run_override_worker_count(self):
        img = random_image(8, 8)
        expected, _ = Standard().run(img)
        result, _ = Threaded(num_workers=2).run(img, num_workers=5)
        np.testing.assert_array_equal(result.pixels, expected.pixels)

    def test_run_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            Threaded(num_workers=2).run(random_image(4, 4), num_workers=0)

    def test_output_is_new_image(self):
        img = random_image(6, 6)
        before = img.pixels.copy()
        result, _ = Threaded().run(img)
        assert result is not img
        assert not np.shares_memory(result.pixels, img.pixels)
        np.testing.assert_array_equal(img.pixels, before)
        assert not result.pixels.flags.writeable

    def test_custom_kernel(self):
        identity = [[0, 0, 0], [0, 1, 0], [0, 0, 0]]
        img = random_image(9, 4)
        result, _ = Threaded(identity).run(img)
        np.testing.assert_array_equal(result.pixels, img.pixels)


class TestFailures:
    def test_worker_failure(self, monkeypatch):
        def broken(self, padded, output, start, stop):
            raise RuntimeError("boom")

        monkeypatch.setattr(Threaded, "convolve_rows", broken)
        with pytest.raises(WorkerFailure):
            Threaded().run(random_image(4, 8))

    def test_worker_cannot_start(self, monkeypatch):
        def refuse(self, fn, *args, **kwargs):
            raise RuntimeError("can't start new thread")

        monkeypatch.setattr("conv.threaded.ThreadPoolExecutor.submit", refuse)
        with pytest.raises(WorkerFailure):
            Threaded().run(random_image(4, 8))

    def test_allocation_failure(self, monkeypatch):
        def no_memory(prototype, *args, **kwargs):
            raise MemoryError

        monkeypatch.setattr("conv.threaded.np.empty_like", no_memory)
        with pytest.raises(AllocationError):
            Threaded().run(random_image(4, 4))
