"""Unit tests for the multi-threaded render scheduler.

Tests cover:
- RenderSettings validation
- Chunk partitioning (disjoint and exhaustive)
- The shared chunk cursor and progress counter under contention
- Buffer merging
- Worker failure propagation
- Progress reporting
"""

import threading

import numpy as np
import pytest

from src.pathtracer.camera.pinhole import Display
from src.pathtracer.core.color import Color
from src.pathtracer.core.integrator import render_pixel
from src.pathtracer.core.sampler import Lcg, derive_seed
from src.pathtracer.core.parallel import (
    ChunkCursor,
    PixelChunk,
    ProgressCounter,
    RenderSettings,
    RenderWorkerError,
    chunk_size_for,
    merge_buffers,
    new_buffer,
    pixel_chunks,
    render,
)


class TestRenderSettings:
    """Tests for settings defaults and validation."""

    def test_defaults(self):
        settings = RenderSettings()
        assert settings.samples == 100
        assert settings.bounces == 50
        assert settings.threads == 16
        assert settings.seed is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"samples": 0},
            {"bounces": -1},
            {"threads": 0},
            {"chunks_per_worker": 0},
            {"poll_interval": 0.0},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_zero_bounces_allowed(self):
        assert RenderSettings(bounces=0).bounces == 0


class TestPixelChunks:
    """Tests for work partitioning."""

    @pytest.mark.parametrize(
        ("width", "height", "workers"),
        [(5, 5, 3), (1280, 720, 16), (1, 1, 4), (7, 3, 1)],
    )
    def test_chunks_cover_every_pixel_once(self, width, height, workers):
        display = Display(width, height)
        covered = np.zeros(display.size, dtype=np.int64)

        for chunk in pixel_chunks(display, workers):
            covered[chunk.start : chunk.stop] += 1

        assert np.all(covered == 1)

    def test_chunk_indices_are_sequential(self):
        chunks = list(pixel_chunks(Display(5, 5), 3))
        assert [chunk.index for chunk in chunks] == list(range(len(chunks)))

    def test_chunk_size(self):
        # 25 pixels over 3 * 4 = 12 chunks -> ceil(25 / 12) = 3
        assert chunk_size_for(Display(5, 5), 3, 4) == 3
        assert chunk_size_for(Display(1280, 720), 16, 4) == 14400
        assert chunk_size_for(Display(1, 1), 16, 4) == 1

    def test_chunk_iterates_coordinates(self):
        chunk = PixelChunk(index=0, start=3, stop=7, width=5)
        assert len(chunk) == 4
        assert list(chunk) == [(3, 0), (4, 0), (0, 1), (1, 1)]

    def test_chunk_coordinates_cover_display(self):
        display = Display(6, 4)
        coords = [xy for chunk in pixel_chunks(display, 3, 2) for xy in chunk]
        assert sorted(coords, key=lambda p: (p[1], p[0])) == list(display)


class TestSharedState:
    """Tests for the lock-guarded cursor and counter."""

    def test_cursor_hands_out_each_chunk_once(self):
        display = Display(64, 64)
        cursor = ChunkCursor(pixel_chunks(display, 8, 8))
        taken: list[list[int]] = [[] for _ in range(8)]

        def worker(slot: int) -> None:
            while (chunk := cursor.next_chunk()) is not None:
                taken[slot].append(chunk.index)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        indices = sorted(i for slot in taken for i in slot)
        assert indices == list(range(64))
        assert cursor.next_chunk() is None

    def test_progress_counter_under_contention(self):
        counter = ProgressCounter()

        def worker() -> None:
            for _ in range(1000):
                counter.add(1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert counter.value == 8000


class TestMergeBuffers:
    """Tests for buffer merging."""

    def test_disjoint_buffers_merge_to_union(self):
        display = Display(4, 2)
        a = new_buffer(display)
        b = new_buffer(display)
        a[0, :] = (0.1, 0.2, 0.3)
        b[1, :] = (0.4, 0.5, 0.6)

        merged = merge_buffers([a, b])

        np.testing.assert_array_equal(merged[0], a[0])
        np.testing.assert_array_equal(merged[1], b[1])

    def test_first_non_background_wins(self):
        display = Display(2, 1)
        a = new_buffer(display)
        b = new_buffer(display)
        a[0, 0] = (1.0, 0.0, 0.0)
        b[0, 0] = (0.0, 1.0, 0.0)
        b[0, 1] = (0.0, 0.0, 1.0)

        merged = merge_buffers([a, b])
        np.testing.assert_array_equal(merged[0, 0], (1.0, 0.0, 0.0))
        np.testing.assert_array_equal(merged[0, 1], (0.0, 0.0, 1.0))

    def test_custom_background_sentinel(self):
        sky = Color(0.5, 0.7, 1.0)
        display = Display(2, 1)
        a = new_buffer(display, sky)
        b = new_buffer(display, sky)
        b[0, 1] = (0.2, 0.2, 0.2)

        merged = merge_buffers([a, b], sky)
        np.testing.assert_allclose(merged[0, 0], sky.as_tuple())
        np.testing.assert_allclose(merged[0, 1], (0.2, 0.2, 0.2))

    def test_empty_and_mismatched_raise(self):
        with pytest.raises(ValueError, match="At least one buffer"):
            merge_buffers([])
        with pytest.raises(ValueError, match="shapes must match"):
            merge_buffers([new_buffer(Display(2, 2)), new_buffer(Display(3, 2))])


class TestRender:
    """Tests for the threaded render entry point."""

    def test_output_shape_and_dtype(self, dome_scene):
        image = render(dome_scene, RenderSettings(samples=1, bounces=1, threads=2, seed=1))
        assert image.shape == (7, 12, 3)
        assert image.dtype == np.float64
        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)

    def test_progress_reports_completion(self, dome_scene):
        reports: list[tuple[int, int]] = []
        settings = RenderSettings(samples=1, bounces=0, threads=3, seed=1, poll_interval=0.01)

        render(dome_scene, settings, progress=lambda done, total: reports.append((done, total)))

        assert reports
        assert reports[-1] == (84, 84)
        done_values = [done for done, _ in reports]
        assert done_values == sorted(done_values)

    def test_more_threads_than_chunks(self, dome_scene):
        settings = RenderSettings(samples=1, bounces=0, threads=32, chunks_per_worker=1, seed=5)
        image = render(dome_scene, settings)
        assert image.shape == (7, 12, 3)

    def test_worker_failure_raises_render_worker_error(self, dome_scene, monkeypatch):
        import src.pathtracer.core.parallel as parallel

        def broken_render_pixel(*args, **kwargs):
            raise ZeroDivisionError("boom")

        monkeypatch.setattr(parallel, "render_pixel", broken_render_pixel)

        with pytest.raises(RenderWorkerError) as excinfo:
            render(dome_scene, RenderSettings(samples=1, bounces=0, threads=2, seed=1))

        assert isinstance(excinfo.value.__cause__, ZeroDivisionError)
        assert isinstance(excinfo.value, RuntimeError)

    def test_unseeded_render_runs(self, dome_scene):
        image = render(dome_scene, RenderSettings(samples=1, bounces=0, threads=2))
        assert image.shape == (7, 12, 3)

    def test_pixel_matches_direct_render_pixel(self, dome_scene):
        """Test that each pixel is rendered from its own derived seed."""
        settings = RenderSettings(samples=2, bounces=1, threads=2, seed=9)
        image = render(dome_scene, settings)

        x, y = 5, 3
        rng = Lcg.from_seed(derive_seed(9, y * dome_scene.display.width + x))
        color = render_pixel(dome_scene, x, y, 2, 1, rng=rng)

        np.testing.assert_array_equal(image[y, x], color.as_tuple())
