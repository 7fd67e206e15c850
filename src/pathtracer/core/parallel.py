"""Multi-threaded render scheduler.

This module drives the integrator over a whole frame with a fixed pool of
worker threads:

    1. The pixel domain is split into disjoint scanline chunks covering
       every pixel exactly once (pixel_chunks).
    2. The chunk iterator sits behind a lock (ChunkCursor). Each worker
       repeatedly takes the next chunk until the cursor is exhausted.
    3. Every worker renders its chunks into a private full-frame buffer
       with its own random generator, and adds finished pixels to a
       shared ProgressCounter.
    4. The calling thread polls the workers at a fixed interval and
       reports progress through an optional callback.
    5. Once every worker has been joined, the private buffers are merged
       single-threaded (merge_buffers).

The scene is shared read-only. The cursor and the progress counter are the
only shared mutable objects, and both are accessed under their own locks.

Each worker reseeds its generator from (base seed, pixel index) before every
pixel, so a frame depends only on the seed and not on thread count, chunk
size or which worker happened to take which chunk.

A worker exception is fatal for the whole render: it is re-raised as
RenderWorkerError when the worker is joined, and no partial frame is
returned.

Example:
    >>> from src.pathtracer.camera.pinhole import Display
    >>> from src.pathtracer.core.parallel import RenderSettings, render
    >>> from src.pathtracer.scene.presets import create_sphere_dome_scene
    >>> scene = create_sphere_dome_scene(Display(12, 7))
    >>> settings = RenderSettings(samples=4, bounces=2, threads=2, seed=42)
    >>> image = render(scene, settings)
    >>> image.shape
    (7, 12, 3)
"""

from __future__ import annotations

import math
import threading
from collections.abc import Callable, Iterable, Iterator, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from src.pathtracer.camera.pinhole import Display
from src.pathtracer.core.color import Color
from src.pathtracer.core.integrator import DEFAULT_BOUNCES, DEFAULT_SAMPLES, render_pixel
from src.pathtracer.core.sampler import Lcg, derive_seed
from src.pathtracer.scene.scene import Scene

# Type alias for progress callback
# Callback receives (rendered_pixels, total_pixels)
ProgressCallback = Callable[[int, int], None]

# Type alias for a (height, width, 3) float color buffer
ImageBuffer = npt.NDArray[np.float64]

DEFAULT_THREADS = 16
DEFAULT_CHUNKS_PER_WORKER = 4
DEFAULT_POLL_INTERVAL = 0.1


class RenderWorkerError(RuntimeError):
    """Raised when a render worker thread fails."""


# =============================================================================
# Settings
# =============================================================================


@dataclass(frozen=True)
class RenderSettings:
    """Parameters for one render.

    Attributes:
        samples: Primary rays averaged per pixel.
        bounces: Bounce budget per path.
        threads: Number of worker threads.
        seed: Render-wide random seed. None seeds from the system clock.
        chunks_per_worker: Target number of chunks per worker; more chunks
            balance load better at the cost of more cursor traffic.
        poll_interval: Seconds between progress reports.

    Raises:
        ValueError: If a count or interval is out of range.
    """

    samples: int = DEFAULT_SAMPLES
    bounces: int = DEFAULT_BOUNCES
    threads: int = DEFAULT_THREADS
    seed: int | None = None
    chunks_per_worker: int = DEFAULT_CHUNKS_PER_WORKER
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if self.samples < 1:
            raise ValueError(f"samples must be at least 1, got {self.samples}")
        if self.bounces < 0:
            raise ValueError(f"bounces must be non-negative, got {self.bounces}")
        if self.threads < 1:
            raise ValueError(f"threads must be at least 1, got {self.threads}")
        if self.chunks_per_worker < 1:
            raise ValueError(
                f"chunks_per_worker must be at least 1, got {self.chunks_per_worker}"
            )
        if not self.poll_interval > 0.0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")


# =============================================================================
# Work Partitioning
# =============================================================================


@dataclass(frozen=True)
class PixelChunk:
    """A run of consecutive pixels in row-major order.

    Attributes:
        index: Position of the chunk in the chunk sequence.
        start: First linear pixel index (inclusive).
        stop: Last linear pixel index (exclusive).
        width: Row length used to turn linear indices into (x, y).
    """

    index: int
    start: int
    stop: int
    width: int

    def __len__(self) -> int:
        return self.stop - self.start

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for i in range(self.start, self.stop):
            y, x = divmod(i, self.width)
            yield x, y


def chunk_size_for(display: Display, workers: int, chunks_per_worker: int = 1) -> int:
    """Return the number of pixels per chunk.

    The size is chosen so that workers * chunks_per_worker chunks cover the
    display, rounding up; the last chunk may be shorter.
    """
    target_chunks = max(1, workers * chunks_per_worker)
    return max(1, math.ceil(display.size / target_chunks))


def pixel_chunks(
    display: Display,
    workers: int,
    chunks_per_worker: int = DEFAULT_CHUNKS_PER_WORKER,
) -> Iterator[PixelChunk]:
    """Split a display into disjoint, collectively exhaustive chunks.

    Args:
        display: The resolution to partition.
        workers: Number of worker threads.
        chunks_per_worker: Target number of chunks per worker.

    Yields:
        PixelChunk values in row-major order.
    """
    size = chunk_size_for(display, workers, chunks_per_worker)
    for index, start in enumerate(range(0, display.size, size)):
        yield PixelChunk(index, start, min(start + size, display.size), display.width)


class ChunkCursor:
    """A lock-guarded shared iterator over pixel chunks."""

    def __init__(self, chunks: Iterable[PixelChunk]) -> None:
        self._chunks = iter(chunks)
        self._lock = threading.Lock()

    def next_chunk(self) -> PixelChunk | None:
        """Take the next chunk, or None when all chunks are handed out."""
        with self._lock:
            return next(self._chunks, None)


class ProgressCounter:
    """A lock-guarded count of rendered pixels."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def add(self, amount: int) -> None:
        with self._lock:
            self._value += amount

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


# =============================================================================
# Buffers
# =============================================================================


def new_buffer(display: Display, background: Color = Color.BLACK) -> ImageBuffer:
    """Allocate a (height, width, 3) buffer filled with background."""
    buffer = np.empty((display.height, display.width, 3), dtype=np.float64)
    buffer[...] = background.as_tuple()
    return buffer


def merge_buffers(
    buffers: Sequence[ImageBuffer],
    background: Color = Color.BLACK,
) -> ImageBuffer:
    """Merge sparse per-worker buffers into one image.

    For each pixel the first buffer holding a non-background value wins.
    Chunks are disjoint, so at most one buffer holds a rendered value for
    any pixel; a pixel whose rendered value equals the background stays
    background either way.

    Args:
        buffers: Same-shaped (height, width, 3) buffers.
        background: The sentinel value unrendered pixels hold.

    Returns:
        The merged buffer.

    Raises:
        ValueError: If buffers is empty or shapes differ.
    """
    if not buffers:
        raise ValueError("At least one buffer is required")

    shape = buffers[0].shape
    for buffer in buffers:
        if buffer.shape != shape:
            raise ValueError(f"Buffer shapes must match: {shape} vs {buffer.shape}")

    sentinel = np.asarray(background.as_tuple(), dtype=np.float64)
    merged = np.empty(shape, dtype=np.float64)
    merged[...] = sentinel
    filled = np.zeros(shape[:2], dtype=bool)

    for buffer in buffers:
        take = ~filled & np.any(buffer != sentinel, axis=-1)
        merged[take] = buffer[take]
        filled |= take

    return merged


# =============================================================================
# Workers
# =============================================================================


def render_chunk(
    scene: Scene,
    chunk: PixelChunk,
    buffer: ImageBuffer,
    settings: RenderSettings,
    rng: Lcg,
    base_seed: int,
) -> None:
    """Render every pixel of a chunk into buffer.

    The generator is reseeded from (base_seed, linear pixel index) before
    each pixel.
    """
    for offset, (x, y) in enumerate(chunk):
        rng.reseed(derive_seed(base_seed, chunk.start + offset))
        color = render_pixel(scene, x, y, settings.samples, settings.bounces, rng=rng)
        buffer[y, x] = color.as_tuple()


def _render_worker(
    scene: Scene,
    settings: RenderSettings,
    cursor: ChunkCursor,
    progress: ProgressCounter,
    base_seed: int,
) -> ImageBuffer:
    """Worker loop: consume chunks until the cursor is exhausted."""
    buffer = new_buffer(scene.display, scene.background_color)
    rng = Lcg()

    while (chunk := cursor.next_chunk()) is not None:
        render_chunk(scene, chunk, buffer, settings, rng, base_seed)
        progress.add(len(chunk))

    return buffer


def render(
    scene: Scene,
    settings: RenderSettings | None = None,
    progress: ProgressCallback | None = None,
) -> ImageBuffer:
    """Render a frame with a pool of worker threads.

    Args:
        scene: The scene to render. It is not mutated.
        settings: Render parameters; defaults to RenderSettings().
        progress: Optional callback receiving (rendered_pixels, total_pixels)
            after every poll interval and once at completion.

    Returns:
        A (height, width, 3) float64 buffer of linear radiance, row 0 at the
        top of the image.

    Raises:
        RenderWorkerError: If any worker raised; the original exception is
            chained as __cause__.
    """
    if settings is None:
        settings = RenderSettings()

    base_seed = settings.seed
    if base_seed is None:
        base_seed = Lcg.from_time().next_u64()

    total = scene.display.size
    cursor = ChunkCursor(pixel_chunks(scene.display, settings.threads, settings.chunks_per_worker))
    counter = ProgressCounter()

    with ThreadPoolExecutor(max_workers=settings.threads, thread_name_prefix="render") as pool:
        futures = [
            pool.submit(_render_worker, scene, settings, cursor, counter, base_seed)
            for _ in range(settings.threads)
        ]

        pending = set(futures)
        while pending:
            _, pending = wait(pending, timeout=settings.poll_interval, return_when=FIRST_EXCEPTION)
            if progress is not None:
                progress(counter.value, total)

    buffers = []
    for i, future in enumerate(futures):
        try:
            buffers.append(future.result())
        except Exception as exc:
            raise RenderWorkerError(f"Render worker {i} failed: {exc}") from exc

    return merge_buffers(buffers, scene.background_color)
