# renderer/raytracer.py
import logging
import os
import random
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional
import numpy as np
from camera.camera import Camera, CameraParams
from core.utils import random_double, sampling_stream
from core.vector import Vector3
from renderer.integrator import ray_color
from renderer.settings import RenderConfigError, RenderSettings
from renderer.tone_mapping import write_tile
from scenes import Scene, SceneSelector, build_scene

logger = logging.getLogger(__name__)

class Tile:
    """Pixels [x0, x1) x [y0, y1) of the image; row 0 is the top row."""
    __slots__ = ("index", "x0", "y0", "x1", "y1")

    def __init__(self, index: int, x0: int, y0: int, x1: int, y1: int):
        self.index = index
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    def __repr__(self) -> str:
        return f"Tile({self.index}: x={self.x0}..{self.x1}, y={self.y0}..{self.y1})"

def make_tiles(width: int, height: int, tile_size: int) -> List[Tile]:
    """Square tiles in row-major order, clipped at the image edges."""
    tiles = []
    for y in range(0, height, tile_size):
        for x in range(0, width, tile_size):
            tiles.append(Tile(len(tiles), x, y, min(x + tile_size, width), min(y + tile_size, height)))
    return tiles

def pixel_view(buffer, settings: RenderSettings) -> np.ndarray:
    """
    Flat writable uint8 view of a caller-owned buffer, checked against the
    image size. The buffer is never copied or resized.
    """
    try:
        pixels = np.frombuffer(buffer, dtype=np.uint8)
    except (TypeError, ValueError) as e:
        raise RenderConfigError("buffer", f"must expose a contiguous byte buffer ({e})") from e
    if pixels.size < settings.buffer_size:
        raise RenderConfigError(
            "buffer", f"holds {pixels.size} bytes, {settings.width}x{settings.height} RGBA needs {settings.buffer_size}")
    if not pixels.flags.writeable:
        raise RenderConfigError("buffer", "must be writable")
    return pixels

def trace_pixel(scene: Scene, camera: Camera, i: int, j: int, width: int, height: int,
                samples_per_pixel: int, max_depth: int) -> Vector3:
    """
    Sum of `samples_per_pixel` radiance estimates for pixel column i, row j
    (row 0 at the top), drawn from the calling thread's stream. Non-finite
    samples contribute nothing.
    """
    r = g = b = 0.0
    for _ in range(samples_per_pixel):
        s = (i + random_double()) / max(width - 1, 1)
        t = (height - 1 - j + random_double()) / max(height - 1, 1)
        ray = camera.get_ray(s, t)
        color = ray_color(ray, scene.background, scene.world, scene.lights, max_depth)
        if color.is_finite():
            r += color.x
            g += color.y
            b += color.z
    return Vector3(r, g, b)

class RenderJob:
    """
    Everything one render invocation needs, owned by that invocation: no
    state is shared between jobs.

    The scene and camera are read-only while tiles run. Tiles write disjoint
    byte ranges of the caller's buffer, so only the completion counter is
    guarded by a lock.
    """
    def __init__(self, pixels: np.ndarray, settings: RenderSettings, scene: Scene, camera: Camera):
        self.pixels = pixels
        self.settings = settings
        self.scene = scene
        self.camera = camera
        self.tiles = make_tiles(settings.width, settings.height, settings.tile_size)
        seeds = np.random.SeedSequence(settings.seed).spawn(len(self.tiles))
        self.tile_seeds = [int(s.generate_state(1)[0]) for s in seeds]
        self.total_tiles = len(self.tiles)
        self.completed_tiles = 0
        self.start_time = time.perf_counter()
        self.end_time: Optional[float] = None
        self.futures: List[Future] = []
        self.error: Optional[BaseException] = None
        self._lock = threading.Lock()
        self._finished = threading.Event()

    def render_tile(self, tile: Tile):
        """
        Render one tile with its own seeded stream and write its bytes.
        A failed tile still counts as finished; the first failure is kept
        in `error` and re-raised by `wait`.
        """
        settings = self.settings
        try:
            colors = np.empty((tile.height, tile.width, 3), dtype=np.float64)
            with sampling_stream(random.Random(self.tile_seeds[tile.index])):
                for row, j in enumerate(range(tile.y0, tile.y1)):
                    for col, i in enumerate(range(tile.x0, tile.x1)):
                        color = trace_pixel(self.scene, self.camera, i, j, settings.width, settings.height,
                                            settings.samples_per_pixel, settings.max_depth)
                        colors[row, col, 0] = color.x
                        colors[row, col, 1] = color.y
                        colors[row, col, 2] = color.z
            write_tile(self.pixels, colors, settings.width, tile.x0, tile.y0, settings.samples_per_pixel)
        except Exception as e:
            with self._lock:
                if self.error is None:
                    self.error = e
            logger.error("%r failed: %s", tile, e)
            raise
        finally:
            self._tile_done(tile)

    def _tile_done(self, tile: Tile):
        with self._lock:
            self.completed_tiles += 1
            last = self.completed_tiles == self.total_tiles
        logger.debug("Finished %r (%d/%d)", tile, self.completed_tiles, self.total_tiles)
        if last:
            self.end_time = time.perf_counter()
            if self.error is not None:
                logger.warning("Render of %dx%d finished with errors after %.2fs", self.settings.width,
                               self.settings.height, self.elapsed)
            else:
                logger.info("Rendered %dx%d in %.2fs (%d tiles)", self.settings.width,
                            self.settings.height, self.elapsed, self.total_tiles)
            self._finished.set()

    @property
    def elapsed(self) -> float:
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time

    def done(self) -> bool:
        return self._finished.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every tile finished. Re-raises the first exception a
        worker hit. Returns False on timeout.
        """
        finished = self._finished.wait(timeout)
        if self.error is not None:
            raise self.error
        return finished

class Renderer:
    """
    Tile-parallel path tracer front end.

    `render` queues one task per tile on a fixed thread pool and returns at
    once; `render_sync` runs the same tiles in order on the calling thread.
    Both produce identical bytes for the same seed. A render cannot be
    cancelled: callers must not reuse or free a buffer until its job is done.

    Tiles are traced in pure Python, so the GIL serializes the workers:
    the pool keeps the caller responsive and fills the image progressively,
    but more workers do not make a render faster.
    """
    def __init__(self, workers: Optional[int] = None, reserve_ui_thread: bool = True):
        if workers is None:
            workers = os.cpu_count() or 1
            if reserve_ui_thread:
                workers -= 1
        self.workers = max(1, workers)
        self._pool = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="tile")

    def prepare(self, buffer, width: int, height: int, samples_per_pixel: int, max_depth: int,
                camera_params: Optional[dict] = None, scene=SceneSelector.TWO_SPHERES,
                seed: int = 0, tile_size: Optional[int] = None, earth_image=None) -> RenderJob:
        """
        Validate the request and build the scene, BVH and camera. Nothing is
        written to `buffer` if this raises.
        """
        settings = RenderSettings(width, height, samples_per_pixel, max_depth, seed=seed)
        if tile_size is not None:
            settings.tile_size = tile_size
        settings.validate()
        pixels = pixel_view(buffer, settings)

        if isinstance(scene, Scene):
            built = scene
        else:
            with sampling_stream(random.Random(settings.seed)):
                built = build_scene(SceneSelector(scene), earth_image=earth_image)

        params = built.camera
        if camera_params:
            params = params.replace(**camera_params) if isinstance(camera_params, dict) else camera_params
        camera = Camera(params, settings.aspect_ratio)

        with sampling_stream(random.Random(settings.seed)):
            built.world.build_bvh(params.time0, params.time1)
        logger.debug("Prepared %r with %d top-level objects", settings, len(built.world))
        return RenderJob(pixels, settings, built, camera)

    def render(self, buffer, width: int, height: int, samples_per_pixel: int, max_depth: int,
               camera_params=None, scene=SceneSelector.TWO_SPHERES, seed: int = 0,
               **options) -> RenderJob:
        job = self.prepare(buffer, width, height, samples_per_pixel, max_depth,
                           camera_params, scene, seed, **options)
        job.futures = [self._pool.submit(job.render_tile, tile) for tile in job.tiles]
        return job

    def render_sync(self, buffer, width: int, height: int, samples_per_pixel: int, max_depth: int,
                    camera_params=None, scene=SceneSelector.TWO_SPHERES, seed: int = 0,
                    **options) -> RenderJob:
        job = self.prepare(buffer, width, height, samples_per_pixel, max_depth,
                           camera_params, scene, seed, **options)
        for tile in job.tiles:
            try:
                job.render_tile(tile)
            except Exception:
                continue  # kept on the job, raised by wait() below
        job.wait()
        return job

    def shutdown(self, wait: bool = True):
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "Renderer":
        return self

    def __exit__(self, *exc):
        self.shutdown()
