import statistics

import numpy as np
import pytest

from camera.camera import Camera, CameraParams
from core.vector import Vector3
from geometry.sphere import Sphere
from geometry.world import HittableList
from materials.material import Material
from renderer.integrator import solid_background
from renderer.raytracer import make_tiles, pixel_view, trace_pixel
from renderer.settings import RenderConfigError, RenderSettings
from renderer.tone_mapping import write_tile
from scenes import Scene, SceneSelector, build_scene, two_spheres


def _pixel(buffer, width, x, y):
    index = (y * width + x) * 4
    return tuple(buffer[index:index + 4])


class TestValidation:
    @pytest.mark.parametrize("kwargs, constraint", [
        (dict(width=0), "width"),
        (dict(height=-3), "height"),
        (dict(samples_per_pixel=0), "samples_per_pixel"),
        (dict(max_depth=-1), "max_depth"),
        (dict(width=2.5), "width"),
        (dict(seed=-1), "seed"),
    ])
    def test_bad_settings_rejected(self, renderer, kwargs, constraint):
        args = dict(width=4, height=4, samples_per_pixel=1, max_depth=2, seed=0)
        args.update(kwargs)
        buffer = bytearray(b"\xab" * 256)
        with pytest.raises(RenderConfigError) as info:
            renderer.render_sync(buffer, args.pop("width"), args.pop("height"), **args)
        assert info.value.constraint == constraint
        assert buffer == bytearray(b"\xab" * 256)

    def test_zero_tile_size_rejected(self, renderer):
        with pytest.raises(RenderConfigError) as info:
            renderer.render_sync(bytearray(64), 4, 4, 1, 1, tile_size=0)
        assert info.value.constraint == "tile_size"

    def test_short_buffer_rejected(self, renderer):
        buffer = bytearray(b"\xab" * (8 * 8 * 4 - 1))
        with pytest.raises(RenderConfigError) as info:
            renderer.render(buffer, 8, 8, 1, 1)
        assert info.value.constraint == "buffer"
        assert set(buffer) == {0xAB}

    def test_read_only_buffer_rejected(self):
        with pytest.raises(RenderConfigError):
            pixel_view(bytes(64), RenderSettings(4, 4))

    def test_non_buffer_rejected(self):
        with pytest.raises(RenderConfigError):
            pixel_view([0] * 64, RenderSettings(4, 4))

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            RenderSettings(0, 4).validate()

    def test_empty_scene_rejected(self, renderer):
        scene = two_spheres()
        scene.world = HittableList()
        with pytest.raises(ValueError):
            renderer.render_sync(bytearray(64), 4, 4, 1, 1, scene=scene)


class TestTiles:
    @pytest.mark.parametrize("width, height, size", [(32, 32, 16), (37, 21, 16), (5, 3, 8), (1, 1, 16)])
    def test_tiles_cover_each_pixel_once(self, width, height, size):
        coverage = np.zeros((height, width), dtype=int)
        tiles = make_tiles(width, height, size)
        for index, tile in enumerate(tiles):
            assert tile.index == index
            assert 0 < tile.width <= size and 0 < tile.height <= size
            coverage[tile.y0:tile.y1, tile.x0:tile.x1] += 1
        assert (coverage == 1).all()

    def test_tile_count(self):
        assert len(make_tiles(40, 20, 16)) == 3 * 2


class TestToneMapping:
    def test_gamma_clamp_and_alpha(self):
        pixels = np.zeros(2 * 1 * 4, dtype=np.uint8)
        colors = np.array([[[0.25, 4.0, -1.0], [np.nan, 1.0, 0.0]]], dtype=np.float64)
        write_tile(pixels, colors, 2, 0, 0, 1)
        assert list(pixels[:4]) == [128, 255, 0, 255]
        assert list(pixels[4:]) == [0, 255, 0, 255]

    def test_sum_is_averaged(self):
        pixels = np.zeros(4, dtype=np.uint8)
        write_tile(pixels, np.array([[[1.0, 1.0, 1.0]]]), 1, 0, 0, 4)
        assert list(pixels) == [128, 128, 128, 255]

    def test_offset_tile(self):
        pixels = np.zeros(3 * 2 * 4, dtype=np.uint8)
        write_tile(pixels, np.ones((1, 1, 3)), 3, 2, 1, 1)
        assert list(pixels[20:24]) == [255, 255, 255, 255]
        assert not pixels[:20].any()


class TestRender:
    def test_parallel_matches_sync(self, renderer):
        width, height = 24, 16
        parallel = bytearray(width * height * 4)
        serial = bytearray(width * height * 4)

        job = renderer.render(parallel, width, height, 2, 5, seed=11, tile_size=8)
        assert job.wait(timeout=300)
        assert job.done()
        assert job.completed_tiles == job.total_tiles == 6
        assert job.end_time is not None

        renderer.render_sync(serial, width, height, 2, 5, seed=11, tile_size=8)
        assert parallel == serial

    def test_same_seed_same_bytes(self, renderer):
        first = bytearray(12 * 8 * 4)
        second = bytearray(12 * 8 * 4)
        renderer.render_sync(first, 12, 8, 2, 4, seed=3)
        renderer.render_sync(second, 12, 8, 2, 4, seed=3)
        assert first == second

    def test_alpha_opaque(self, renderer):
        buffer = bytearray(10 * 6 * 4)
        renderer.render_sync(buffer, 10, 6, 1, 3)
        assert set(buffer[3::4]) == {255}

    def test_larger_buffer_tail_untouched(self, renderer):
        buffer = bytearray(b"\xab" * (6 * 4 * 4 + 16))
        renderer.render_sync(buffer, 6, 4, 1, 2)
        assert buffer[-16:] == bytearray(b"\xab" * 16)

    def test_camera_override(self, renderer):
        # Looking straight up from the origin sees only sky.
        buffer = bytearray(4 * 4 * 4)
        params = {"lookfrom": Vector3(0, 2, 0), "lookat": Vector3(0, 3, 0), "vup": Vector3(0, 0, 1)}
        renderer.render_sync(buffer, 4, 4, 2, 4, camera_params=params)
        for y in range(4):
            for x in range(4):
                r, g, b, a = _pixel(buffer, 4, x, y)
                assert b == 255 and r < b

    @pytest.mark.slow
    def test_two_spheres_orientation(self, renderer):
        width, height = 80, 45
        buffer = bytearray(width * height * 4)
        renderer.render_sync(buffer, width, height, 4, 10, scene=SceneSelector.TWO_SPHERES, seed=7)

        r, g, b, _ = _pixel(buffer, width, 40, 2)
        assert b > r
        top_row = [sum(_pixel(buffer, width, x, 0)[:3]) for x in range(width)]
        ground = sum(_pixel(buffer, width, 40, 36)[:3])
        assert ground < sum(top_row) / width

    def test_row_zero_is_top(self, renderer):
        # Camera looks at the horizon: sky above, ground below.
        width, height = 8, 8
        buffer = bytearray(width * height * 4)
        params = {"lookfrom": Vector3(0, 0.5, 4), "lookat": Vector3(0, 0.5, 0)}
        renderer.render_sync(buffer, width, height, 4, 4, camera_params=params, seed=5)
        top_blue = _pixel(buffer, width, 4, 0)[2]
        bottom_blue = _pixel(buffer, width, 4, height - 1)[2]
        assert top_blue > bottom_blue


class TestTracePixel:
    def test_noise_shrinks_with_samples(self, stream):
        scene = build_scene(SceneSelector.TWO_SPHERES)
        scene.world.build_bvh()
        camera = Camera(scene.camera, 1.0)

        def spread(spp):
            means = [trace_pixel(scene, camera, 4, 4, 9, 9, spp, 10).x / spp for _ in range(60)]
            return statistics.pstdev(means)

        coarse = spread(4)
        fine = spread(16)
        assert fine < coarse
        assert 1.2 < coarse / fine < 3.3

    def test_returns_sum(self, stream):
        background = solid_background(Vector3(0.2, 0.4, 0.6))
        scene = Scene(HittableList(), CameraParams(), background)
        camera = Camera(scene.camera, 1.0)
        color = trace_pixel(scene, camera, 0, 0, 1, 1, 5, 4)
        assert color.x == pytest.approx(1.0)
        assert color.y == pytest.approx(2.0)
        assert color.z == pytest.approx(3.0)


class _Exploding(Material):
    def scatter(self, ray_in, rec):
        raise RuntimeError("scatter failed")


def _exploding_scene():
    world = HittableList([Sphere(Vector3(0, 0, -1), 0.5, _Exploding())])
    return Scene(world, CameraParams())


class TestFailures:
    def test_failed_tiles_still_finish_job(self, renderer):
        job = renderer.render(bytearray(8 * 8 * 4), 8, 8, 1, 2, scene=_exploding_scene(), tile_size=4)
        with pytest.raises(RuntimeError):
            job.wait(timeout=60)
        assert job.done()
        assert job.completed_tiles == job.total_tiles == 4
        assert job.end_time is not None
        assert isinstance(job.error, RuntimeError)

    def test_sync_failure_raises_after_all_tiles(self, renderer):
        with pytest.raises(RuntimeError):
            renderer.render_sync(bytearray(8 * 8 * 4), 8, 8, 1, 2, scene=_exploding_scene(), tile_size=4)

    def test_renderer_usable_after_failure(self, renderer):
        job = renderer.render(bytearray(8 * 8 * 4), 8, 8, 1, 2, scene=_exploding_scene(), tile_size=4)
        with pytest.raises(RuntimeError):
            job.wait(timeout=60)
        buffer = bytearray(4 * 4 * 4)
        after = renderer.render(buffer, 4, 4, 1, 2)
        assert after.wait(timeout=60)
        assert after.error is None


class TestSettings:
    def test_numpy_sizes_accepted(self, renderer):
        plain = bytearray(4 * 3 * 4)
        numpy_sized = bytearray(4 * 3 * 4)
        renderer.render_sync(plain, 4, 3, 1, 2, seed=5)
        job = renderer.render_sync(numpy_sized, np.int64(4), np.int32(3), np.int64(1), np.int64(2),
                                   seed=np.int64(5))
        assert type(job.settings.width) is int
        assert type(job.settings.seed) is int
        assert plain == numpy_sized

    def test_zero_depth_renders_black(self, renderer):
        buffer = bytearray(4 * 4 * 4)
        renderer.render_sync(buffer, 4, 4, 2, 0)
        assert set(buffer[0::4]) == set(buffer[1::4]) == set(buffer[2::4]) == {0}
        assert set(buffer[3::4]) == {255}

    def test_bool_rejected(self):
        with pytest.raises(RenderConfigError) as info:
            RenderSettings(True, 4).validate()
        assert info.value.constraint == "width"
