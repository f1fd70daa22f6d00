import math

import pytest
from PIL import Image

from core.ray import Ray
from core.uv import UV
from core.vector import Vector3
from geometry.hittable import HitRecord
from geometry.sphere import Sphere
from materials.dielectric import Dielectric, schlick
from materials.diffuse_light import DiffuseLight
from materials.isotropic import Isotropic
from materials.lambertian import Lambertian
from materials.material import Material
from materials.metal import Metal
from materials.texture_loader import decode_image
from materials.textures import CheckerTexture, ImageTexture, NoiseTexture, SolidTexture


def _record(normal, front_face=True, p=Vector3(0, 0, 0), material=None):
    rec = HitRecord(p=p, normal=normal, t=1.0, front_face=front_face, material=material)
    return rec


def _collinear(a, b):
    a = a.normalize()
    b = b.normalize()
    return a.cross(b).length() < 1e-9 and a.dot(b) > 0


def test_lambertian_scatter_is_self_consistent(stream):
    material = Lambertian(Vector3(0.2, 0.4, 0.6))
    rec = _record(Vector3(0, 1, 0))
    ray_in = Ray(Vector3(0, 1, 1), Vector3(0, -1, -1), time=0.25)
    for _ in range(100):
        srec = material.scatter(ray_in, rec)
        assert not srec.is_specular
        assert srec.attenuation == Vector3(0.2, 0.4, 0.6)
        assert srec.scattered.time == 0.25
        direction = srec.scattered.direction
        assert direction.y >= -1e-12
        assert srec.pdf == pytest.approx(material.scattering_pdf(ray_in, rec, srec.scattered))
        assert srec.pdf == pytest.approx(srec.pdf_dist.value(direction))
    below = Ray(Vector3(0, 0, 0), Vector3(0, -1, 0))
    assert material.scattering_pdf(ray_in, rec, below) == 0.0


def test_metal_reflects_and_absorbs(stream):
    mirror = Metal(Vector3(0.9, 0.9, 0.9), 0.0)
    rec = _record(Vector3(0, 1, 0))
    srec = mirror.scatter(Ray(Vector3(-1, 1, 0), Vector3(1, -1, 0)), rec)
    assert srec.is_specular
    assert _collinear(srec.scattered.direction, Vector3(1, 1, 0))
    assert Metal(Vector3(1, 1, 1), 5.0).fuzz == 1

    # A grazing ray with maximal fuzz is absorbed some of the time.
    fuzzy = Metal(Vector3(1, 1, 1), 1.0)
    grazing = Ray(Vector3(-1, 0.01, 0), Vector3(1, -0.01, 0))
    results = [fuzzy.scatter(grazing, rec) for _ in range(200)]
    assert any(r is None for r in results)
    assert all(r.scattered.direction.dot(rec.normal) > 0 for r in results if r is not None)


def test_dielectric_index_one_is_transparent(stream):
    glass = Dielectric(1.0)
    sphere = Sphere(Vector3(0, 0, 0), 1.0, glass)
    direction = Vector3(1, 0.05, 0.02).normalize()
    ray = Ray(Vector3(-3, 0.3, 0.2), direction)
    for _ in range(50):
        entry = sphere.hit(ray, 0.001, math.inf)
        assert entry.front_face
        inside = glass.scatter(ray, entry)
        assert inside.attenuation == Vector3(1, 1, 1)
        assert _collinear(inside.scattered.direction, direction)

        exit_rec = sphere.hit(inside.scattered, 0.001, math.inf)
        assert not exit_rec.front_face
        outside = glass.scatter(inside.scattered, exit_rec)
        assert _collinear(outside.scattered.direction, direction)


def test_dielectric_total_internal_reflection(stream):
    glass = Dielectric(1.5)
    rec = _record(Vector3(0, 1, 0), front_face=False)
    ray = Ray(Vector3(-1, 0.1, 0), Vector3(1, -0.1, 0))
    for _ in range(20):
        srec = glass.scatter(ray, rec)
        assert srec.is_specular
        assert srec.scattered.direction.y > 0


def test_dielectric_refracts_head_on(stream):
    glass = Dielectric(1.5)
    rec = _record(Vector3(0, 1, 0))
    ray = Ray(Vector3(0, 1, 0), Vector3(0, -1, 0))
    directions = [glass.scatter(ray, rec).scattered.direction for _ in range(400)]
    reflected = sum(1 for d in directions if d.y > 0)
    # Normal incidence reflects ((1 - 1.5) / (1 + 1.5))^2 = 4% of the time.
    assert 2 <= reflected <= 40


def test_schlick():
    assert schlick(1.0, 1.0) == 0.0
    assert schlick(0.3, 1.0) == 0.0
    assert schlick(1.0, 1 / 1.5) == pytest.approx(0.04)
    assert schlick(0.0, 1 / 1.5) == pytest.approx(1.0)


def test_diffuse_light_emits_front_face_only():
    light = DiffuseLight(Vector3(4, 4, 4))
    ray = Ray(Vector3(0, 1, 0), Vector3(0, -1, 0))
    assert light.scatter(ray, _record(Vector3(0, 1, 0))) is None
    front = _record(Vector3(0, 1, 0), front_face=True)
    back = _record(Vector3(0, 1, 0), front_face=False)
    assert light.emitted(ray, front, 0, 0, front.p) == Vector3(4, 4, 4)
    assert light.emitted(ray, back, 0, 0, back.p) == Vector3(0, 0, 0)


def test_base_material_absorbs():
    material = Material()
    rec = _record(Vector3(0, 1, 0))
    ray = Ray(Vector3(0, 1, 0), Vector3(0, -1, 0))
    assert material.scatter(ray, rec) is None
    assert material.emitted(ray, rec, 0, 0, rec.p) == Vector3(0, 0, 0)
    assert material.scattering_pdf(ray, rec, ray) == 0.0


def test_isotropic_scatters_everywhere(stream):
    fog = Isotropic(Vector3(0.5, 0.5, 0.5))
    rec = _record(Vector3(1, 0, 0))
    ray = Ray(Vector3(0, 0, 0), Vector3(1, 0, 0))
    directions = [fog.scatter(ray, rec).scattered.direction for _ in range(200)]
    assert any(d.x < 0 for d in directions) and any(d.x > 0 for d in directions)
    assert fog.scattering_pdf(ray, rec, ray) == pytest.approx(1 / (4 * math.pi))


def test_checker_texture_alternates():
    checker = CheckerTexture(Vector3(1, 1, 1), Vector3(0, 0, 0), 1.0)
    uv = UV(0, 0)
    assert checker.sample(uv, Vector3(0.5, 0.5, 0.5)) == Vector3(1, 1, 1)
    assert checker.sample(uv, Vector3(1.5, 0.5, 0.5)) == Vector3(0, 0, 0)
    assert checker.sample(uv, Vector3(1.5, 1.5, 0.5)) == Vector3(1, 1, 1)
    assert checker.sample(uv, Vector3(-0.5, 0.5, 0.5)) == Vector3(0, 0, 0)
    nested = CheckerTexture(SolidTexture(Vector3(0.1, 0.1, 0.1)), Vector3(0.9, 0.9, 0.9), 2.0)
    assert nested.sample(uv, Vector3(1, 1, 1)) == Vector3(0.1, 0.1, 0.1)
    with pytest.raises(TypeError):
        CheckerTexture("red", Vector3(0, 0, 0))


def test_image_texture_nearest_lookup():
    # Rows top to bottom: red green / blue white.
    data = bytes([255, 0, 0, 0, 255, 0,
                  0, 0, 255, 255, 255, 255])
    texture = ImageTexture.from_image((2, 2, 3, data))
    p = Vector3(0, 0, 0)
    assert texture.sample(UV(0.1, 0.9), p) == Vector3(1, 0, 0)
    assert texture.sample(UV(0.9, 0.9), p) == Vector3(0, 1, 0)
    assert texture.sample(UV(0.1, 0.1), p) == Vector3(0, 0, 1)
    assert texture.sample(UV(1.0, 0.0), p) == Vector3(1, 1, 1)
    assert texture.sample(UV(-3, 7), p) == Vector3(1, 0, 0)


def test_image_texture_without_data_is_cyan():
    assert ImageTexture().sample(UV(0.5, 0.5), Vector3(0, 0, 0)) == Vector3(0, 1, 1)


def test_image_texture_rejects_short_data():
    with pytest.raises(ValueError):
        ImageTexture(4, 4, 3, bytes(10))


def test_image_texture_accepts_rgba():
    data = bytes([10, 20, 30, 255])
    texture = ImageTexture(1, 1, 4, data)
    color = texture.sample(UV(0.5, 0.5), Vector3(0, 0, 0))
    assert color.x == pytest.approx(10 / 255)
    assert color.z == pytest.approx(30 / 255)


def test_noise_texture_is_bounded_and_deterministic(stream):
    import random
    from core.utils import sampling_stream

    with sampling_stream(random.Random(3)):
        first = NoiseTexture(4)
    with sampling_stream(random.Random(3)):
        second = NoiseTexture(4)
    for i in range(50):
        p = Vector3(i * 0.37, i * 0.11, -i * 0.23)
        value = first.sample(UV(0, 0), p)
        assert 0.0 <= value.x <= 1.0
        assert value.x == value.y == value.z
        assert second.sample(UV(0, 0), p) == value
    assert abs(first.noise.noise(Vector3(0.3, 0.6, 0.9))) <= 1.0 + 1e-9
    # Lattice points have zero noise.
    assert first.noise.noise(Vector3(2.0, 3.0, 4.0)) == pytest.approx(0.0, abs=1e-12)


def test_decode_image_feeds_texture(tmp_path):
    path = tmp_path / "tiny.png"
    image = Image.new("RGBA", (2, 1))
    image.putdata([(255, 0, 0, 255), (0, 0, 255, 128)])
    image.save(path)

    decoded = decode_image(str(path))
    assert (decoded.width, decoded.height, decoded.channels) == (2, 1, 3)
    texture = ImageTexture.from_image(decoded)
    assert texture.sample(UV(0.1, 0.5), Vector3(0, 0, 0)) == Vector3(1, 0, 0)
    assert texture.sample(UV(0.9, 0.5), Vector3(0, 0, 0)) == Vector3(0, 0, 1)


def test_decode_image_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        decode_image(str(tmp_path / "missing.png"))
    junk = tmp_path / "junk.png"
    junk.write_bytes(b"not an image")
    with pytest.raises(ValueError):
        decode_image(str(junk))
