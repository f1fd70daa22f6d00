# renderer/integrator.py
import math
from typing import Callable, Optional
from core.ray import Ray
from core.vector import Vector3
from core.pdf import HittablePDF, MixturePDF
from geometry.hittable import Hittable

INFINITY = float("inf")
T_MIN = 0.001         # Ignore hits this close to the origin (shadow acne)
MIN_PDF = 1e-8

BLACK = Vector3(0, 0, 0)

Background = Callable[[Ray], Vector3]

def sky_gradient(ray: Ray) -> Vector3:
    """White at the horizon blending to light blue overhead."""
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return Vector3(1.0, 1.0, 1.0) * (1.0 - t) + Vector3(0.5, 0.7, 1.0) * t

def solid_background(color: Vector3) -> Background:
    """A background of one constant color."""
    def background(ray: Ray) -> Vector3:
        return color
    return background

def ray_color(ray: Ray, background: Background, world: Hittable,
              lights: Optional[Hittable], depth: int) -> Vector3:
    """
    Radiance arriving along `ray`.

    Diffuse bounces sample half the time toward `lights` and half from the
    material's own distribution, dividing by the density of the mixture.
    """
    if depth <= 0:
        return BLACK

    rec = world.hit(ray, T_MIN, INFINITY)
    if rec is None:
        return background(ray)

    material = rec.material
    emitted = material.emitted(ray, rec, rec.uv.u, rec.uv.v, rec.p)
    srec = material.scatter(ray, rec)
    if srec is None:
        return emitted

    if srec.is_specular:
        return emitted + srec.attenuation * ray_color(srec.scattered, background, world, lights, depth - 1)

    if lights is None:
        scattered = srec.scattered
        pdf_val = srec.pdf
    else:
        mixture = MixturePDF(HittablePDF(lights, rec.p), srec.pdf_dist)
        scattered = Ray(rec.p, mixture.generate(), ray.time)
        pdf_val = mixture.value(scattered.direction)

    if not (pdf_val > MIN_PDF) or not math.isfinite(pdf_val) or scattered.direction.near_zero():
        return emitted

    scattering_pdf = material.scattering_pdf(ray, rec, scattered)
    if scattering_pdf <= 0:
        return emitted

    incoming = ray_color(scattered, background, world, lights, depth - 1)
    return emitted + srec.attenuation * incoming * (scattering_pdf / pdf_val)
