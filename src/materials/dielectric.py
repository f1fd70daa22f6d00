# materials/dielectric.py
import math
from typing import Optional
from core.ray import Ray
from core.vector import Vector3
from core.utils import random_double, reflect, refract
from geometry.hittable import HitRecord
from materials.material import Material, ScatterRecord

class Dielectric(Material):
    """
    Clear refractive material (glass, water). Never tints the light.
    """
    def __init__(self, ref_idx: float):
        super().__init__()
        self.ref_idx = ref_idx

    def scatter(self, ray_in: Ray, rec: HitRecord) -> Optional[ScatterRecord]:
        attenuation = Vector3(1.0, 1.0, 1.0)  # Glass doesn't absorb light

        # Determine if we're entering or exiting the material
        ni_over_nt = 1.0 / self.ref_idx if rec.front_face else self.ref_idx

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(rec.normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        cannot_refract = ni_over_nt * sin_theta > 1.0
        if cannot_refract or schlick(cos_theta, ni_over_nt) > random_double():
            direction = reflect(unit_direction, rec.normal)
        else:
            direction = refract(unit_direction, rec.normal, ni_over_nt)

        return ScatterRecord(attenuation, Ray(rec.p, direction, ray_in.time), is_specular=True)

def schlick(cos_theta: float, ref_idx: float) -> float:
    """
    Schlick's approximation of Fresnel reflectance.
    """
    # Matched indices form no optical interface.
    if ref_idx == 1.0:
        return 0.0
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * math.pow((1.0 - cos_theta), 5)
