# materials/isotropic.py
import math
from typing import Optional, Union
from core.ray import Ray
from core.vector import Vector3
from core.pdf import SpherePDF
from geometry.hittable import HitRecord
from materials.material import Material, ScatterRecord
from materials.textures import Texture

class Isotropic(Material):
    """Phase function of a participating medium: scatters uniformly in all directions."""
    def __init__(self, albedo: Union[Vector3, Texture]):
        super().__init__(albedo)

    def scatter(self, ray_in: Ray, rec: HitRecord) -> Optional[ScatterRecord]:
        pdf_dist = SpherePDF()
        scattered = Ray(rec.p, pdf_dist.generate(), ray_in.time)
        return ScatterRecord(self.get_texture_color(rec), scattered,
                             pdf=1.0 / (4.0 * math.pi), pdf_dist=pdf_dist)

    def scattering_pdf(self, ray_in: Ray, rec: HitRecord, scattered: Ray) -> float:
        return 1.0 / (4.0 * math.pi)
