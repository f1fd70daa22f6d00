# materials/lambertian.py
import math
from typing import Optional, Union
from core.ray import Ray
from core.vector import Vector3
from core.pdf import CosinePDF
from geometry.hittable import HitRecord
from materials.material import Material, ScatterRecord
from materials.textures import Texture

class Lambertian(Material):
    """
    Lambertian diffuse material with optional texture support.
    """
    def __init__(self, albedo: Union[Vector3, Texture]):
        super().__init__(albedo)

    def scatter(self, ray_in: Ray, rec: HitRecord) -> Optional[ScatterRecord]:
        """
        Cosine-weighted scatter around the surface normal.
        """
        pdf_dist = CosinePDF(rec.normal)
        direction = pdf_dist.generate().normalize()
        scattered = Ray(rec.p, direction, ray_in.time)
        return ScatterRecord(
            attenuation=self.get_texture_color(rec),
            scattered=scattered,
            pdf=pdf_dist.uvw.w.dot(direction) / math.pi,
            pdf_dist=pdf_dist,
        )

    def scattering_pdf(self, ray_in: Ray, rec: HitRecord, scattered: Ray) -> float:
        cosine = rec.normal.dot(scattered.direction.normalize())
        return 0.0 if cosine < 0 else cosine / math.pi
