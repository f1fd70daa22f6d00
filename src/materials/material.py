# materials/material.py
from typing import Optional
from core.ray import Ray
from core.vector import Vector3
from core.pdf import PDF
from geometry.hittable import HitRecord
from materials.textures import Texture, as_texture

BLACK = Vector3(0, 0, 0)

class ScatterRecord:
    """
    Result of a scatter event.

    `scattered` is a ray drawn from the material's own distribution and
    `pdf` is that distribution's density at the drawn direction; `pdf_dist`
    is the distribution itself so the integrator can mix it with light
    sampling. Specular records carry no distribution: the integrator follows
    `scattered` directly and weights it by `attenuation` alone.
    """
    __slots__ = ("attenuation", "scattered", "pdf", "pdf_dist", "is_specular")

    def __init__(self, attenuation: Vector3, scattered: Ray, pdf: float = 0.0,
                 pdf_dist: Optional[PDF] = None, is_specular: bool = False):
        self.attenuation = attenuation
        self.scattered = scattered
        self.pdf = pdf
        self.pdf_dist = pdf_dist
        self.is_specular = is_specular

class Material:
    """
    Abstract material class. Subclasses override the hooks they need: a
    material that neither scatters nor emits absorbs every ray.
    """
    def __init__(self, albedo=None):
        self.texture: Optional[Texture] = as_texture(albedo) if albedo is not None else None

    def scatter(self, ray_in: Ray, rec: HitRecord) -> Optional[ScatterRecord]:
        """
        Computes the scattered ray, attenuation and sampling density.
        Returns None if no scattering occurs.
        """
        return None

    def scattering_pdf(self, ray_in: Ray, rec: HitRecord, scattered: Ray) -> float:
        """Density the material itself assigns to `scattered`."""
        return 0.0

    def emitted(self, ray_in: Ray, rec: HitRecord, u: float, v: float, p: Vector3) -> Vector3:
        return BLACK

    def get_texture_color(self, rec: HitRecord) -> Vector3:
        """
        Color of the material's texture at the hit point.
        """
        return self.texture.sample(rec.uv, rec.p)
