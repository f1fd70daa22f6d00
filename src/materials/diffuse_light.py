# materials/diffuse_light.py
from typing import Union
from core.ray import Ray
from core.vector import Vector3
from geometry.hittable import HitRecord
from materials.material import Material, BLACK
from materials.textures import Texture

class DiffuseLight(Material):
    """
    Emissive material that provides constant radiance with optional texture support.

    Only the front face emits; the material never scatters.
    """
    def __init__(self, emit: Union[Vector3, Texture]):
        super().__init__(emit)

    def emitted(self, ray_in: Ray, rec: HitRecord, u: float, v: float, p: Vector3) -> Vector3:
        """
        Return the emitted radiance, which can be textured.
        """
        if not rec.front_face:
            return BLACK
        return self.texture.sample(rec.uv, p)
