# geometry/rect.py
from typing import Optional
from core.vector import Vector3
from core.ray import Ray
from core.uv import UV
from core.aabb import AABB
from core.utils import random_double
from geometry.hittable import Hittable, HitRecord

INFINITY = float("inf")

def _compose(a_axis: int, a: float, b_axis: int, b: float, k_axis: int, k: float) -> Vector3:
    coords = [0.0, 0.0, 0.0]
    coords[a_axis] = a
    coords[b_axis] = b
    coords[k_axis] = k
    return Vector3(*coords)

class AARect(Hittable):
    """
    Axis-aligned rectangle spanning [a0, a1] x [b0, b1] in the plane where
    the `k_axis` coordinate equals `k`.

    The outward normal points along +k_axis, or -k_axis when `flip` is set.
    A rectangle without a material is only useful as a light-sampling target.
    """
    a_axis = 0
    b_axis = 1
    k_axis = 2

    def __init__(self, a0: float, a1: float, b0: float, b1: float, k: float,
                 material=None, flip: bool = False):
        self.a0 = a0
        self.a1 = a1
        self.b0 = b0
        self.b1 = b1
        self.k = k
        self.material = material
        self.flip = flip
        sign = -1.0 if flip else 1.0
        self.outward_normal = _compose(self.a_axis, 0.0, self.b_axis, 0.0, self.k_axis, sign)
        self.area = (a1 - a0) * (b1 - b0)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        d_k = ray.direction[self.k_axis]
        if d_k == 0:
            return None
        t = (self.k - ray.origin[self.k_axis]) / d_k
        if t < t_min or t > t_max:
            return None
        a = ray.origin[self.a_axis] + t * ray.direction[self.a_axis]
        b = ray.origin[self.b_axis] + t * ray.direction[self.b_axis]
        if a < self.a0 or a > self.a1 or b < self.b0 or b > self.b1:
            return None

        rec = HitRecord()
        rec.t = t
        rec.uv = UV((a - self.a0) / (self.a1 - self.a0), (b - self.b0) / (self.b1 - self.b0))
        rec.set_face_normal(ray, self.outward_normal)
        rec.material = self.material
        rec.p = ray.at(t)
        return rec

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> AABB:
        box = AABB(_compose(self.a_axis, self.a0, self.b_axis, self.b0, self.k_axis, self.k),
                   _compose(self.a_axis, self.a1, self.b_axis, self.b1, self.k_axis, self.k))
        return box.pad()

    def pdf_value(self, origin: Vector3, direction: Vector3) -> float:
        rec = self.hit(Ray(origin, direction), 0.001, INFINITY)
        if rec is None:
            return 0.0
        length_squared = direction.length_squared()
        distance_squared = rec.t * rec.t * length_squared
        cosine = abs(direction.dot(self.outward_normal)) / (length_squared ** 0.5)
        if cosine < 1e-8:
            return 0.0
        return distance_squared / (cosine * self.area)

    def random(self, origin: Vector3) -> Vector3:
        point = _compose(self.a_axis, random_double(self.a0, self.a1),
                         self.b_axis, random_double(self.b0, self.b1),
                         self.k_axis, self.k)
        return point - origin

class XYRect(AARect):
    a_axis, b_axis, k_axis = 0, 1, 2

class XZRect(AARect):
    a_axis, b_axis, k_axis = 0, 2, 1

class YZRect(AARect):
    a_axis, b_axis, k_axis = 1, 2, 0
