# geometry/bvh.py
from typing import List, Optional
from core.aabb import AABB
from core.ray import Ray
from core.utils import random_int
from geometry.hittable import Hittable, HitRecord

class BVHNode(Hittable):
    """
    Binary bounding volume hierarchy over objects[start:end].

    Each level splits along a randomly chosen axis at the median of the
    objects sorted by their box minimum on that axis. A single object fills
    both children; two objects become the two leaves.
    """
    def __init__(self, objects: List[Hittable], start: int, end: int,
                 time0: float = 0.0, time1: float = 1.0):
        object_span = end - start
        if object_span <= 0:
            raise ValueError("BVH construction requires at least one object")

        axis = random_int(0, 2)

        if object_span == 1:
            self.left = self.right = objects[start]
        elif object_span == 2:
            first, second = objects[start], objects[start + 1]
            if first.bounding_box(time0, time1).axis_min(axis) <= second.bounding_box(time0, time1).axis_min(axis):
                self.left, self.right = first, second
            else:
                self.left, self.right = second, first
        else:
            objects[start:end] = sorted(
                objects[start:end],
                key=lambda obj: obj.bounding_box(time0, time1).axis_min(axis))
            mid = start + object_span // 2
            self.left = BVHNode(objects, start, mid, time0, time1)
            self.right = BVHNode(objects, mid, end, time0, time1)

        self.box = AABB.surrounding_box(self.left.bounding_box(time0, time1),
                                        self.right.bounding_box(time0, time1))

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        if not self.box.hit(ray, t_min, t_max):
            return None

        hit_left = self.left.hit(ray, t_min, t_max)

        # Update t_max for right branch if we hit something on the left
        if hit_left is not None:
            t_max = hit_left.t

        if self.right is self.left:
            return hit_left

        hit_right = self.right.hit(ray, t_min, t_max)
        return hit_right if hit_right is not None else hit_left

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> AABB:
        return self.box
