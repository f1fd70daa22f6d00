# geometry/world.py
import logging
from typing import Optional, List
from core.ray import Ray
from core.vector import Vector3
from core.aabb import AABB
from core.utils import random_int
from geometry.hittable import Hittable, HitRecord
from geometry.bvh import BVHNode

logger = logging.getLogger(__name__)

class HittableList(Hittable):
    """
    A list of Hittable objects. Optionally accelerated by a BVH built over
    the current contents.
    """
    def __init__(self, objects: Optional[List[Hittable]] = None):
        self.objects: List[Hittable] = list(objects) if objects else []
        self.bvh_root = None  # top-level BVH node

    def add(self, obj: Hittable):
        self.objects.append(obj)
        self.bvh_root = None

    def clear(self):
        self.objects.clear()
        self.bvh_root = None

    def __len__(self) -> int:
        return len(self.objects)

    def build_bvh(self, time0: float = 0.0, time1: float = 1.0) -> BVHNode:
        """
        Builds the BVH over the current objects. Raises ValueError when the
        list is empty.
        """
        # BVHNode sorts in place; keep our own ordering intact.
        self.bvh_root = BVHNode(list(self.objects), 0, len(self.objects), time0, time1)
        logger.debug("Built BVH over %d objects", len(self.objects))
        return self.bvh_root

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        if self.bvh_root is not None:
            return self.bvh_root.hit(ray, t_min, t_max)
        hit_record = None
        closest_so_far = t_max
        for obj in self.objects:
            rec = obj.hit(ray, t_min, closest_so_far)
            if rec is not None:
                closest_so_far = rec.t
                hit_record = rec
        return hit_record

    def bounding_box(self, time0: float = 0.0, time1: float = 1.0) -> AABB:
        if not self.objects:
            raise ValueError("An empty HittableList has no bounding box")
        box = self.objects[0].bounding_box(time0, time1)
        for obj in self.objects[1:]:
            box = AABB.surrounding_box(box, obj.bounding_box(time0, time1))
        return box

    def pdf_value(self, origin: Vector3, direction: Vector3) -> float:
        if not self.objects:
            return 0.0
        weight = 1.0 / len(self.objects)
        return sum(weight * obj.pdf_value(origin, direction) for obj in self.objects)

    def random(self, origin: Vector3) -> Vector3:
        if not self.objects:
            return super().random(origin)
        return self.objects[random_int(0, len(self.objects) - 1)].random(origin)
