# camera/camera.py
import math
from typing import Optional
from core.vector import Vector3
from core.ray import Ray
from core.utils import random_double, random_in_unit_disk

class CameraParams:
    """
    Pose and lens settings for a render. Scenes ship defaults; callers
    override individual fields with `replace`.
    """
    FIELDS = ("lookfrom", "lookat", "vup", "vfov", "aperture", "focus_dist", "time0", "time1")

    def __init__(self, lookfrom: Optional[Vector3] = None, lookat: Optional[Vector3] = None,
                 vup: Optional[Vector3] = None, vfov: float = 90.0, aperture: float = 0.0,
                 focus_dist: float = 10.0, time0: float = 0.0, time1: float = 1.0):
        self.lookfrom = lookfrom if lookfrom is not None else Vector3(0, 0, 0)
        self.lookat = lookat if lookat is not None else Vector3(0, 0, -1)
        self.vup = vup if vup is not None else Vector3(0, 1, 0)
        self.vfov = vfov              # Vertical field of view in degrees
        self.aperture = aperture      # Lens diameter; 0 disables depth of field
        self.focus_dist = focus_dist  # Distance to the plane in perfect focus
        self.time0 = time0            # Shutter open
        self.time1 = time1            # Shutter close

    def replace(self, **overrides) -> "CameraParams":
        unknown = set(overrides) - set(self.FIELDS)
        if unknown:
            raise TypeError(f"Unknown camera parameter(s): {', '.join(sorted(unknown))}")
        values = {name: getattr(self, name) for name in self.FIELDS}
        values.update(overrides)
        return CameraParams(**values)

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.FIELDS)
        return f"CameraParams({fields})"

class Camera:
    """
    Thin-lens camera. Immutable once built; safe to share between render
    threads.
    """
    def __init__(self, params: CameraParams, aspect_ratio: float):
        self.params = params
        self.position = params.lookfrom
        self.aspect_ratio = aspect_ratio
        self.focus_dist = params.focus_dist
        self.lens_radius = params.aperture / 2.0
        self.time0 = params.time0
        self.time1 = params.time1
        self.update_camera()

    def update_camera(self):
        """Computes the lens basis vectors and viewport."""
        theta = math.radians(self.params.vfov)
        viewport_height = 2.0 * math.tan(theta / 2)
        viewport_width = self.aspect_ratio * viewport_height

        self.w = (self.params.lookfrom - self.params.lookat).normalize()
        self.u = self.params.vup.cross(self.w).normalize()
        self.v = self.w.cross(self.u)

        # Scale by focus distance
        self.horizontal = self.u * viewport_width * self.focus_dist
        self.vertical = self.v * viewport_height * self.focus_dist

        self.lower_left_corner = (self.position -
                                  self.horizontal * 0.5 -
                                  self.vertical * 0.5 -
                                  self.w * self.focus_dist)

    def get_ray(self, s: float, t: float) -> Ray:
        """
        Generates a ray through viewport coordinates (s, t) in [0, 1]^2,
        (0, 0) being the lower-left corner, with depth of field and a random
        time inside the exposure window.
        """
        origin = self.position
        if self.lens_radius > 0:
            rd = random_in_unit_disk() * self.lens_radius
            origin = origin + self.u * rd.x + self.v * rd.y
        direction = (self.lower_left_corner +
                     self.horizontal * s +
                     self.vertical * t -
                     origin)
        return Ray(origin, direction, random_double(self.time0, self.time1))
