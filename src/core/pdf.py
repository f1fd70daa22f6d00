# core/pdf.py
"""
Direction sampling strategies and their densities.

A PDF both draws a direction (`generate`) and reports the density of any
direction under that same distribution (`value`). The integrator divides
by `value` of the direction it actually traced, so the two must agree.
"""
import math
from core.vector import Vector3
from core.onb import ONB
from core.utils import random_cosine_direction, random_double, random_unit_vector

class PDF:
    """Abstract direction distribution."""
    def value(self, direction: Vector3) -> float:
        raise NotImplementedError("value() must be implemented by subclasses.")

    def generate(self) -> Vector3:
        raise NotImplementedError("generate() must be implemented by subclasses.")

class CosinePDF(PDF):
    """Cosine-weighted hemisphere around `w`."""
    def __init__(self, w: Vector3):
        self.uvw = ONB.build_from_w(w)

    def value(self, direction: Vector3) -> float:
        cosine = direction.normalize().dot(self.uvw.w)
        return 0.0 if cosine <= 0 else cosine / math.pi

    def generate(self) -> Vector3:
        return self.uvw.local(random_cosine_direction())

class SpherePDF(PDF):
    """Uniform over the whole sphere of directions."""
    def value(self, direction: Vector3) -> float:
        return 1.0 / (4.0 * math.pi)

    def generate(self) -> Vector3:
        return random_unit_vector()

class HittablePDF(PDF):
    """Directions from `origin` toward points on a shape (usually a light)."""
    def __init__(self, shape, origin: Vector3):
        self.shape = shape
        self.origin = origin

    def value(self, direction: Vector3) -> float:
        return self.shape.pdf_value(self.origin, direction)

    def generate(self) -> Vector3:
        return self.shape.random(self.origin)

class MixturePDF(PDF):
    """Even blend of two distributions."""
    def __init__(self, p0: PDF, p1: PDF):
        self.p0 = p0
        self.p1 = p1

    def value(self, direction: Vector3) -> float:
        return 0.5 * self.p0.value(direction) + 0.5 * self.p1.value(direction)

    def generate(self) -> Vector3:
        if random_double() < 0.5:
            return self.p0.generate()
        return self.p1.generate()
