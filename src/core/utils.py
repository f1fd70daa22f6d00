# core/utils.py
import math
import random
import threading
from contextlib import contextmanager
from typing import Iterator, Optional
from core.vector import Vector3

# Each thread draws from its own stream so tiles rendered on different
# workers never contend for (or perturb) a shared generator.
_local = threading.local()

def current_rng() -> random.Random:
    """
    Returns the random stream bound to the calling thread, creating an
    unseeded one on first use.
    """
    rng = getattr(_local, "rng", None)
    if rng is None:
        rng = random.Random()
        _local.rng = rng
    return rng

@contextmanager
def sampling_stream(rng: random.Random) -> Iterator[random.Random]:
    """
    Binds `rng` as the calling thread's stream for the duration of the block.
    """
    previous: Optional[random.Random] = getattr(_local, "rng", None)
    _local.rng = rng
    try:
        yield rng
    finally:
        _local.rng = previous

def random_double(low: float = 0.0, high: float = 1.0) -> float:
    """Returns a random float in [low, high)."""
    return low + (high - low) * current_rng().random()

def random_int(low: int, high: int) -> int:
    """Returns a random integer in [low, high]."""
    return current_rng().randint(low, high)

def random_vector(low: float = 0.0, high: float = 1.0) -> Vector3:
    return Vector3(random_double(low, high), random_double(low, high), random_double(low, high))

def random_in_unit_sphere() -> Vector3:
    """
    Returns a random point inside a unit sphere.
    """
    while True:
        p = random_vector(-1, 1)
        if p.length_squared() < 1.0:
            return p

def random_unit_vector() -> Vector3:
    """
    Returns a random unit vector (uniformly distributed over the sphere).
    """
    return random_in_unit_sphere().normalize()

def random_in_unit_disk() -> Vector3:
    """Random point in the z = 0 unit disk, used for lens sampling."""
    while True:
        p = Vector3(random_double(-1, 1), random_double(-1, 1), 0)
        if p.length_squared() < 1.0:
            return p

def random_cosine_direction() -> Vector3:
    """
    Returns a direction on the +z hemisphere with density cos(theta) / pi.
    """
    r1 = random_double()
    r2 = random_double()
    phi = 2 * math.pi * r1
    sqrt_r2 = math.sqrt(r2)
    x = math.cos(phi) * sqrt_r2
    y = math.sin(phi) * sqrt_r2
    z = math.sqrt(1 - r2)
    return Vector3(x, y, z)

def random_to_sphere(radius: float, distance_squared: float) -> Vector3:
    """
    Returns a direction uniformly distributed over the cone subtended by a
    sphere of `radius` whose center lies `distance_squared` away along +z.
    """
    r1 = random_double()
    r2 = random_double()
    z = 1 + r2 * (math.sqrt(max(0.0, 1 - radius * radius / distance_squared)) - 1)
    phi = 2 * math.pi * r1
    s = math.sqrt(max(0.0, 1 - z * z))
    return Vector3(math.cos(phi) * s, math.sin(phi) * s, z)

def reflect(v: Vector3, n: Vector3) -> Vector3:
    """
    Reflects vector v about the normal n.
    """
    return v - n * 2 * v.dot(n)

def refract(uv: Vector3, n: Vector3, etai_over_etat: float) -> Vector3:
    """
    Refracts the unit vector uv through a surface with normal n (Snell's law).
    """
    cos_theta = min(-uv.dot(n), 1.0)
    r_out_perp = (uv + n * cos_theta) * etai_over_etat
    r_out_parallel = n * (-math.sqrt(abs(1.0 - r_out_perp.length_squared())))
    return r_out_perp + r_out_parallel
