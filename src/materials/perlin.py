# materials/perlin.py
import numpy as np
from numba import njit
from core.utils import random_double, random_int
from core.vector import Vector3

POINT_COUNT = 256

@njit(cache=True, nogil=True)
def perlin_noise(ranvec, perm_x, perm_y, perm_z, x, y, z):
    """Gradient noise in [-1, 1] with Hermite-smoothed trilinear blending."""
    fx = np.floor(x)
    fy = np.floor(y)
    fz = np.floor(z)
    u = x - fx
    v = y - fy
    w = z - fz
    i = int(fx)
    j = int(fy)
    k = int(fz)

    uu = u * u * (3 - 2 * u)
    vv = v * v * (3 - 2 * v)
    ww = w * w * (3 - 2 * w)
    accum = 0.0
    for di in range(2):
        for dj in range(2):
            for dk in range(2):
                idx = perm_x[(i + di) & 255] ^ perm_y[(j + dj) & 255] ^ perm_z[(k + dk) & 255]
                gx = ranvec[idx, 0]
                gy = ranvec[idx, 1]
                gz = ranvec[idx, 2]
                wx = u - di
                wy = v - dj
                wz = w - dk
                accum += ((di * uu + (1 - di) * (1 - uu)) *
                          (dj * vv + (1 - dj) * (1 - vv)) *
                          (dk * ww + (1 - dk) * (1 - ww)) *
                          (gx * wx + gy * wy + gz * wz))
    return accum

@njit(cache=True, nogil=True)
def perlin_turbulence(ranvec, perm_x, perm_y, perm_z, x, y, z, depth):
    """Sum of |noise| over `depth` octaves."""
    accum = 0.0
    weight = 1.0
    for _ in range(depth):
        accum += weight * perlin_noise(ranvec, perm_x, perm_y, perm_z, x, y, z)
        weight *= 0.5
        x *= 2.0
        y *= 2.0
        z *= 2.0
    return abs(accum)

def _generate_perm() -> np.ndarray:
    p = list(range(POINT_COUNT))
    # Fisher-Yates on the thread's stream so scene builds are reproducible.
    for i in range(POINT_COUNT - 1, 0, -1):
        target = random_int(0, i)
        p[i], p[target] = p[target], p[i]
    return np.array(p, dtype=np.int64)

class Perlin:
    """
    Perlin noise generator with random unit gradient vectors.
    """
    def __init__(self):
        ranvec = []
        for _ in range(POINT_COUNT):
            g = Vector3(random_double(-1, 1), random_double(-1, 1), random_double(-1, 1)).normalize()
            ranvec.append((g.x, g.y, g.z))
        self.ranvec = np.array(ranvec, dtype=np.float64)
        self.perm_x = _generate_perm()
        self.perm_y = _generate_perm()
        self.perm_z = _generate_perm()

    def noise(self, p: Vector3) -> float:
        return perlin_noise(self.ranvec, self.perm_x, self.perm_y, self.perm_z, p.x, p.y, p.z)

    def turb(self, p: Vector3, depth: int = 7) -> float:
        return perlin_turbulence(self.ranvec, self.perm_x, self.perm_y, self.perm_z,
                                 p.x, p.y, p.z, depth)
