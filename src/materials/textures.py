# materials/textures.py
import math
from typing import Optional
import numpy as np
from core.vector import Vector3
from core.uv import UV
from materials.perlin import Perlin

class Texture:
    """Base class for all textures."""
    def sample(self, uv: UV, p: Vector3) -> Vector3:
        """Sample the texture at given UV coordinates and hit point."""
        raise NotImplementedError("sample() must be implemented by texture subclasses.")

class SolidTexture(Texture):
    """A solid color texture."""
    def __init__(self, color: Vector3):
        self.color = color

    def sample(self, uv: UV, p: Vector3) -> Vector3:
        return self.color

class CheckerTexture(Texture):
    """
    A 3D checker pattern: cells of size `scale` alternate by the parity of
    the sum of the floored scaled coordinates.
    """
    def __init__(self, even, odd, scale: float = 1.0):
        self.even = as_texture(even)
        self.odd = as_texture(odd)
        self.inv_scale = 1.0 / scale

    def sample(self, uv: UV, p: Vector3) -> Vector3:
        x = math.floor(self.inv_scale * p.x)
        y = math.floor(self.inv_scale * p.y)
        z = math.floor(self.inv_scale * p.z)
        is_even = (x + y + z) % 2 == 0
        return self.even.sample(uv, p) if is_even else self.odd.sample(uv, p)

class NoiseTexture(Texture):
    """A marble-like procedural texture driven by Perlin turbulence."""
    def __init__(self, scale: float = 1.0):
        self.noise = Perlin()
        self.scale = scale

    def sample(self, uv: UV, p: Vector3) -> Vector3:
        value = 0.5 * (1 + math.sin(self.scale * p.z + 10 * self.noise.turb(p)))
        return Vector3(value, value, value)

class ImageTexture(Texture):
    """
    A texture over an already decoded image: `data` holds `height` rows of
    `width` pixels with `channels` bytes each (RGB or RGBA, row 0 at the top).
    Lookup is nearest-pixel.
    """
    def __init__(self, width: int = 0, height: int = 0, channels: int = 3, data: Optional[bytes] = None):
        self.width = width
        self.height = height
        self.channels = channels
        self.data = None
        if data is not None and width > 0 and height > 0:
            if channels < 3:
                raise ValueError(f"Image textures need at least 3 channels, got {channels}")
            pixels = np.frombuffer(bytes(data), dtype=np.uint8)
            if pixels.size < width * height * channels:
                raise ValueError(
                    f"Image data holds {pixels.size} bytes, expected {width * height * channels}")
            self.data = pixels[:width * height * channels].reshape(height, width, channels) / 255.0

    @classmethod
    def from_image(cls, image) -> "ImageTexture":
        """Build from a (width, height, channels, data) tuple."""
        width, height, channels, data = image
        return cls(width, height, channels, data)

    def sample(self, uv: UV, p: Vector3) -> Vector3:
        # Debug cyan when there is no image to sample.
        if self.data is None:
            return Vector3(0, 1, 1)

        u = min(max(uv.u, 0.0), 1.0)
        v = 1.0 - min(max(uv.v, 0.0), 1.0)  # Flip V to image coordinates

        # Convert to pixel coordinates
        x = min(int(u * self.width), self.width - 1)
        y = min(int(v * self.height), self.height - 1)

        color = self.data[y, x]
        return Vector3(float(color[0]), float(color[1]), float(color[2]))

def as_texture(value) -> Texture:
    """Wraps a plain color in a SolidTexture; textures pass through."""
    if isinstance(value, Texture):
        return value
    if isinstance(value, Vector3):
        return SolidTexture(value)
    raise TypeError(f"Expected a Vector3 color or a Texture, got {type(value).__name__}")
