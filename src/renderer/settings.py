# renderer/settings.py
import numbers

DEFAULT_TILE_SIZE = 16
DEFAULT_SAMPLES = 100
DEFAULT_MAX_DEPTH = 50
BYTES_PER_PIXEL = 4

# Presets the preview app cycles through.
QUALITY_LEVELS = {
    "draft": {"samples": 4, "max_depth": 8},
    "balanced": {"samples": 32, "max_depth": 20},
    "final": {"samples": DEFAULT_SAMPLES, "max_depth": DEFAULT_MAX_DEPTH},
}

class RenderConfigError(ValueError):
    """
    A render was requested with settings that cannot produce an image.
    `constraint` names the parameter that was rejected.
    """
    def __init__(self, constraint: str, message: str):
        super().__init__(f"{constraint}: {message}")
        self.constraint = constraint

class RenderSettings:
    """Image-level parameters of one render invocation."""
    def __init__(self, width: int, height: int, samples_per_pixel: int = DEFAULT_SAMPLES,
                 max_depth: int = DEFAULT_MAX_DEPTH, tile_size: int = DEFAULT_TILE_SIZE,
                 seed: int = 0):
        self.width = width
        self.height = height
        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth
        self.tile_size = tile_size
        self.seed = seed

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def buffer_size(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL

    def validate(self):
        """
        Raises RenderConfigError for the first violated constraint. Any
        integral type is accepted (numpy sizes included) and stored as int.
        A max_depth of 0 is allowed and renders black.
        """
        for name in ("width", "height", "samples_per_pixel", "max_depth", "tile_size", "seed"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Integral) or isinstance(value, bool):
                raise RenderConfigError(name, f"must be an integer, got {value!r}")
            minimum = 0 if name in ("max_depth", "seed") else 1
            if value < minimum:
                raise RenderConfigError(name, f"must be at least {minimum}, got {value}")
            setattr(self, name, int(value))

    def __repr__(self) -> str:
        return (f"RenderSettings({self.width}x{self.height}, spp={self.samples_per_pixel}, "
                f"max_depth={self.max_depth}, tile={self.tile_size}, seed={self.seed})")
