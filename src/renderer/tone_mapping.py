# renderer/tone_mapping.py
import numpy as np
from numba import njit

@njit(cache=True, nogil=True)
def write_tile(pixels, colors, image_width, x0, y0, samples_per_pixel):
    """
    Average, gamma-correct (gamma 2) and quantize a tile of summed radiance.

    `colors` is (tile_height, tile_width, 3) of per-pixel sums; `pixels` is
    the flat RGBA byte view of the whole image. NaN channels become black.
    """
    scale = 1.0 / samples_per_pixel
    tile_height = colors.shape[0]
    tile_width = colors.shape[1]
    for row in range(tile_height):
        for col in range(tile_width):
            index = ((y0 + row) * image_width + (x0 + col)) * 4
            for c in range(3):
                value = colors[row, col, c]
                if value != value:
                    value = 0.0
                value = np.sqrt(max(value * scale, 0.0))
                value = min(max(value, 0.0), 0.999)
                pixels[index + c] = np.uint8(int(256 * value))
            pixels[index + 3] = np.uint8(255)
