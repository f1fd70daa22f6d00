# materials/texture_loader.py
import os
from typing import NamedTuple
from PIL import Image

class ImageData(NamedTuple):
    """A decoded image: `height` rows of `width` pixels, row 0 at the top."""
    width: int
    height: int
    channels: int
    data: bytes

def decode_image(image_path: str) -> ImageData:
    """
    Decode an image file into the (width, height, channels, data) tuple
    accepted by ImageTexture.

    Raises:
        FileNotFoundError: If the image file doesn't exist
        ValueError: If the image cannot be decoded
    """
    if not os.path.exists(image_path):
        raise FileNotFoundError(f"Texture file not found: {image_path}")

    try:
        with Image.open(image_path) as img:
            # Convert to RGB if necessary
            if img.mode != 'RGB':
                img = img.convert('RGB')
            return ImageData(img.width, img.height, 3, img.tobytes())
    except OSError as e:
        raise ValueError(f"Error loading texture {image_path}: {e}") from e
