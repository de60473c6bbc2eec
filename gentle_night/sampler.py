"""
Sampler Module - Image to Particle Seeds
========================================
Converts a raster image into a sparse grid of colored sample points.
Each point carries the pixel color found exactly at its grid coordinate
and a display radius derived from that pixel's brightness.
"""

import numpy as np
from PIL import Image
from typing import List, Tuple, Union
from dataclasses import dataclass
from pathlib import Path


# Grid spacing between sampled pixels
DEFAULT_STRIDE = 20

# Brightness [0, 255] maps linearly onto this radius range
MIN_RADIUS = 5.0
MAX_RADIUS = 7.0


@dataclass(frozen=True)
class SamplePoint:
    """
    A single grid-sampled pixel.

    Attributes:
        x: Column of the sampled pixel (multiple of the stride)
        y: Row of the sampled pixel (multiple of the stride)
        color: RGBA color, 0-255 per channel
        radius: Display radius derived from brightness
    """
    x: int
    y: int
    color: Tuple[int, int, int, int]
    radius: float


def brightness_to_radius(brightness: float) -> float:
    """Map brightness from [0, 255] onto [MIN_RADIUS, MAX_RADIUS]."""
    return MIN_RADIUS + (brightness / 255.0) * (MAX_RADIUS - MIN_RADIUS)


def sample_image(pixels: np.ndarray, stride: int = DEFAULT_STRIDE) -> List[SamplePoint]:
    """
    Sample an RGBA pixel buffer on a fixed grid.

    Args:
        pixels: H x W x 4 uint8 array (RGBA)
        stride: Pixel spacing between samples in both axes

    Returns:
        Sample points in row-major order, ceil(W/stride) * ceil(H/stride) of them
    """
    if stride <= 0:
        raise ValueError(f"stride must be positive, got {stride}")
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"expected an H x W x 4 RGBA array, got shape {pixels.shape}")

    height, width = pixels.shape[:2]
    points = []

    for y in range(0, height, stride):
        for x in range(0, width, stride):
            r, g, b, a = (int(c) for c in pixels[y, x])
            brightness = (r + g + b) / 3
            points.append(SamplePoint(
                x=x,
                y=y,
                color=(r, g, b, a),
                radius=brightness_to_radius(brightness)
            ))

    return points


def resize_to_width(image: Image.Image, width: int) -> Image.Image:
    """
    Resize an image to the given width, keeping its aspect ratio.

    The result is always RGBA so the pixel buffer has four channels.
    """
    if width <= 0:
        raise ValueError(f"width must be positive, got {width}")

    src_w, src_h = image.size
    height = max(1, round(src_h * width / src_w))

    return image.convert("RGBA").resize((width, height), Image.Resampling.BILINEAR)


def load_image(path: Union[str, Path], width: int) -> np.ndarray:
    """
    Load an image from disk, resized to fill the given width.

    Returns:
        H x W x 4 uint8 RGBA array
    """
    with Image.open(path) as image:
        resized = resize_to_width(image, width)
    return np.asarray(resized, dtype=np.uint8).copy()
