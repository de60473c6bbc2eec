import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def gradient_image(tmp_path):
    """A 100 x 60 RGB image whose red channel increases left to right."""
    pixels = np.zeros((60, 100, 3), dtype=np.uint8)
    pixels[:, :, 0] = np.linspace(0, 255, 100, dtype=np.uint8)
    pixels[:, :, 2] = 40
    path = tmp_path / "gradient.png"
    Image.fromarray(pixels, "RGB").save(path)
    return path


def fist(cx=300.0, cy=300.0, spread=5.0, count=21):
    """Landmarks packed tightly around a point."""
    angles = np.linspace(0, 2 * np.pi, count, endpoint=False)
    return [(cx + spread * np.cos(a), cy + spread * np.sin(a)) for a in angles]


def open_hand(cx=300.0, cy=300.0, spread=200.0, count=21):
    """Landmarks spread wide around a point."""
    return fist(cx, cy, spread, count)
