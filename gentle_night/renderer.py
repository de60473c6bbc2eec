"""
Renderer Module - Particle Canvas
=================================
Draws the particle field, the faded source image and hand landmarks onto
a persistent BGR canvas. The canvas is never cleared between frames: each
frame starts by fading it toward white, which leaves motion trails.
"""

import cv2
import numpy as np
from typing import Iterable, Optional, Sequence, Tuple

from gentle_night.particles import Particle
from gentle_night.gesture_logic import HandPrediction


class Renderer:
    """
    Persistent drawing surface for the sketch.

    Attributes:
        width: Canvas width in pixels
        height: Canvas height in pixels
    """

    BACKGROUND_COLOR = (255, 255, 255)
    FADE_ALPHA = 30 / 255         # Trail fade per frame
    IMAGE_ALPHA = 50 / 255        # Opacity of the source image
    LANDMARK_COLOR = (0, 255, 0)  # BGR
    LANDMARK_RADIUS = 5

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self._canvas = np.full((height, width, 3), self.BACKGROUND_COLOR, dtype=np.uint8)
        self._background: Optional[np.ndarray] = None
        self._background_src: Optional[np.ndarray] = None

    def begin_frame(self):
        """Fade the previous frame toward the background color."""
        background = np.full_like(self._canvas, self.BACKGROUND_COLOR)
        self._canvas = cv2.addWeighted(
            self._canvas, 1 - self.FADE_ALPHA,
            background, self.FADE_ALPHA, 0
        )

    def draw_background(self, pixels: Optional[np.ndarray]):
        """
        Blend the source image over the whole canvas at low opacity.

        Args:
            pixels: H x W x 4 RGBA image, stretched to the canvas size
        """
        if pixels is None:
            return

        if pixels is not self._background_src or self._background is None:
            bgr = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGR)
            self._background = cv2.resize(bgr, (self.width, self.height))
            self._background_src = pixels

        self._canvas = cv2.addWeighted(
            self._canvas, 1 - self.IMAGE_ALPHA,
            self._background, self.IMAGE_ALPHA, 0
        )

    def draw_particles(self, particles: Iterable[Particle]):
        """Draw every particle as a filled circle in its own color."""
        for particle in particles:
            r, g, b, a = particle.color
            if a == 0:
                continue

            center = (int(round(particle.position[0])), int(round(particle.position[1])))
            radius = max(1, int(round(particle.radius)))

            if a >= 255:
                cv2.circle(self._canvas, center, radius, (b, g, r), -1, cv2.LINE_AA)
            else:
                self._blend_circle(center, radius, (b, g, r), a / 255)

    def _blend_circle(self, center: Tuple[int, int], radius: int,
                      color: Tuple[int, int, int], alpha: float):
        """Draw a translucent circle by blending a small region of interest."""
        x, y = center
        x0, y0 = max(0, x - radius), max(0, y - radius)
        x1, y1 = min(self.width, x + radius + 1), min(self.height, y + radius + 1)
        if x0 >= x1 or y0 >= y1:
            return

        roi = self._canvas[y0:y1, x0:x1]
        overlay = roi.copy()
        cv2.circle(overlay, (x - x0, y - y0), radius, color, -1, cv2.LINE_AA)
        roi[:] = cv2.addWeighted(overlay, alpha, roi, 1 - alpha, 0)

    def draw_landmarks(self, predictions: Sequence[HandPrediction]):
        """Mark every detected keypoint."""
        for prediction in predictions:
            for x, y in prediction.landmarks:
                cv2.circle(
                    self._canvas, (int(x), int(y)),
                    self.LANDMARK_RADIUS, self.LANDMARK_COLOR, -1
                )

    def resize(self, new_width: int, new_height: int):
        """
        Resize the canvas, scaling its current content.

        Args:
            new_width: New canvas width
            new_height: New canvas height
        """
        if new_width == self.width and new_height == self.height:
            return
        if new_width <= 0 or new_height <= 0:
            return

        self._canvas = cv2.resize(self._canvas, (new_width, new_height))
        self.width = new_width
        self.height = new_height
        self._background = None

    def snapshot(self) -> np.ndarray:
        """Return a copy of the current canvas (BGR)."""
        return self._canvas.copy()

    def save(self, path) -> bool:
        """Write the current canvas to an image file."""
        return bool(cv2.imwrite(str(path), self._canvas))
