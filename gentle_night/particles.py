"""
Particles Module - Gesture-Driven Particle Field
================================================
Particles seeded from image samples drift freely while the hand is open
and are pulled toward the canvas center while it is closed.
"""

import numpy as np
from typing import Iterator, List, Optional, Sequence, Tuple

from gentle_night.sampler import SamplePoint


def limit(vector: np.ndarray, max_magnitude: float) -> np.ndarray:
    """
    Cap a vector's magnitude, preserving its direction.

    Modifies the vector in place and returns it.
    """
    magnitude_sq = float(np.dot(vector, vector))
    if magnitude_sq > max_magnitude * max_magnitude:
        vector *= max_magnitude / np.sqrt(magnitude_sq)
    return vector


class Particle:
    """
    A single colored particle.

    Attributes:
        position: (x, y) in canvas pixels
        velocity: Pixels per frame, magnitude capped at MAX_SPEED
        acceleration: Recomputed every frame from the grip signal
        radius: Display radius, fixed at creation
        color: RGBA color, fixed at creation
    """

    MAX_SPEED = 10.0      # Pixels per frame
    PULL_DIVISOR = 300.0  # Distance to center is divided by this while gripping
    MAX_PULL = 5.0        # Cap on the gripping acceleration

    def __init__(
        self,
        x: float,
        y: float,
        radius: float,
        color: Tuple[int, int, int, int],
        velocity: Optional[Sequence[float]] = None,
        rng: Optional[np.random.Generator] = None
    ):
        self.position = np.array([x, y], dtype=float)
        if velocity is None:
            rng = rng if rng is not None else np.random.default_rng()
            velocity = rng.uniform(-1.0, 1.0, size=2)
        self.velocity = np.array(velocity, dtype=float)
        self.acceleration = np.zeros(2)
        self.radius = radius
        self.color = color

    @classmethod
    def from_sample(
        cls,
        point: SamplePoint,
        rng: Optional[np.random.Generator] = None
    ) -> "Particle":
        """Create a particle at a sample point, copying its radius and color."""
        return cls(point.x, point.y, point.radius, point.color, rng=rng)

    def update(self, grip: bool, width: float, height: float):
        """
        Advance one frame.

        Args:
            grip: Whether a fist is currently detected
            width: Canvas width
            height: Canvas height
        """
        self.position += self.velocity
        self.velocity += self.acceleration
        limit(self.velocity, self.MAX_SPEED)

        # Reflect off the edges; the position itself is not clamped
        x, y = self.position
        if x < 0 or x > width:
            self.velocity[0] *= -1
        if y < 0 or y > height:
            self.velocity[1] *= -1

        if grip:
            center = np.array([width / 2, height / 2])
            self.acceleration = limit((center - self.position) / self.PULL_DIVISOR, self.MAX_PULL)
        else:
            self.acceleration = np.zeros(2)

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


class ParticleField:
    """
    The set of particles currently on the canvas.

    The set is replaced wholesale whenever a new image is sampled.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Args:
            seed: Seed for initial particle velocities (random if None)
        """
        self._rng = np.random.default_rng(seed)
        self._particles: List[Particle] = []

    def regenerate(self, points: Sequence[SamplePoint]):
        """
        Discard all particles and create one per sample point.
        """
        self._particles = [Particle.from_sample(p, rng=self._rng) for p in points]

    def update(self, grip: bool, width: float, height: float):
        """Advance every particle one frame."""
        for particle in self._particles:
            particle.update(grip, width, height)

    def clear(self):
        self._particles = []

    @property
    def particles(self) -> List[Particle]:
        return self._particles

    def __len__(self) -> int:
        return len(self._particles)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self._particles)
