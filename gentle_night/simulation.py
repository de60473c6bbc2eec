"""
Simulation Module - Per-Frame State
===================================
The mutable state of the sketch and the function that advances it.
The application loop owns one SimulationState and passes it to step()
once per frame.
"""

import numpy as np
from typing import Optional, Sequence
from dataclasses import dataclass, field

from gentle_night.gesture_logic import GripClassifier, HandPrediction
from gentle_night.particles import ParticleField
from gentle_night.gallery import LoadedImage


@dataclass
class SimulationState:
    """
    Everything that changes from frame to frame.

    Attributes:
        width: Canvas width
        height: Canvas height
        particles: Particles currently animating
        classifier: Holds the grip signal
        image: RGBA pixels of the current image
        image_path: Path of the current image
    """
    width: int
    height: int
    particles: ParticleField = field(default_factory=ParticleField)
    classifier: GripClassifier = field(default_factory=GripClassifier)
    image: Optional[np.ndarray] = None
    image_path: Optional[str] = None

    @property
    def grip(self) -> bool:
        return self.classifier.is_fist

    def apply_image(self, loaded: LoadedImage):
        """Swap in a newly loaded image and rebuild every particle from it."""
        self.image = loaded.pixels
        self.image_path = loaded.path
        self.particles.regenerate(loaded.points)

    def resize(self, width: int, height: int):
        """Resize the canvas. Particles are kept as they are."""
        self.width = width
        self.height = height


def step(state: SimulationState, predictions: Sequence[HandPrediction]) -> bool:
    """
    Advance the simulation one frame.

    Returns:
        The grip signal used for this frame
    """
    grip = state.classifier.update(predictions)
    state.particles.update(grip, state.width, state.height)
    return grip
