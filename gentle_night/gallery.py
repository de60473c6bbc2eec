"""
Gallery Module - Image Rotation and Background Loading
======================================================
Cycles through a fixed list of images on a timer and loads each one off
the animation thread. Finished loads are published through a single-slot
mailbox that the animation loop drains once per frame; the newest
completion always wins.
"""

import time
import threading
import numpy as np
from typing import Callable, Generic, List, Optional, Sequence, TypeVar
from dataclasses import dataclass, field
from pathlib import Path

from gentle_night.sampler import DEFAULT_STRIDE, SamplePoint, load_image, sample_image


T = TypeVar("T")


class LatestSlot(Generic[T]):
    """
    Holds the most recent value written by a producer thread.

    Writers overwrite, readers see only the newest value. No queueing.
    """

    def __init__(self, initial: Optional[T] = None):
        self._value = initial
        self._lock = threading.Lock()

    def put(self, value: T):
        with self._lock:
            self._value = value

    def peek(self) -> Optional[T]:
        """Return the current value without consuming it."""
        with self._lock:
            return self._value

    def take(self) -> Optional[T]:
        """Return the current value and empty the slot."""
        with self._lock:
            value, self._value = self._value, None
            return value


class ImageRotation:
    """
    Advances through image paths cyclically on a fixed wall-clock interval.

    Attributes:
        paths: Image paths in display order
        interval: Seconds between switches
        index: Index of the current image
        last_switch: Clock reading of the last switch
    """

    DEFAULT_INTERVAL = 45.0

    def __init__(
        self,
        paths: Sequence[str],
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] = time.monotonic
    ):
        if not paths:
            raise ValueError("at least one image path is required")
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        self.paths = list(paths)
        self.interval = interval
        self._clock = clock
        self.index = 0
        self.last_switch = clock()

    @property
    def current_path(self) -> str:
        return self.paths[self.index]

    def due(self, now: Optional[float] = None) -> bool:
        """Whether the interval has elapsed since the last switch."""
        now = self._clock() if now is None else now
        return now - self.last_switch > self.interval

    def advance(self, now: Optional[float] = None) -> str:
        """Move to the next image (wrapping around) and return its path."""
        self.index = (self.index + 1) % len(self.paths)
        self.last_switch = self._clock() if now is None else now
        return self.current_path

    def poll(self, now: Optional[float] = None) -> Optional[str]:
        """
        Advance if due.

        Returns:
            The new path when a switch happened, otherwise None
        """
        now = self._clock() if now is None else now
        if self.due(now):
            return self.advance(now)
        return None


@dataclass
class LoadedImage:
    """Result of loading and sampling one image."""
    path: str
    success: bool
    pixels: Optional[np.ndarray] = None
    points: List[SamplePoint] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def size(self):
        """(width, height) of the resized image."""
        if self.pixels is None:
            return (0, 0)
        return (self.pixels.shape[1], self.pixels.shape[0])


class ImageLoader:
    """
    Decodes, resizes and samples images, optionally on a background thread.

    Successful results are written into ``results``. A failed load is
    reported but never published, so the previous image keeps animating.
    In-flight loads cannot be cancelled; when loads overlap, the last one
    to finish wins.
    """

    def __init__(self, width: int, stride: int = DEFAULT_STRIDE):
        """
        Args:
            width: Target image width (the canvas width)
            stride: Sampling grid stride
        """
        self.width = width
        self.stride = stride
        self.results: LatestSlot[LoadedImage] = LatestSlot()
        self._on_complete: Optional[Callable[[LoadedImage], None]] = None
        self._threads: List[threading.Thread] = []

    def load(self, path: str, async_mode: bool = True) -> Optional[LoadedImage]:
        """
        Load an image.

        Args:
            path: Image file path
            async_mode: If True, run in a background thread

        Returns:
            LoadedImage in sync mode, None in async mode
        """
        if async_mode:
            thread = threading.Thread(target=self._load_async, args=(path,), daemon=True)
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
            thread.start()
            return None

        result = self._load_sync(path)
        self._publish(result)
        return result

    def _load_sync(self, path: str) -> LoadedImage:
        try:
            pixels = load_image(path, self.width)
            points = sample_image(pixels, self.stride)
        except (OSError, ValueError) as e:
            print(f"[ERROR] Failed to load image {path}: {e}")
            return LoadedImage(
                path=str(path),
                success=False,
                error=str(e)
            )

        return LoadedImage(
            path=str(path),
            success=True,
            pixels=pixels,
            points=points
        )

    def _load_async(self, path: str):
        """Load in a background thread."""
        self._publish(self._load_sync(path))

    def _publish(self, result: LoadedImage):
        if result.success:
            print(f"[INFO] Loaded {Path(result.path).name}: "
                  f"{result.size[0]}x{result.size[1]}, {len(result.points)} particles")
            self.results.put(result)

        if self._on_complete:
            self._on_complete(result)

    def set_on_complete(self, callback: Callable[[LoadedImage], None]):
        """Set callback for load completion (called on the loader thread)."""
        self._on_complete = callback

    def wait(self, timeout: Optional[float] = None):
        """Block until all in-flight loads finish."""
        for thread in list(self._threads):
            thread.join(timeout)

    def is_loading(self) -> bool:
        return any(t.is_alive() for t in self._threads)
