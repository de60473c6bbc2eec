"""
UI Module - Main Application Loop
=================================
Ties the webcam, hand tracker, image gallery and particle field together.

Each frame classifies the latest hand predictions into a grip signal,
advances every particle, and draws the result. Hand detection and image
loading run on their own threads and hand over results through
latest-value slots.
"""

import cv2
from typing import List, Optional, Sequence
import os
from pathlib import Path
from datetime import datetime

from gentle_night.camera import Camera
from gentle_night.hand_tracking import DetectorSettings, HandPoseWorker, HandTracker
from gentle_night.gesture_logic import GripClassifier, HandPrediction
from gentle_night.simulation import SimulationState, step
from gentle_night.renderer import Renderer
from gentle_night.gallery import ImageLoader, ImageRotation, LatestSlot
from gentle_night.sampler import DEFAULT_STRIDE


DEFAULT_IMAGES = ["nature7.jpg", "nature8.jpg", "nature9.jpg"]


class ParticleSketchApp:
    """
    Interactive particle sketch driven by hand gestures.

    Close your hand to gather the particles toward the center, open it
    to let them scatter.
    """

    WINDOW_NAME = "Do Not Go Gentle"

    def __init__(
        self,
        image_paths: Sequence[str] = DEFAULT_IMAGES,
        camera_id: int = 0,
        width: int = 1280,
        height: int = 720,
        interval: float = ImageRotation.DEFAULT_INTERVAL,
        stride: int = DEFAULT_STRIDE,
        independent_hands: bool = False,
        detector_settings: Optional[DetectorSettings] = None
    ):
        """
        Initialize the application.

        Args:
            image_paths: Images to cycle through
            camera_id: Camera device index
            width: Initial canvas width
            height: Initial canvas height
            interval: Seconds between image switches
            stride: Particle sampling stride
            independent_hands: Classify every hand against its own centroid
            detector_settings: Hand detector thresholds
        """
        self.state = SimulationState(
            width=width,
            height=height,
            classifier=GripClassifier(independent_hands=independent_hands)
        )
        self.renderer = Renderer(width, height)
        self.rotation = ImageRotation(image_paths, interval=interval)
        self.loader = ImageLoader(width, stride=stride)

        self.camera = Camera(camera_id=camera_id, width=width, height=height)
        self.detector_settings = detector_settings or DetectorSettings()
        self.predictions: LatestSlot[List[HandPrediction]] = LatestSlot([])

        self._hand_tracker: Optional[HandTracker] = None
        self._worker: Optional[HandPoseWorker] = None

        self._running = False
        self._fullscreen = False
        self._toggle_requested = False

        self._save_dir = Path("output")

    def _canvas_size(self):
        return (self.state.width, self.state.height)

    def _on_mouse(self, event, x, y, flags, param):
        """Clicking inside the canvas toggles fullscreen."""
        if event != cv2.EVENT_LBUTTONDOWN:
            return
        if 0 < x < self.state.width and 0 < y < self.state.height:
            self._toggle_requested = True

    def _toggle_fullscreen(self):
        self._fullscreen = not self._fullscreen
        mode = cv2.WINDOW_FULLSCREEN if self._fullscreen else cv2.WINDOW_NORMAL
        cv2.setWindowProperty(self.WINDOW_NAME, cv2.WND_PROP_FULLSCREEN, mode)

    def _check_resize(self):
        """Follow the window size. Particles are not regenerated."""
        try:
            _, _, w, h = cv2.getWindowImageRect(self.WINDOW_NAME)
        except cv2.error:
            return
        if w > 0 and h > 0 and (w, h) != self._canvas_size():
            self.state.resize(w, h)
            self.renderer.resize(w, h)

    def save_canvas(self) -> Path:
        """Save the current canvas as a PNG."""
        self._save_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = self._save_dir / f"drawing_{timestamp}.png"
        self.renderer.save(filename)
        print(f"[INFO] Saved: {filename}")
        return filename

    def _handle_keyboard(self, key: int) -> bool:
        """
        Handle keyboard input.

        Returns:
            False if should quit, True otherwise
        """
        if key == ord('q') or key == 27:
            return False
        elif key == ord('s'):
            self.save_canvas()
        return True

    def _draw(self, predictions: Sequence[HandPrediction]):
        self.renderer.begin_frame()
        self.renderer.draw_background(self.state.image)
        self.renderer.draw_particles(self.state.particles)
        self.renderer.draw_landmarks(predictions)

    def frame(self):
        """Run one animation frame."""
        loaded = self.loader.results.take()
        if loaded is not None:
            self.state.apply_image(loaded)

        predictions = self.predictions.peek() or []
        step(self.state, predictions)
        self._draw(predictions)

        path = self.rotation.poll()
        if path is not None:
            self.loader.width = self.state.width
            self.loader.load(path)

    def run(self):
        """Run the main application loop."""
        print("\n" + "=" * 60)
        print("  Do Not Go Gentle Into That Good Night")
        print("=" * 60)
        print("\n  Close your hand -> particles gather")
        print("  Open your hand  -> particles scatter")
        print("\n  [S] Save canvas | Click: Fullscreen | [Q] Quit")
        print("\n" + "=" * 60)

        first = self.loader.load(self.rotation.current_path, async_mode=False)
        if not first.success:
            print("[ERROR] Failed to load the first image!")
            return
        self.loader.results.take()
        self.state.apply_image(first)

        if not self.camera.start():
            print("[ERROR] Failed to start camera!")
            return

        self._hand_tracker = HandTracker(self.detector_settings)
        self._worker = HandPoseWorker(
            self.camera, self._hand_tracker,
            on_predict=self.predictions.put,
            output_size=self._canvas_size
        )
        self._worker.start()

        self._running = True
        cv2.namedWindow(self.WINDOW_NAME, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.WINDOW_NAME, self.state.width, self.state.height)
        cv2.setMouseCallback(self.WINDOW_NAME, self._on_mouse)

        try:
            while self._running:
                self.frame()
                cv2.imshow(self.WINDOW_NAME, self.renderer.snapshot())

                key = cv2.waitKey(1) & 0xFF
                if not self._handle_keyboard(key):
                    break

                if self._toggle_requested:
                    self._toggle_requested = False
                    self._toggle_fullscreen()

                self._check_resize()

        finally:
            self._running = False
            worker_stopped = self._worker.stop() if self._worker else True
            self.camera.stop()
            if self._hand_tracker and worker_stopped:
                self._hand_tracker.release()
            cv2.destroyAllWindows()
            print("\n[INFO] Application closed")


def main():
    """Main entry point."""
    import argparse

    env_images = os.environ.get("GENTLE_NIGHT_IMAGES")
    default_images = [p.strip() for p in env_images.split(",") if p.strip()] if env_images else DEFAULT_IMAGES

    parser = argparse.ArgumentParser(description="Do Not Go Gentle - gesture-driven image particles")
    parser.add_argument('--images', nargs='+', default=default_images, help='Images to cycle through')
    parser.add_argument('--camera', type=int,
                        default=int(os.environ.get("GENTLE_NIGHT_CAMERA", 0)),
                        help='Camera device index')
    parser.add_argument('--interval', type=float,
                        default=float(os.environ.get("GENTLE_NIGHT_INTERVAL", ImageRotation.DEFAULT_INTERVAL)),
                        help='Seconds between image switches')
    parser.add_argument('--stride', type=int, default=DEFAULT_STRIDE, help='Particle grid spacing in pixels')
    parser.add_argument('--width', type=int, default=1280, help='Canvas width')
    parser.add_argument('--height', type=int, default=720, help='Canvas height')
    parser.add_argument('--independent-hands', action='store_true',
                        help='Measure each hand against its own centroid')

    args = parser.parse_args()

    missing = [p for p in args.images if not Path(p).exists()]
    if missing:
        print(f"[WARNING] Image(s) not found: {', '.join(missing)}")

    app = ParticleSketchApp(
        image_paths=args.images,
        camera_id=args.camera,
        width=args.width,
        height=args.height,
        interval=args.interval,
        stride=args.stride,
        independent_hands=args.independent_hands
    )
    app.run()


if __name__ == "__main__":
    main()
