"""
Hand Tracking Module - MediaPipe Hand Landmark Detection
=========================================================
Detects hand landmarks with the MediaPipe Tasks API and publishes them as
HandPrediction batches in canvas pixel coordinates.

Detection runs on its own thread (HandPoseWorker) and pushes every batch
through a callback, so the animation loop never waits on the model.
"""

import cv2
import numpy as np
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision
from typing import Callable, List, Optional, Sequence, Tuple
from dataclasses import dataclass
import urllib.request
from pathlib import Path
import threading
import time

from gentle_night.camera import Camera
from gentle_night.gesture_logic import HandPrediction


MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"


@dataclass
class DetectorSettings:
    """
    Hand detector configuration.

    Attributes:
        detection_confidence: Threshold for discarding a detection
        score_threshold: Threshold for keeping a tracked hand (presence/tracking)
        iou_threshold: Box overlap threshold for suppression. MediaPipe's
            landmarker applies its own fixed suppression, so this is kept
            for reference only.
        flip_horizontal: Mirror the input before detection
        max_hands: Maximum number of hands to detect
    """
    detection_confidence: float = 0.98
    score_threshold: float = 0.75
    iou_threshold: float = 0.3
    flip_horizontal: bool = True
    max_hands: int = 2


def _download_model(model_path: Path) -> None:
    """Download the hand landmarker model if not present."""
    print("[INFO] Downloading hand landmarker model...")
    model_path.parent.mkdir(parents=True, exist_ok=True)
    urllib.request.urlretrieve(MODEL_URL, model_path)
    print(f"[INFO] Model downloaded to {model_path}")


def to_prediction(
    landmarks: Sequence,
    width: int,
    height: int,
    handedness: str = ""
) -> HandPrediction:
    """
    Convert normalized MediaPipe landmarks to pixel coordinates.

    Args:
        landmarks: Landmarks with normalized .x and .y attributes
        width: Output coordinate space width
        height: Output coordinate space height
    """
    return HandPrediction(
        landmarks=[(lm.x * width, lm.y * height) for lm in landmarks],
        handedness=handedness
    )


class HandTracker:
    """
    Hand tracking using MediaPipe Hand Landmarker (Tasks API).

    Uses VIDEO running mode, which tracks between sequential frames.
    """

    def __init__(
        self,
        settings: Optional[DetectorSettings] = None,
        model_path: Optional[Path] = None
    ):
        """
        Initialize the hand tracker.

        Args:
            settings: Detector thresholds and options
            model_path: Location of hand_landmarker.task (downloaded if missing)
        """
        self.settings = settings or DetectorSettings()

        if model_path is None:
            model_path = Path(__file__).parent.parent / "models" / "hand_landmarker.task"
        self._model_path = Path(model_path)

        if not self._model_path.exists():
            _download_model(self._model_path)

        base_options = python.BaseOptions(model_asset_path=str(self._model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_hands=self.settings.max_hands,
            min_hand_detection_confidence=self.settings.detection_confidence,
            min_hand_presence_confidence=self.settings.score_threshold,
            min_tracking_confidence=self.settings.score_threshold
        )

        self.detector = vision.HandLandmarker.create_from_options(options)
        print("[INFO] Model ready!")

        # VIDEO mode requires monotonically increasing timestamps
        self._start_time = time.time()
        self._last_timestamp_ms = -1

        # Guards the detector against release() while a frame is in flight
        self._lock = threading.Lock()

    def process(
        self,
        frame: np.ndarray,
        output_size: Optional[Tuple[int, int]] = None
    ) -> List[HandPrediction]:
        """
        Detect hands in a frame.

        Args:
            frame: BGR image from camera
            output_size: (width, height) of the coordinate space for the
                landmarks; defaults to the frame size

        Returns:
            One HandPrediction per detected hand
        """
        if self.settings.flip_horizontal:
            frame = cv2.flip(frame, 1)

        frame_h, frame_w = frame.shape[:2]
        width, height = output_size or (frame_w, frame_h)

        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

        timestamp_ms = int((time.time() - self._start_time) * 1000)
        timestamp_ms = max(timestamp_ms, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        with self._lock:
            if self.detector is None:
                return []
            results = self.detector.detect_for_video(mp_image, timestamp_ms)

        predictions = []
        for idx, hand_landmarks in enumerate(results.hand_landmarks or []):
            handedness = ""
            if results.handedness and idx < len(results.handedness):
                hand_info = results.handedness[idx]
                if hand_info:
                    handedness = hand_info[0].category_name

            predictions.append(to_prediction(
                hand_landmarks, width, height, handedness
            ))

        return predictions

    def release(self):
        """Release resources. Waits for a detection in progress to finish."""
        with self._lock:
            if self.detector:
                self.detector.close()
                self.detector = None


class HandPoseWorker:
    """
    Runs hand detection on camera frames in a background thread.

    Every processed frame produces one batch, pushed through ``on_predict``
    (an empty list when no hand is visible).
    """

    def __init__(
        self,
        camera: Camera,
        tracker: HandTracker,
        on_predict: Callable[[List[HandPrediction]], None],
        output_size: Callable[[], Tuple[int, int]]
    ):
        """
        Args:
            camera: Started camera to read frames from
            tracker: Hand tracker
            on_predict: Receives every prediction batch
            output_size: Returns the current canvas (width, height)
        """
        self.camera = camera
        self.tracker = tracker
        self.on_predict = on_predict
        self.output_size = output_size

        self._running = False
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self._running = True
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self):
        last_frame_id = -1
        while self._running:
            frame_id, frame = self.camera.read()
            if frame is None or frame_id == last_frame_id:
                time.sleep(0.002)
                continue
            last_frame_id = frame_id

            self.on_predict(self.tracker.process(frame, self.output_size()))

    def stop(self, timeout: float = 1.0) -> bool:
        """
        Stop the detection thread.

        Returns:
            True if the thread has exited
        """
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                return False
            self._thread = None
        return True
