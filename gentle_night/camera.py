"""
Camera Module - Webcam Stream Handler
======================================
Captures webcam frames on a background thread so the hand detector can
always grab the latest frame without blocking.
"""

import cv2
import numpy as np
from typing import Optional, Tuple
import threading
import time


class Camera:
    """
    Webcam stream handler with threaded capture.

    Frames are delivered as captured; mirroring is left to the hand tracker.

    Attributes:
        camera_id: Index of the camera device (default 0)
        width: Frame width in pixels
        height: Frame height in pixels
        fps: Target frames per second
    """

    def __init__(
        self,
        camera_id: int = 0,
        width: int = 640,
        height: int = 480,
        fps: int = 30,
        backend: int = cv2.CAP_ANY
    ):
        """
        Args:
            camera_id: Camera device index
            width: Desired frame width
            height: Desired frame height
            fps: Target frame rate
            backend: OpenCV capture backend (e.g. cv2.CAP_DSHOW on Windows)
        """
        self.camera_id = camera_id
        self.width = width
        self.height = height
        self.fps = fps
        self.backend = backend

        self.cap: Optional[cv2.VideoCapture] = None

        # Latest frame and its sequence number, shared with the capture thread
        self._frame: Optional[np.ndarray] = None
        self._frame_id = 0
        self._frame_lock = threading.Lock()
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> bool:
        """
        Open the device and start the capture thread.

        Returns:
            True if camera started successfully, False otherwise
        """
        self.cap = cv2.VideoCapture(self.camera_id, self.backend)

        if not self.cap.isOpened():
            print(f"[ERROR] Failed to open camera {self.camera_id}")
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.fps)
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        # The device may not honour the requested size
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        print(f"[INFO] Camera started: {self.width}x{self.height} @ {self.fps}fps")

        self._running = True
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()

        return True

    def _capture_loop(self):
        while self._running:
            ret, frame = self.cap.read()

            if ret:
                with self._frame_lock:
                    self._frame = frame
                    self._frame_id += 1
            else:
                time.sleep(0.001)

    def read(self) -> Tuple[int, Optional[np.ndarray]]:
        """
        Read the latest captured frame.

        Returns:
            Tuple of (frame_id, frame or None). The id increases with every
            captured frame, so callers can skip frames they have already seen.
        """
        with self._frame_lock:
            if self._frame is None:
                return self._frame_id, None
            return self._frame_id, self._frame.copy()

    def stop(self):
        """Stop the capture thread and release the device."""
        self._running = False

        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self.cap is not None:
            self.cap.release()
            self.cap = None

        print("[INFO] Camera stopped")
