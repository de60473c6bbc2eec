import numpy as np

from gentle_night.camera import Camera


class FakeCapture:
    def __init__(self, camera, frames):
        self.camera = camera
        self.frames = list(frames)
        self.released = False

    def read(self):
        if not self.frames:
            self.camera._running = False
            return False, None
        return True, self.frames.pop(0)

    def release(self):
        self.released = True


def test_read_before_capture():
    assert Camera().read() == (0, None)


def test_capture_loop_keeps_latest_frame():
    camera = Camera()
    frames = [np.full((2, 2, 3), i, dtype=np.uint8) for i in (10, 20, 30)]
    fake = FakeCapture(camera, frames)
    camera.cap = fake
    camera._running = True

    camera._capture_loop()

    frame_id, frame = camera.read()
    assert frame_id == 3
    assert (frame == 30).all()

    # read() hands out a copy
    frame[:] = 0
    assert (camera.read()[1] == 30).all()

    camera.stop()
    assert fake.released
    assert camera.cap is None
