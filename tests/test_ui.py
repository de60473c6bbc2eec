import cv2

from gentle_night.gallery import ImageRotation
from gentle_night.gesture_logic import HandPrediction
from gentle_night.ui import ParticleSketchApp

from conftest import fist


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def make_app(gradient_image, tmp_path, clock=None):
    paths = [str(gradient_image), str(gradient_image)]
    app = ParticleSketchApp(image_paths=paths, width=200, height=120, interval=45.0)
    app.rotation = ImageRotation(paths, interval=45.0, clock=clock or FakeClock())
    app.state.classifier.verbose = False
    app._save_dir = tmp_path / "output"
    return app


def test_frame_swaps_in_loaded_image(gradient_image, tmp_path):
    app = make_app(gradient_image, tmp_path)
    assert len(app.state.particles) == 0

    loaded = app.loader.load(str(gradient_image), async_mode=False)
    app.frame()

    assert app.state.image is loaded.pixels
    assert len(app.state.particles) == 10 * 6
    assert app.loader.results.peek() is None

    # No new image: the same particles keep animating
    particles = list(app.state.particles)
    app.frame()
    assert list(app.state.particles) == particles


def test_frame_reads_predictions_without_consuming(gradient_image, tmp_path):
    app = make_app(gradient_image, tmp_path)
    batch = [HandPrediction(fist())]
    app.predictions.put(batch)

    app.frame()
    assert app.state.grip is True
    assert app.predictions.peek() is batch

    app.frame()
    assert app.state.grip is True


def test_frame_starts_load_after_interval(gradient_image, tmp_path):
    clock = FakeClock()
    app = make_app(gradient_image, tmp_path, clock)
    app.state.resize(100, 60)

    clock.now = 45.0
    app.frame()
    assert app.rotation.index == 0
    assert not app.loader.is_loading() and app.loader.results.peek() is None

    clock.now = 46.0
    app.frame()
    app.loader.wait(5.0)

    assert app.rotation.index == 1
    assert app.loader.width == 100
    loaded = app.loader.results.peek()
    assert loaded is not None and loaded.size == (100, 60)

    app.frame()
    assert len(app.state.particles) == 5 * 3


def test_keyboard(gradient_image, tmp_path):
    app = make_app(gradient_image, tmp_path)

    assert app._handle_keyboard(ord('s')) is True
    assert len(list((tmp_path / "output").glob("drawing_*.png"))) == 1
    assert app._handle_keyboard(ord('q')) is False
    assert app._handle_keyboard(27) is False
    assert app._handle_keyboard(ord('x')) is True


def test_click_inside_canvas_requests_fullscreen(gradient_image, tmp_path):
    app = make_app(gradient_image, tmp_path)

    app._on_mouse(cv2.EVENT_LBUTTONDOWN, 0, 50, 0, None)
    app._on_mouse(cv2.EVENT_LBUTTONDOWN, 250, 50, 0, None)
    app._on_mouse(cv2.EVENT_MOUSEMOVE, 100, 50, 0, None)
    assert app._toggle_requested is False

    app._on_mouse(cv2.EVENT_LBUTTONDOWN, 100, 50, 0, None)
    assert app._toggle_requested is True
