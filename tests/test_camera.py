import pytest

from doppler.camera import Camera2D
from doppler.constants import MAX_METERS_PER_PIXEL, MIN_METERS_PER_PIXEL
from doppler.utils import try_float, try_vector


def test_world_screen_roundtrip_with_y_up():
    cam = Camera2D(center=(0.0, 0.0), meters_per_pixel=2.0)
    cam.set_viewport_size(200, 100)
    assert cam.world_to_screen((0.0, 0.0)) == (100, 50)
    # Positive world y is up the screen
    assert cam.world_to_screen((0.0, 20.0)) == (100, 40)
    assert cam.screen_to_world((110, 50)) == (20.0, 0.0)


def test_zoom_keeps_pivot_and_respects_bounds():
    cam = Camera2D(center=(0.0, 0.0), meters_per_pixel=1.0)
    cam.set_viewport_size(200, 200)
    pivot = (150, 60)
    before = cam.screen_to_world(pivot)
    cam.zoom(2.0, pivot)
    assert cam.mpp == pytest.approx(0.5)
    assert cam.screen_to_world(pivot) == pytest.approx(before)

    for _ in range(50):
        cam.zoom(10.0)
    assert cam.mpp == MIN_METERS_PER_PIXEL
    for _ in range(50):
        cam.zoom(0.1)
    assert cam.mpp == MAX_METERS_PER_PIXEL


def test_frame_fits_points():
    cam = Camera2D()
    cam.set_viewport_size(400, 400)
    cam.frame([(100.0, 300.0), (500.0, 300.0)], margin=2.0)
    assert cam.center == [300.0, 300.0]
    assert cam.mpp == pytest.approx(800.0 / 400)
    w, h = cam.viewport_size
    for p in ((100.0, 300.0), (500.0, 300.0)):
        x, y = cam.world_to_screen(p)
        assert 0 <= x <= w and 0 <= y <= h


def test_input_parsing():
    assert try_float(" 3.5 ") == 3.5
    assert try_float("nan") is None
    assert try_float(None) is None
    assert try_vector("1", 2) == (1.0, 2.0)
    assert try_vector("1", "x") is None
