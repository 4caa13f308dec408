import numpy as np
import pytest

from sonar_drawer.colormaps import InfernoColorMap, SonarColorMap
from sonar_drawer.interface import ArraySonarPing
from sonar_drawer.rect_image import draw_rect_sonar_image, output_dtype_for
from conftest import make_ping

GRAY = SonarColorMap()


def test_scenario_a_shape(scenario_a_ping):
    rect = draw_rect_sonar_image(scenario_a_ping, InfernoColorMap())
    assert rect.shape == (100, 50, 3)
    assert rect.dtype == np.uint8


@pytest.mark.parametrize("n_r,n_a", [(1, 1), (7, 3), (64, 128)])
def test_rows_are_ranges_and_columns_are_azimuths(n_r, n_a):
    rect = draw_rect_sonar_image(make_ping(n_r, n_a), GRAY)
    assert rect.shape[:2] == (n_r, n_a)


def test_corner_convention():
    data = np.zeros((10, 4), dtype=np.uint8)
    data[0, 0] = 255      # min range, min azimuth
    data[9, 3] = 128      # max range, max azimuth
    ping = ArraySonarPing.from_bounds(data, (0.0, 5.0), (-0.5, 0.5))

    rect = draw_rect_sonar_image(ping, GRAY)
    np.testing.assert_array_equal(rect[0, 0], [255, 255, 255])
    np.testing.assert_array_equal(rect[9, 3], [128, 128, 128])
    assert rect.sum() == 255 * 3 + 128 * 3


def test_float_buffer_keeps_format():
    buf = np.zeros((1, 1, 3), dtype=np.float32)
    rect = draw_rect_sonar_image(make_ping(20, 10, fill=255), GRAY, buf)
    assert rect.dtype == np.float32
    assert rect.shape == (20, 10, 3)
    np.testing.assert_allclose(rect, 1.0)


@pytest.mark.parametrize("buf", [
    np.zeros((5, 5), dtype=np.float32),        # single channel
    np.zeros((5, 5, 4), dtype=np.uint8),       # four channels
    np.zeros((5, 5, 3), dtype=np.int16),       # unsupported depth
    np.zeros((5, 5, 3), dtype=np.float64),
])
def test_other_buffers_fall_back_to_uint8(buf):
    rect = draw_rect_sonar_image(make_ping(6, 4), GRAY, buf)
    assert rect.dtype == np.uint8
    assert rect.shape == (6, 4, 3)


def test_matching_buffer_is_reused():
    buf = np.zeros((6, 4, 3), dtype=np.uint8)
    rect = draw_rect_sonar_image(make_ping(6, 4, fill=200), GRAY, buf)
    assert rect is buf
    assert (buf == 200).all()


def test_output_dtype_for_accepts_dtypes():
    assert output_dtype_for(np.float32) == np.float32
    assert output_dtype_for(np.uint8) == np.uint8
    assert output_dtype_for(np.float64) == np.uint8
    assert output_dtype_for(None) == np.uint8


@pytest.mark.parametrize("n_r,n_a", [(0, 5), (5, 0), (0, 0)])
def test_degenerate_geometry_gives_empty_image(n_r, n_a):
    ping = make_ping(n_r, n_a)
    rect = draw_rect_sonar_image(ping, GRAY)
    assert rect.shape == (n_r, n_a, 3)
    assert rect.size == 0
