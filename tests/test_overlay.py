import math

import numpy as np
import pytest

from sonar_drawer.config import OverlayConfig
from sonar_drawer.interface import PingGeometry
from sonar_drawer.overlay import bearing_angles, draw_overlay, nice_ring_spacing, ring_ranges
from sonar_drawer.remap_cache import fan_layout
from conftest import make_ping


@pytest.mark.parametrize("max_range,expected", [
    (10.0, 5.0),
    (20.0, 5.0),
    (3.0, 1.0),
    (120.0, 50.0),
    (0.0, 0.0),
])
def test_nice_ring_spacing(max_range, expected):
    assert nice_ring_spacing(max_range, 4) == pytest.approx(expected)


def test_ring_ranges_end_at_max_range():
    g = PingGeometry(100, 50, (0.0, 20.0), (-0.5, 0.5))
    assert ring_ranges(g) == pytest.approx([5.0, 10.0, 15.0, 20.0])


def test_ring_ranges_skip_inside_min_range():
    g = PingGeometry(100, 50, (7.0, 20.0), (-0.5, 0.5))
    assert ring_ranges(g) == pytest.approx([10.0, 15.0, 20.0])


def test_bearing_angles_include_edges():
    g = PingGeometry(100, 50, (0.0, 10.0), (-0.5, 0.5))
    angles = bearing_angles(g, 20.0)
    assert angles[0] == -0.5 and angles[-1] == 0.5
    assert angles[1:-1] == pytest.approx([-math.radians(20), 0.0, math.radians(20)])


def _blank(ping, dtype=np.uint8):
    layout = fan_layout(ping.geometry())
    return np.zeros(layout.shape + (3,), dtype=dtype)


def test_overlay_draws_on_a_copy(scenario_a_ping):
    image = _blank(scenario_a_ping)
    out = draw_overlay(scenario_a_ping, image)
    assert out is not image
    assert image.sum() == 0
    assert out.sum() > 0
    assert out.shape == image.shape and out.dtype == np.uint8


def test_overlay_on_float_image_stays_normalized(scenario_a_ping):
    out = draw_overlay(scenario_a_ping, _blank(scenario_a_ping, np.float32))
    assert out.dtype == np.float32
    assert out.max() <= 1.0 + 1e-6
    assert out.max() > 0


def test_overlay_marks_wedge_edge(scenario_a_ping):
    out = draw_overlay(scenario_a_ping, _blank(scenario_a_ping), OverlayConfig(draw_labels=False))
    layout = fan_layout(scenario_a_ping.geometry())
    x, y = layout.to_pixel(5.0, -0.5)
    patch = out[int(y) - 1:int(y) + 2, int(x) - 1:int(x) + 2]
    assert patch.max() > 0


def test_overlay_line_color():
    ping = make_ping()
    cfg = OverlayConfig(line_color=(255, 0, 0), text_color=(255, 0, 0))
    out = draw_overlay(ping, _blank(ping), cfg)
    assert out[..., 0].max() > 0
    assert out[..., 1].max() == 0 and out[..., 2].max() == 0


def test_degenerate_geometry_leaves_image_alone():
    ping = make_ping(0, 5)
    image = np.zeros((4, 4, 3), dtype=np.uint8)
    out = draw_overlay(ping, image)
    np.testing.assert_array_equal(out, image)
