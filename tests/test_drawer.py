import dataclasses

import numpy as np

from sonar_drawer.colormaps import SonarColorMap
from sonar_drawer.config import DrawConfig
from sonar_drawer.drawer import SonarDrawer
from sonar_drawer.profiler import Profiler
from sonar_drawer.remap_cache import fan_layout
from conftest import make_ping


def test_scenario_a_builds_once(scenario_a_ping):
    drawer = SonarDrawer()
    rect = drawer.draw_rect_sonar_image(scenario_a_ping)
    assert rect.shape == (100, 50, 3)

    fan = drawer.draw_sonar(scenario_a_ping)
    assert drawer.cache.rebuild_count == 1
    assert fan.shape == (100, 97, 3)
    assert fan.dtype == np.uint8

    again = drawer.draw_sonar(make_ping(seed=1))
    assert drawer.cache.rebuild_count == 1
    assert again.shape == fan.shape


def test_scenario_b_rebuilds_on_new_azimuth_count(scenario_a_ping):
    drawer = SonarDrawer()
    drawer.draw_sonar(scenario_a_ping)

    ping_b = make_ping(num_azimuth=60)
    fan = drawer.draw_sonar(ping_b)
    assert drawer.cache.rebuild_count == 2
    assert drawer.cache.geometry.num_azimuth == 60
    assert fan.shape[:2] == fan_layout(ping_b.geometry()).shape


def test_wider_span_gives_wider_canvas(scenario_a_ping):
    drawer = SonarDrawer()
    narrow = drawer.draw_sonar(scenario_a_ping)
    wide = drawer.draw_sonar(make_ping(azimuth_bounds=(-1.0, 1.0)))
    assert wide.shape[1] > narrow.shape[1]
    assert drawer.cache.rebuild_count == 2


def test_output_format_follows_buffer(scenario_a_ping):
    drawer = SonarDrawer()
    fan = drawer.draw_sonar(scenario_a_ping, image=np.zeros((1, 1, 3), np.float32))
    assert fan.dtype == np.float32
    assert fan.max() <= 1.0 + 1e-6


def test_output_format_follows_config(scenario_a_ping):
    drawer = SonarDrawer(DrawConfig(output_dtype=np.float32))
    assert drawer.draw_sonar(scenario_a_ping).dtype == np.float32


def test_colormap_override(scenario_a_ping):
    drawer = SonarDrawer()
    inferno = drawer.draw_sonar(scenario_a_ping)
    gray = drawer.draw_sonar(scenario_a_ping, colormap=SonarColorMap())
    assert not np.array_equal(inferno, gray)
    valid = drawer.cache.tables.valid
    # gray keeps all three channels equal
    assert (gray[valid][:, 0] == gray[valid][:, 2]).all()


def test_overlay_flag(scenario_a_ping):
    drawer = SonarDrawer(DrawConfig(colormap=SonarColorMap()))
    black = make_ping(fill=0)
    plain = drawer.draw_sonar(black)
    decorated = drawer.draw_sonar(black, add_overlay=True)
    assert plain.sum() == 0
    assert decorated.sum() > 0

    always = SonarDrawer(dataclasses.replace(drawer.config, add_overlay=True))
    assert always.draw_sonar(black).sum() > 0


def test_background_from_config(scenario_a_ping):
    drawer = SonarDrawer(DrawConfig(background=42))
    fan = drawer.draw_sonar(scenario_a_ping)
    assert (fan[~drawer.cache.tables.valid] == 42).all()


def test_profiler_records_stages(scenario_a_ping):
    profiler = Profiler()
    drawer = SonarDrawer(profiler=profiler)
    drawer.draw_sonar(scenario_a_ping, add_overlay=True)
    names = {s['name'] for s in profiler.stats()}
    assert names == {'rect', 'remap', 'overlay'}
    assert 'remap' in profiler.report()


def test_degenerate_ping_does_not_crash():
    drawer = SonarDrawer()
    fan = drawer.draw_sonar(make_ping(num_ranges=0), add_overlay=True)
    assert fan.size == 0
