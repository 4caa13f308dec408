"""Range rings, bearing lines and range labels drawn over a fan image."""
import math

import cv2
import numpy as np

from .config import OverlayConfig
from .interface import AbstractSonarInterface, PingGeometry
from .remap_cache import fan_layout


def nice_ring_spacing(max_range: float, target_num_rings: int = 4) -> float:
    """Ring spacing of 1, 2 or 5 x 10^k meters giving about target_num_rings rings."""
    if max_range <= 0 or target_num_rings <= 0:
        return 0.0
    raw = max_range / target_num_rings
    magnitude = 10.0 ** math.floor(math.log10(raw))
    for mult in (1.0, 2.0, 5.0, 10.0):
        if mult * magnitude >= raw:
            return mult * magnitude
    return 10.0 * magnitude


def ring_ranges(geometry: PingGeometry, target_num_rings: int = 4) -> list[float]:
    """Ranges at which rings are drawn, ending with the maximum range."""
    r_min, r_max = geometry.range_bounds
    step = nice_ring_spacing(r_max, target_num_rings)
    if step <= 0:
        return []
    rings = []
    k = 1
    while k * step < r_max - 1e-9:
        if k * step >= r_min:
            rings.append(k * step)
        k += 1
    rings.append(r_max)
    return rings


def bearing_angles(geometry: PingGeometry, spacing_deg: float = 20.0) -> list[float]:
    """Wedge edges plus interior bearings at multiples of spacing_deg (radians)."""
    a_min, a_max = geometry.azimuth_bounds
    angles = [a_min]
    if spacing_deg > 0:
        step = math.radians(spacing_deg)
        k = math.floor(a_min / step) + 1
        while k * step < a_max - 1e-9:
            if k * step > a_min + 1e-9:
                angles.append(k * step)
            k += 1
    if a_max != a_min:
        angles.append(a_max)
    return angles


def _scale_color(color, dtype) -> tuple:
    if np.issubdtype(dtype, np.floating):
        return tuple(c / 255.0 for c in color)
    return tuple(int(c) for c in color)


def _point(layout, range_m, azimuth):
    x, y = layout.to_pixel(range_m, azimuth)
    return (int(round(float(x))), int(round(float(y))))


def draw_overlay(
    ping: AbstractSonarInterface,
    sonar_image: np.ndarray,
    config: OverlayConfig = OverlayConfig(),
) -> np.ndarray:
    """
    Decorate a fan image using only the ping's geometry.

    Returns a copy; the input image is left untouched. Images with no pixels
    and degenerate geometries are returned as an unmodified copy.
    """
    out = np.ascontiguousarray(sonar_image).copy()
    geometry = PingGeometry.from_ping(ping)
    layout = fan_layout(geometry)
    if out.size == 0 or geometry.is_degenerate or layout.pixels_per_meter <= 0:
        return out

    line_color = _scale_color(config.line_color, out.dtype)
    text_color = _scale_color(config.text_color, out.dtype)
    thickness = config.line_thickness
    a_min, a_max = geometry.azimuth_bounds
    center = (int(round(layout.origin[0])), int(round(layout.origin[1])))
    # cv2 measures ellipse angles clockwise from +x; azimuth 0 points up
    start_deg = math.degrees(a_min) - 90.0
    end_deg = math.degrees(a_max) - 90.0

    rings = ring_ranges(geometry, config.target_num_rings)
    for r in rings:
        radius = int(round(r * layout.pixels_per_meter))
        if radius <= 0:
            continue
        cv2.ellipse(out, center, (radius, radius), 0.0, start_deg, end_deg,
                    line_color, thickness, cv2.LINE_AA)

    r_min, r_max = geometry.range_bounds
    for az in bearing_angles(geometry, config.bearing_spacing_deg):
        cv2.line(out, _point(layout, r_min, az), _point(layout, r_max, az),
                 line_color, thickness, cv2.LINE_AA)

    if config.draw_labels:
        for r in rings:
            x, y = _point(layout, r, a_max)
            cv2.putText(out, f"{r:g} m", (x + 4, y), cv2.FONT_HERSHEY_SIMPLEX,
                        config.font_scale, text_color, 1, cv2.LINE_AA)
    return out
