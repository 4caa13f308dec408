"""Polar-to-cartesian remap tables and their single-slot cache.

The fan image places the sonar head at ``FanLayout.origin``. Azimuth 0 points
straight up the image and positive azimuth turns towards increasing column
(starboard). One pixel covers ``1 / pixels_per_meter`` meters in both axes.

Remap tables depend only on ping geometry, never on intensities, so a
``CachedMap`` can serve every ping of a session until the geometry changes.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from .interface import AbstractSonarInterface, PingGeometry

logger = logging.getLogger(__name__)

# Table entry for fan pixels outside the sonar wedge
OUT_OF_WEDGE = -1.0

# Slack when testing pixels against the wedge and when rounding canvas extents
_EPS = 1e-9


@dataclass(frozen=True)
class FanLayout:
    """Size of the fan canvas and where the sonar head sits on it."""
    width: int
    height: int
    origin: tuple[float, float]     # (column, row) of the sonar head
    pixels_per_meter: float

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)

    def to_pixel(self, range_m, azimuth_rad):
        """Polar position (meters, radians) -> fractional (column, row)."""
        r = np.asarray(range_m, dtype=np.float64) * self.pixels_per_meter
        az = np.asarray(azimuth_rad, dtype=np.float64)
        return (self.origin[0] + r * np.sin(az), self.origin[1] - r * np.cos(az))


@dataclass(frozen=True, eq=False)
class RemapTables:
    """Per-pixel sampling coordinates into the rect image.

    ``map_x`` holds the rect column and ``map_y`` the rect row to sample for
    each fan pixel, in the layout ``cv2.remap`` expects. Pixels outside the
    wedge hold OUT_OF_WEDGE in both maps and False in ``valid``.
    """
    map_x: np.ndarray
    map_y: np.ndarray
    valid: np.ndarray
    layout: FanLayout
    geometry: PingGeometry

    @property
    def shape(self) -> tuple[int, int]:
        return self.map_x.shape


def _trig_extents(az_min: float, az_max: float) -> tuple[float, float, float, float]:
    """Min/max of sin and cos over [az_min, az_max]."""
    if az_max - az_min >= 2.0 * math.pi:
        return (-1.0, 1.0, -1.0, 1.0)
    quarter = math.pi / 2.0
    angles = [az_min, az_max]
    k = math.ceil(az_min / quarter)
    while k * quarter <= az_max:
        angles.append(k * quarter)
        k += 1
    sines = [math.sin(a) for a in angles]
    cosines = [math.cos(a) for a in angles]
    return (min(sines), max(sines), min(cosines), max(cosines))


def fan_layout(geometry: PingGeometry) -> FanLayout:
    """
    Canvas dimensions needed to hold the whole wedge of a ping.

    The scale puts the maximum range roughly ``num_ranges - 1`` pixels from the
    origin. The canvas always contains the origin and the full angular span,
    whether or not the span straddles zero.

    Degenerate geometry gives a 0 x 0 canvas; a zero or negative maximum range
    (or a single range bin) gives a 1 x 1 canvas.
    """
    if geometry.is_degenerate:
        return FanLayout(width=0, height=0, origin=(0.0, 0.0), pixels_per_meter=1.0)

    r_max = geometry.max_range
    if r_max > 0 and geometry.num_ranges > 1 and math.isfinite(r_max):
        ppm = (geometry.num_ranges - 1) / r_max
        extent = r_max * ppm
    else:
        ppm, extent = 1.0, 0.0

    sin_lo, sin_hi, cos_lo, cos_hi = _trig_extents(geometry.min_azimuth, geometry.max_azimuth)
    x_lo = math.floor(min(0.0, sin_lo) * extent + _EPS)
    x_hi = math.ceil(max(0.0, sin_hi) * extent - _EPS)
    y_lo = math.floor(min(0.0, cos_lo) * extent + _EPS)
    y_hi = math.ceil(max(0.0, cos_hi) * extent - _EPS)

    return FanLayout(
        width=int(x_hi - x_lo + 1),
        height=int(y_hi - y_lo + 1),
        origin=(float(-x_lo), float(y_hi)),
        pixels_per_meter=float(ppm),
    )


def _to_index(values: np.ndarray, lo: float, hi: float, count: int) -> np.ndarray:
    """Linear map [lo, hi] -> [0, count - 1]; a zero-width interval maps to 0."""
    span = hi - lo
    if count <= 1 or span <= 0:
        return np.zeros_like(values)
    return np.clip((values - lo) / span * (count - 1), 0.0, count - 1)


def build_remap_tables(geometry: PingGeometry) -> RemapTables:
    """Compute remap tables for a ping geometry (pure, no caching)."""
    layout = fan_layout(geometry)
    h, w = layout.shape
    if h == 0 or w == 0:
        empty = np.zeros((h, w), dtype=np.float32)
        return RemapTables(empty, empty.copy(), np.zeros((h, w), dtype=bool), layout, geometry)

    cols, rows = np.meshgrid(np.arange(w, dtype=np.float64), np.arange(h, dtype=np.float64))
    x = (cols - layout.origin[0]) / layout.pixels_per_meter     # starboard
    y = (layout.origin[1] - rows) / layout.pixels_per_meter     # forward

    rng = np.hypot(x, y)
    azimuth = np.arctan2(x, y)

    r_min, r_max = geometry.range_bounds
    a_min, a_max = geometry.azimuth_bounds
    # unwrap into [a_min - eps, a_min + 2pi - eps) so wedges past +-pi stay contiguous
    azimuth = a_min + np.mod(azimuth - a_min + _EPS, 2.0 * np.pi) - _EPS
    r_tol = _EPS * max(1.0, abs(r_max))
    valid = ((rng >= r_min - r_tol) & (rng <= r_max + r_tol)
             & (azimuth >= a_min - _EPS) & (azimuth <= a_max + _EPS))

    row = _to_index(rng, r_min, r_max, geometry.num_ranges)
    col = _to_index(azimuth, a_min, a_max, geometry.num_azimuth)

    map_x = np.where(valid, col, OUT_OF_WEDGE).astype(np.float32)
    map_y = np.where(valid, row, OUT_OF_WEDGE).astype(np.float32)
    for table in (map_x, map_y, valid):
        table.flags.writeable = False
    return RemapTables(map_x, map_y, valid, layout, geometry)


def _as_geometry(source) -> PingGeometry:
    if isinstance(source, PingGeometry):
        return source
    if isinstance(source, AbstractSonarInterface):
        return PingGeometry.from_ping(source)
    raise TypeError(f"Expected a ping or PingGeometry, got {type(source).__name__}")


class CacheState(Enum):
    EMPTY = "empty"
    VALID = "valid"
    STALE = "stale"


class CachedMap:
    """
    Single-slot memo of remap tables keyed on exact ping geometry.

    Holds at most one table set. Any bit-level change in range bounds,
    azimuth bounds or sample counts forces a rebuild. Not thread safe.

    Args:
        builder: Function geometry -> RemapTables (default build_remap_tables)
    """

    def __init__(self, builder: Callable[[PingGeometry], RemapTables] = build_remap_tables):
        self._builder = builder
        self._geometry: PingGeometry | None = None
        self._tables: RemapTables | None = None
        self.rebuild_count = 0
        self.last_build_seconds: float | None = None

    @property
    def geometry(self) -> PingGeometry | None:
        """Fingerprint of the stored tables, None while empty."""
        return self._geometry

    @property
    def tables(self) -> RemapTables | None:
        return self._tables

    def state_for(self, source) -> CacheState:
        if self._tables is None:
            return CacheState.EMPTY
        return CacheState.VALID if self.is_valid(source) else CacheState.STALE

    def is_valid(self, source) -> bool:
        """True iff stored tables were built for exactly this geometry."""
        return self._tables is not None and self._geometry == _as_geometry(source)

    def get(self, source) -> RemapTables:
        """Tables for the ping's geometry, rebuilding only when it changed."""
        geometry = _as_geometry(source)
        if not self.is_valid(geometry):
            self.rebuild(geometry)
        return self._tables

    def rebuild(self, source) -> RemapTables:
        geometry = _as_geometry(source)
        if self._geometry is not None:
            logger.debug("Remap tables stale: %s -> %s", self._geometry, geometry)

        start = time.perf_counter()
        tables = self._builder(geometry)
        self.last_build_seconds = time.perf_counter() - start

        self._tables = tables
        self._geometry = geometry
        self.rebuild_count += 1
        logger.debug(
            "Built remap tables #%d: %dx%d canvas in %.1f ms",
            self.rebuild_count, tables.layout.width, tables.layout.height,
            self.last_build_seconds * 1000.0,
        )
        return tables

    def clear(self):
        """Drop stored tables and fingerprint (back to EMPTY)."""
        self._tables = None
        self._geometry = None
