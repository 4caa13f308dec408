"""Ping source abstraction: geometry, sample addressing and an array-backed ping."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np


class AzimuthRangeIndices(NamedTuple):
    """Address of one sample in a ping: (azimuth column, range row)."""
    azimuth: int
    range: int


@dataclass(frozen=True)
class PingGeometry:
    """Polar geometry of a single ping.

    Equality is exact over all four fields, which makes an instance usable as
    the fingerprint of a cached remap table.
    """
    num_ranges: int
    num_azimuth: int
    range_bounds: tuple[float, float]
    azimuth_bounds: tuple[float, float]

    @classmethod
    def from_ping(cls, ping: "AbstractSonarInterface") -> "PingGeometry":
        return cls(
            num_ranges=int(ping.num_ranges()),
            num_azimuth=int(ping.num_azimuth()),
            range_bounds=tuple(float(v) for v in ping.range_bounds()),
            azimuth_bounds=tuple(float(v) for v in ping.azimuth_bounds()),
        )

    @property
    def is_degenerate(self) -> bool:
        return self.num_ranges <= 0 or self.num_azimuth <= 0

    @property
    def min_range(self) -> float:
        return self.range_bounds[0]

    @property
    def max_range(self) -> float:
        return self.range_bounds[1]

    @property
    def min_azimuth(self) -> float:
        return self.azimuth_bounds[0]

    @property
    def max_azimuth(self) -> float:
        return self.azimuth_bounds[1]


# Dtypes a ping may carry and the value that maps to a normalized 1.0
_INTEGER_MAX = {
    np.dtype(np.uint8): float(np.iinfo(np.uint8).max),
    np.dtype(np.uint16): float(np.iinfo(np.uint16).max),
    np.dtype(np.uint32): float(np.iinfo(np.uint32).max),
}
SUPPORTED_DTYPES = tuple(_INTEGER_MAX) + (np.dtype(np.float32),)


def normalize_samples(samples: np.ndarray) -> np.ndarray:
    """Map raw samples of any supported dtype to float32 in [0, 1].

    Integer samples are divided by the maximum of their type; float samples are
    assumed to be normalized already and are only clipped.
    """
    samples = np.asarray(samples)
    scale = _INTEGER_MAX.get(samples.dtype)
    if scale is not None:
        return (samples.astype(np.float64) / scale).astype(np.float32)
    safe = np.nan_to_num(samples.astype(np.float32), nan=0.0, posinf=1.0, neginf=0.0)
    return np.clip(safe, 0.0, 1.0)


class AbstractSonarInterface(ABC):
    """Capability set the renderer consumes from a ping.

    Range bounds and azimuth bounds default to the extremes of ``ranges()`` and
    ``azimuths()``; an empty axis reports ``(0.0, 0.0)``.
    """

    @abstractmethod
    def ranges(self) -> np.ndarray:
        """Range of each row in meters, ascending."""

    @abstractmethod
    def azimuths(self) -> np.ndarray:
        """Azimuth of each column in radians, ascending."""

    @abstractmethod
    def data_type(self) -> np.dtype:
        """Dtype of the underlying samples."""

    @abstractmethod
    def intensity_float(self, idx: AzimuthRangeIndices) -> float:
        """Normalized intensity in [0, 1] of one sample."""

    def num_ranges(self) -> int:
        return len(self.ranges())

    def num_azimuth(self) -> int:
        return len(self.azimuths())

    def range_bounds(self) -> tuple[float, float]:
        return _bounds(self.ranges())

    def azimuth_bounds(self) -> tuple[float, float]:
        return _bounds(self.azimuths())

    def geometry(self) -> PingGeometry:
        return PingGeometry.from_ping(self)

    def intensity_uint8(self, idx: AzimuthRangeIndices) -> int:
        return int(round(self.intensity_float(idx) * np.iinfo(np.uint8).max))

    def intensity_uint16(self, idx: AzimuthRangeIndices) -> int:
        return int(round(self.intensity_float(idx) * np.iinfo(np.uint16).max))

    def intensity_uint32(self, idx: AzimuthRangeIndices) -> int:
        return int(round(self.intensity_float(idx) * np.iinfo(np.uint32).max))

    def intensity_float_array(self) -> np.ndarray:
        """Whole ping as a (num_ranges, num_azimuth) float32 array in [0, 1]."""
        n_r, n_a = self.num_ranges(), self.num_azimuth()
        out = np.zeros((n_r, n_a), dtype=np.float32)
        for r_idx in range(n_r):
            for a_idx in range(n_a):
                out[r_idx, a_idx] = self.intensity_float(AzimuthRangeIndices(a_idx, r_idx))
        return out


def _bounds(values: np.ndarray) -> tuple[float, float]:
    values = np.asarray(values)
    if values.size == 0:
        return (0.0, 0.0)
    return (float(np.min(values)), float(np.max(values)))


class ArraySonarPing(AbstractSonarInterface):
    """Ping backed by numpy arrays.

    Args:
        ranges: (R,) range of each row in meters
        azimuths: (A,) azimuth of each column in radians
        intensities: (R, A) samples, uint8 / uint16 / uint32 / float32
    """

    def __init__(self, ranges, azimuths, intensities):
        self._ranges = np.asarray(ranges, dtype=np.float64).ravel()
        self._azimuths = np.asarray(azimuths, dtype=np.float64).ravel()

        intensities = np.asarray(intensities)
        if intensities.dtype not in SUPPORTED_DTYPES:
            if np.issubdtype(intensities.dtype, np.floating):
                intensities = intensities.astype(np.float32)
            else:
                raise ValueError(f"Unsupported sample dtype: {intensities.dtype}")
        if intensities.size == 0:
            intensities = intensities.reshape(len(self._ranges), len(self._azimuths))
        expected = (len(self._ranges), len(self._azimuths))
        if intensities.shape != expected:
            raise ValueError(
                f"Intensity shape {intensities.shape} does not match "
                f"(num_ranges, num_azimuth) = {expected}"
            )
        # rows and columns must run from min to max; descending axes are flipped
        if len(self._ranges) > 1 and self._ranges[0] > self._ranges[-1]:
            self._ranges = self._ranges[::-1].copy()
            intensities = intensities[::-1, :]
        if len(self._azimuths) > 1 and self._azimuths[0] > self._azimuths[-1]:
            self._azimuths = self._azimuths[::-1].copy()
            intensities = intensities[:, ::-1]
        for name, axis in (("ranges", self._ranges), ("azimuths", self._azimuths)):
            if np.any(np.diff(axis) < 0):
                raise ValueError(f"{name} must be monotonic")
        self._intensities = np.ascontiguousarray(intensities)

    @classmethod
    def from_bounds(
        cls,
        intensities,
        range_bounds: tuple[float, float],
        azimuth_bounds: tuple[float, float],
    ) -> "ArraySonarPing":
        """Build a ping with evenly spaced ranges and azimuths spanning the bounds."""
        intensities = np.asarray(intensities)
        if intensities.ndim != 2:
            raise ValueError(f"Expected a 2D (ranges, azimuths) array, got {intensities.shape}")
        n_r, n_a = intensities.shape
        ranges = np.linspace(range_bounds[0], range_bounds[1], n_r)
        azimuths = np.linspace(azimuth_bounds[0], azimuth_bounds[1], n_a)
        return cls(ranges, azimuths, intensities)

    def ranges(self) -> np.ndarray:
        return self._ranges

    def azimuths(self) -> np.ndarray:
        return self._azimuths

    def data_type(self) -> np.dtype:
        return self._intensities.dtype

    @property
    def data(self) -> np.ndarray:
        """Raw samples, (num_ranges, num_azimuth)."""
        return self._intensities

    def intensity_float(self, idx: AzimuthRangeIndices) -> float:
        return float(normalize_samples(self._intensities[idx.range, idx.azimuth]))

    def intensity_uint32(self, idx: AzimuthRangeIndices) -> int:
        if self._intensities.dtype == np.uint32:
            return int(self._intensities[idx.range, idx.azimuth])
        return super().intensity_uint32(idx)

    def intensity_uint8(self, idx: AzimuthRangeIndices) -> int:
        if self._intensities.dtype == np.uint8:
            return int(self._intensities[idx.range, idx.azimuth])
        return super().intensity_uint8(idx)

    def intensity_float_array(self) -> np.ndarray:
        return normalize_samples(self._intensities)

    def __repr__(self):
        g = self.geometry()
        return (f"ArraySonarPing(num_ranges={g.num_ranges}, num_azimuth={g.num_azimuth}, "
                f"range_bounds={g.range_bounds}, azimuth_bounds={g.azimuth_bounds}, "
                f"dtype={self._intensities.dtype})")
