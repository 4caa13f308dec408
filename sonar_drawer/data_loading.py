"""Loading polar sonar frames from NPZ archives.

Archive layout (as written by ``save_polar_npz``):
    raw_polar:  (N, range_bins, beams) frames
    timestamps: (N,) seconds
    metadata:   JSON string; may carry range_min, range_max and either
                fov_deg or azimuth_min/azimuth_max (radians)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import numpy as np

from .interface import ArraySonarPing
from .postprocess import db_normalize

logger = logging.getLogger(__name__)

DEFAULT_RANGE_BOUNDS = (0.5, 20.0)
DEFAULT_FOV_DEG = 120.0


@dataclass
class PolarArchive:
    frames: np.ndarray
    timestamps: np.ndarray
    metadata: dict = field(default_factory=dict)

    def __len__(self):
        return len(self.frames)

    def range_bounds(self) -> tuple[float, float]:
        md = self.metadata
        return (float(md.get("range_min", DEFAULT_RANGE_BOUNDS[0])),
                float(md.get("range_max", DEFAULT_RANGE_BOUNDS[1])))

    def azimuth_bounds(self) -> tuple[float, float]:
        md = self.metadata
        if "azimuth_min" in md and "azimuth_max" in md:
            return (float(md["azimuth_min"]), float(md["azimuth_max"]))
        half_fov = np.deg2rad(0.5 * float(md.get("fov_deg", DEFAULT_FOV_DEG)))
        return (-half_fov, half_fov)


def save_polar_npz(npz_path: Path, frames: np.ndarray, timestamps=None, metadata: dict | None = None):
    """Write frames (N, range_bins, beams) in the archive layout."""
    frames = np.asarray(frames)
    if frames.ndim != 3:
        raise ValueError(f"Expected (N, range_bins, beams) frames, got {frames.shape}")
    if timestamps is None:
        timestamps = np.arange(len(frames), dtype=np.float64)
    np.savez_compressed(
        npz_path,
        raw_polar=frames,
        timestamps=np.asarray(timestamps, dtype=np.float64),
        metadata=json.dumps(metadata or {}),
    )
    logger.info("Saved %d frames to %s", len(frames), npz_path)


def load_polar_npz(npz_path: Path) -> PolarArchive:
    """Load an archive written by save_polar_npz."""
    with np.load(npz_path, allow_pickle=False) as data:
        frames = data["raw_polar"]
        timestamps = data["timestamps"] if "timestamps" in data else np.arange(len(frames), dtype=np.float64)
        metadata = json.loads(str(data["metadata"])) if "metadata" in data else {}

    if frames.ndim == 2:
        frames = frames[np.newaxis]
    logger.info("Loaded %d frames (%s) from %s", len(frames), "x".join(map(str, frames.shape[1:])), npz_path)
    return PolarArchive(frames=frames, timestamps=timestamps, metadata=metadata)


def frame_to_ping(
    frame: np.ndarray,
    range_bounds: tuple[float, float],
    azimuth_bounds: tuple[float, float],
    db_norm: float | None = 60.0,
) -> ArraySonarPing:
    """
    Wrap one polar frame as a ping.

    Integer frames are used as-is. Float frames are treated as linear power and
    converted with db_normalize unless db_norm is None, in which case they must
    already be normalized to [0, 1].
    """
    frame = np.asarray(frame)
    if np.issubdtype(frame.dtype, np.floating):
        frame = db_normalize(frame, db_norm) if db_norm is not None else frame.astype(np.float32)
    return ArraySonarPing.from_bounds(frame, range_bounds, azimuth_bounds)


def iter_pings(
    archive: PolarArchive,
    range_bounds: tuple[float, float] | None = None,
    azimuth_bounds: tuple[float, float] | None = None,
    db_norm: float | None = 60.0,
    start: int = 0,
    count: int | None = None,
    step: int = 1,
) -> Iterator[tuple[int, ArraySonarPing]]:
    """Yield (frame index, ping) pairs; bounds default to the archive metadata."""
    if range_bounds is None:
        range_bounds = archive.range_bounds()
    if azimuth_bounds is None:
        azimuth_bounds = archive.azimuth_bounds()

    start = max(0, start)
    stop = len(archive) if count is None else min(len(archive), start + count * step)
    for idx in range(start, stop, max(1, step)):
        yield idx, frame_to_ping(archive.frames[idx], range_bounds, azimuth_bounds, db_norm)
