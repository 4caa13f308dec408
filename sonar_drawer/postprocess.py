"""Intensity post-processing: log compression and dB normalization.

Both functions are pure transforms on arrays; SonarPostprocessor wraps log
compression as a ping -> ping step for 32-bit sources.
"""
from __future__ import annotations

import logging

import numpy as np

from .config import PostprocessConfig
from .interface import AbstractSonarInterface, ArraySonarPing

logger = logging.getLogger(__name__)

UINT32_MAX = float(np.iinfo(np.uint32).max)


def log_compress(intensity, max_value: float = UINT32_MAX) -> np.ndarray:
    """log(intensity) / log(max_value), with intensity clamped to >= 1 first."""
    i = np.maximum(np.asarray(intensity, dtype=np.float64), 1.0)
    return np.log(i) / np.log(max_value)


def log_normalize(
    intensity,
    threshold: float = 0.74,
    vmax: float = 1.0,
    max_value: float = UINT32_MAX,
) -> np.ndarray:
    """
    Log-compress raw intensities and stretch [threshold, vmax] onto [0, 1].

    Zero (and negative) intensities are clamped to 1 before the logarithm, so
    the result is always finite and in [0, 1].

    Args:
        intensity: Raw intensities (scalar or array)
        threshold: Log-domain value mapped to 0
        vmax: Log-domain value mapped to 1
        max_value: Full-scale raw value (default: uint32 max)
    """
    if vmax <= threshold:
        raise ValueError(f"vmax ({vmax}) must be greater than threshold ({threshold})")
    v = log_compress(intensity, max_value)
    return np.clip((v - threshold) / (vmax - threshold), 0.0, 1.0)


def db_normalize(raw_polar: np.ndarray, db_norm: float = 60.0) -> np.ndarray:
    """
    Convert linear-power intensities to dB and normalize to [0,1].

    Args:
        raw_polar: Raw polar image (any scale)
        db_norm: dB span mapped onto [0, 1] (0 dB -> 1, -db_norm dB -> 0)

    Returns:
        float32 image in [0, 1]
    """
    image_db = 10 * np.log10(np.maximum(np.asarray(raw_polar, dtype=np.float64), 1e-10))
    return np.clip((image_db + db_norm) / db_norm, 0, 1).astype(np.float32)


class SonarPostprocessor:
    """Log-compresses 32-bit pings into 8-bit pings; other pings pass through."""

    def __init__(self, config: PostprocessConfig | None = None):
        self.config = config if config is not None else PostprocessConfig()
        if self.config.vmax <= self.config.threshold:
            raise ValueError(
                f"vmax ({self.config.vmax}) must be greater than threshold ({self.config.threshold})"
            )

    def normalize(self, raw: np.ndarray) -> np.ndarray:
        """Raw uint32 intensities -> float array in [0, 1] using the configured tunables."""
        cfg = self.config
        scaled = np.asarray(raw, dtype=np.float64) * cfg.gain
        v = log_normalize(scaled, threshold=cfg.threshold, vmax=cfg.vmax)
        if cfg.gamma > 0:
            v = v ** cfg.gamma
        return v

    def process(self, ping: AbstractSonarInterface) -> AbstractSonarInterface:
        """8-bit copy of a 32-bit ping; any other ping is returned unchanged."""
        if np.dtype(ping.data_type()) != np.uint32:
            return ping

        if isinstance(ping, ArraySonarPing):
            raw = ping.data
        else:
            raw = np.rint(ping.intensity_float_array().astype(np.float64) * UINT32_MAX)

        if raw.size:
            logv = log_compress(raw * self.config.gain)
            logger.debug("Log-domain intensity range [%.3f, %.3f]", logv.min(), logv.max())

        # truncate like a plain integer cast: 0.5 -> 127
        out = (self.normalize(raw) * 255.0).astype(np.uint8)
        return ArraySonarPing(ping.ranges(), ping.azimuths(), out)
