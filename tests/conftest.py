# tests/conftest.py
import sys
from pathlib import Path

import numpy as np
import pytest

# Resolve repo root no matter where pytest is run from
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from sonar_drawer.interface import ArraySonarPing  # noqa: E402


def make_ping(num_ranges=100, num_azimuth=50, range_bounds=(0.0, 10.0),
              azimuth_bounds=(-0.5, 0.5), dtype=np.uint8, fill=None, seed=0):
    """Ping with evenly spaced axes; random samples unless fill is given."""
    shape = (num_ranges, num_azimuth)
    if fill is not None:
        data = np.full(shape, fill, dtype=dtype)
    elif np.issubdtype(dtype, np.integer):
        data = np.random.default_rng(seed).integers(0, np.iinfo(dtype).max, size=shape, dtype=dtype)
    else:
        data = np.random.default_rng(seed).random(shape).astype(dtype)
    return ArraySonarPing.from_bounds(data, range_bounds, azimuth_bounds)


@pytest.fixture
def scenario_a_ping():
    return make_ping()
