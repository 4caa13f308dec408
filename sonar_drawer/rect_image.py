"""Rectangular (range x azimuth) sonar image."""
import numpy as np

from .colormaps import SonarColorMap
from .interface import AbstractSonarInterface

RECT_DTYPES = (np.dtype(np.uint8), np.dtype(np.float32))


def output_dtype_for(buffer) -> np.dtype:
    """Dtype the rect image takes given a caller buffer (or requested dtype).

    3-channel uint8 and 3-channel float32 buffers keep their type; anything
    else becomes uint8. A bare dtype is accepted as well.
    """
    if buffer is None:
        return np.dtype(np.uint8)
    if isinstance(buffer, np.ndarray):
        if buffer.ndim == 3 and buffer.shape[2] == 3 and buffer.dtype in RECT_DTYPES:
            return buffer.dtype
        return np.dtype(np.uint8)
    try:
        dtype = np.dtype(buffer)
    except (TypeError, ValueError):
        return np.dtype(np.uint8)
    return dtype if dtype in RECT_DTYPES else np.dtype(np.uint8)


def draw_rect_sonar_image(
    ping: AbstractSonarInterface,
    colormap: SonarColorMap,
    rect_image: np.ndarray | None = None,
) -> np.ndarray:
    """
    Map a ping to an RGB image with one pixel per sample.

    The result has ``num_ranges`` rows and ``num_azimuth`` columns. Cell (0, 0)
    is the sample at the smallest range and smallest (most negative) azimuth;
    the last row holds the maximum range.

    Args:
        ping: Ping source
        colormap: Normalized intensity -> RGB
        rect_image: Optional buffer. Reused in place when it is already
            3-channel uint8/float32 of the right shape; otherwise a new array
            is allocated (its dtype still follows the rules of output_dtype_for)

    Returns:
        (num_ranges, num_azimuth, 3) uint8 or float32 array
    """
    dtype = output_dtype_for(rect_image)
    n_r, n_a = max(int(ping.num_ranges()), 0), max(int(ping.num_azimuth()), 0)
    shape = (n_r, n_a, 3)

    if isinstance(rect_image, np.ndarray) and rect_image.shape == shape and rect_image.dtype == dtype:
        out = rect_image
    else:
        out = np.zeros(shape, dtype=dtype)

    if n_r == 0 or n_a == 0:
        return out

    rgb = colormap(ping.intensity_float_array())
    if dtype == np.uint8:
        out[...] = np.rint(np.clip(rgb, 0.0, 1.0) * 255.0).astype(np.uint8)
    else:
        out[...] = rgb
    return out
