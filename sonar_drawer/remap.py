"""Resample a rect sonar image into a fan image."""
import cv2
import numpy as np

from .interface import AbstractSonarInterface
from .remap_cache import CachedMap


def remap_rect_sonar_image(
    ping: AbstractSonarInterface,
    rect_image: np.ndarray,
    cached_map: CachedMap,
    interpolation: int = cv2.INTER_LINEAR,
    background: float = 0.0,
) -> np.ndarray:
    """
    Warp a rect image into the geometrically correct fan image.

    Args:
        ping: Ping whose geometry the rect image was drawn from
        rect_image: (num_ranges, num_azimuth, 3) uint8 or float32
        cached_map: Remap table cache; rebuilt only if the geometry changed
        interpolation: OpenCV interpolation flag
        background: Value written to every pixel outside the wedge

    Returns:
        (height, width, 3) image with the rect image's dtype
    """
    tables = cached_map.get(ping)
    h, w = tables.shape
    geometry = tables.geometry

    expected = (geometry.num_ranges, geometry.num_azimuth)
    if rect_image.shape[:2] != expected:
        raise ValueError(
            f"Rect image {rect_image.shape[:2]} does not match ping geometry {expected}"
        )

    channels = rect_image.shape[2] if rect_image.ndim == 3 else 1
    out_shape = (h, w, channels) if rect_image.ndim == 3 else (h, w)
    if h == 0 or w == 0 or rect_image.size == 0:
        out = np.empty(out_shape, dtype=rect_image.dtype)
        out[...] = background
        return out

    fan = cv2.remap(
        rect_image,
        tables.map_x,
        tables.map_y,
        interpolation,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(background,) * 4,
    )
    # cv2 squeezes single-channel output; restore the requested layout
    fan = fan.reshape(out_shape)
    fan[~tables.valid] = background
    return fan
