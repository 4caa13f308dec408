"""SonarDrawer: rect image -> fan image -> optional overlay, with cached remap tables."""
from __future__ import annotations

from contextlib import nullcontext

import numpy as np

from .colormaps import SonarColorMap
from .config import DrawConfig
from .interface import AbstractSonarInterface
from .overlay import draw_overlay
from .profiler import Profiler
from .rect_image import draw_rect_sonar_image, output_dtype_for
from .remap import remap_rect_sonar_image
from .remap_cache import CachedMap


class SonarDrawer:
    """
    Renders pings into fan images, reusing remap tables between pings that
    share a geometry.

    Each instance owns one CachedMap. Calls on the same instance from several
    threads must be serialized by the caller.

    Args:
        config: Defaults for colormap, output dtype, interpolation, background
            and overlay
        profiler: Optional Profiler timing the 'rect', 'remap' and 'overlay'
            stages
    """

    def __init__(self, config: DrawConfig | None = None, profiler: Profiler | None = None):
        self.config = config if config is not None else DrawConfig()
        self.profiler = profiler
        self._map = CachedMap()

    @property
    def cache(self) -> CachedMap:
        return self._map

    def _measure(self, name):
        return self.profiler.measure(name) if self.profiler is not None else nullcontext()

    def draw_sonar(
        self,
        ping: AbstractSonarInterface,
        colormap: SonarColorMap | None = None,
        image: np.ndarray | None = None,
        add_overlay: bool | None = None,
    ) -> np.ndarray:
        """
        Draw the rect image, remap it to a fan image and optionally overlay it.

        The intermediate rect image is not returned; call draw_rect_sonar_image
        and remap_rect_sonar_image directly when it is needed.

        Args:
            ping: Ping source
            colormap: Overrides config.colormap
            image: Buffer whose format (3-channel uint8 or float32) selects the
                output format; when None, config.output_dtype is used
            add_overlay: Overrides config.add_overlay
        """
        rect = self.draw_rect_sonar_image(ping, colormap, image)
        fan = self.remap_rect_sonar_image(ping, rect)
        if add_overlay if add_overlay is not None else self.config.add_overlay:
            fan = self.draw_overlay(ping, fan)
        return fan

    render = draw_sonar

    def draw_rect_sonar_image(
        self,
        ping: AbstractSonarInterface,
        colormap: SonarColorMap | None = None,
        rect_image: np.ndarray | None = None,
    ) -> np.ndarray:
        """(num_ranges, num_azimuth, 3) colormapped image; see rect_image.draw_rect_sonar_image."""
        if colormap is None:
            colormap = self.config.colormap
        if rect_image is None:
            dtype = output_dtype_for(self.config.output_dtype)
            rect_image = np.zeros((0, 0, 3), dtype=dtype)
        with self._measure('rect'):
            return draw_rect_sonar_image(ping, colormap, rect_image)

    def remap_rect_sonar_image(self, ping: AbstractSonarInterface, rect_image: np.ndarray) -> np.ndarray:
        with self._measure('remap'):
            return remap_rect_sonar_image(
                ping, rect_image, self._map,
                interpolation=self.config.interpolation,
                background=self.config.background,
            )

    def draw_overlay(self, ping: AbstractSonarInterface, sonar_image: np.ndarray) -> np.ndarray:
        with self._measure('overlay'):
            return draw_overlay(ping, sonar_image, self.config.overlay)
