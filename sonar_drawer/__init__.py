#!/usr/bin/env python3
"""
Sonar Drawer - render polar sonar pings as rect and fan images.

A ping (range x azimuth intensities) is first colormapped into a rect image,
then warped into a geometrically correct fan image through remap tables that
are cached per ping geometry:
- Ping sources and geometry fingerprints
- Colormaps (grayscale, inferno, any matplotlib map)
- Rect image builder
- Remap table cache (single slot, exact geometry match)
- Fan image remapper and overlay
- Log-compression post-processing for 32-bit pings
- NPZ archive loading and the sonar-draw CLI

Usage Examples:
--------------

1. Draw a fan image:
    from sonar_drawer import ArraySonarPing, SonarDrawer
    ping = ArraySonarPing.from_bounds(intensities, (0.0, 10.0), (-0.5, 0.5))
    drawer = SonarDrawer()
    fan = drawer.draw_sonar(ping, add_overlay=True)

2. Keep the rect image:
    rect = drawer.draw_rect_sonar_image(ping)
    fan = drawer.remap_rect_sonar_image(ping, rect)

3. Post-process a 32-bit ping before drawing:
    from sonar_drawer import SonarPostprocessor, PostprocessConfig
    ping8 = SonarPostprocessor(PostprocessConfig(threshold=0.7)).process(ping)

4. Use the remap cache on its own:
    from sonar_drawer import CachedMap, PingGeometry
    cache = CachedMap()
    tables = cache.get(PingGeometry(100, 50, (0.0, 10.0), (-0.5, 0.5)))
"""

# Configuration
from .config import DrawConfig, OverlayConfig, PostprocessConfig

# Ping sources
from .interface import (
    AbstractSonarInterface,
    ArraySonarPing,
    AzimuthRangeIndices,
    PingGeometry,
)

# Colormaps
from .colormaps import (
    SonarColorMap,
    MatplotlibColorMap,
    InfernoColorMap,
    get_colormap,
)

# Rendering
from .rect_image import draw_rect_sonar_image
from .remap_cache import (
    OUT_OF_WEDGE,
    CachedMap,
    CacheState,
    FanLayout,
    RemapTables,
    build_remap_tables,
    fan_layout,
)
from .remap import remap_rect_sonar_image
from .overlay import draw_overlay
from .drawer import SonarDrawer

# Post-processing
from .postprocess import (
    SonarPostprocessor,
    db_normalize,
    log_normalize,
)

# Data loading
from .data_loading import PolarArchive, load_polar_npz, save_polar_npz, iter_pings

from .profiler import Profiler

__version__ = "0.1.0"

__all__ = [
    # Config
    'DrawConfig', 'OverlayConfig', 'PostprocessConfig',
    # Ping sources
    'AbstractSonarInterface', 'ArraySonarPing', 'AzimuthRangeIndices', 'PingGeometry',
    # Colormaps
    'SonarColorMap', 'MatplotlibColorMap', 'InfernoColorMap', 'get_colormap',
    # Rendering
    'draw_rect_sonar_image', 'OUT_OF_WEDGE', 'CachedMap', 'CacheState', 'FanLayout',
    'RemapTables', 'build_remap_tables', 'fan_layout', 'remap_rect_sonar_image',
    'draw_overlay', 'SonarDrawer',
    # Post-processing
    'SonarPostprocessor', 'db_normalize', 'log_normalize',
    # Data loading
    'PolarArchive', 'load_polar_npz', 'save_polar_npz', 'iter_pings',
    'Profiler',
]
