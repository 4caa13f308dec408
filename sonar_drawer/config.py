"""Configuration values for sonar drawing and post-processing.

Defaults live here and are passed explicitly at the call boundary
(SonarDrawer, SonarPostprocessor, the CLI). Adjust a copy with
``dataclasses.replace`` rather than editing module state.
"""
from dataclasses import dataclass, field

import cv2
import numpy as np

from .colormaps import InfernoColorMap, SonarColorMap


# ==============================================================================
# OVERLAY
# ==============================================================================

@dataclass(frozen=True)
class OverlayConfig:
    """Range rings, bearing lines and labels drawn over a fan image."""

    # 8-bit RGB; scaled to [0, 1] when drawing on float images
    line_color: tuple[int, int, int] = (255, 255, 255)
    text_color: tuple[int, int, int] = (255, 255, 255)

    line_thickness: int = 1
    font_scale: float = 0.4

    # Approximate number of range rings; the actual spacing is rounded
    # to 1, 2 or 5 x 10^k meters
    target_num_rings: int = 4

    # Spacing of interior bearing lines in degrees (wedge edges always drawn)
    bearing_spacing_deg: float = 20.0

    draw_labels: bool = True


# ==============================================================================
# DRAWING
# ==============================================================================

@dataclass(frozen=True)
class DrawConfig:
    """Defaults for SonarDrawer."""

    colormap: SonarColorMap = field(default_factory=InfernoColorMap)

    # np.uint8 or np.float32; any other value falls back to uint8
    output_dtype: type = np.uint8

    # Resampling used when building the fan image
    interpolation: int = cv2.INTER_LINEAR

    # Fill for pixels outside the sonar wedge
    background: float = 0.0

    add_overlay: bool = False
    overlay: OverlayConfig = field(default_factory=OverlayConfig)


# ==============================================================================
# POST-PROCESSING (log compression of 32-bit intensities)
# ==============================================================================

@dataclass(frozen=True)
class PostprocessConfig:
    """Tunables for SonarPostprocessor."""

    # Multiplies raw intensity before log compression
    gain: float = 1.0

    # Exponent applied after the threshold stretch; <= 0 disables it
    gamma: float = 0.0

    # Log-normalized value mapped to 0 (anything below is black)
    threshold: float = 0.74

    # Log-normalized value mapped to 1
    vmax: float = 1.0
