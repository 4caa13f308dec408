"""Colormaps: normalized intensity -> RGB.

All colormaps are callables accepting a scalar or an array of intensities in
[0, 1] and returning float RGB in [0, 1] with a trailing channel axis.
"""
import numpy as np
from matplotlib import colormaps as mpl_colormaps


class SonarColorMap:
    """Grayscale colormap, also the base class for lookup-table colormaps."""

    name = "gray"

    def __call__(self, values) -> np.ndarray:
        v = np.clip(np.asarray(values, dtype=np.float32), 0.0, 1.0)
        return np.repeat(v[..., np.newaxis], 3, axis=-1)

    def lookup_u8(self, values) -> np.ndarray:
        """Same as calling the colormap, scaled to uint8 RGB."""
        return np.rint(self(values) * 255.0).astype(np.uint8)

    def __repr__(self):
        return f"{type(self).__name__}()"


class MatplotlibColorMap(SonarColorMap):
    """Any registered matplotlib colormap, sampled into a lookup table."""

    LUT_SIZE = 256

    def __init__(self, name: str):
        self.name = name
        cmap = mpl_colormaps[name]
        self._lut = cmap(np.linspace(0.0, 1.0, self.LUT_SIZE))[:, :3].astype(np.float32)

    def __call__(self, values) -> np.ndarray:
        v = np.nan_to_num(np.asarray(values, dtype=np.float32), nan=0.0)
        idx = np.rint(np.clip(v, 0.0, 1.0) * (self.LUT_SIZE - 1)).astype(np.intp)
        return self._lut[idx]

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


class InfernoColorMap(MatplotlibColorMap):
    """Default perceptual colormap."""

    def __init__(self):
        super().__init__("inferno")

    def __repr__(self):
        return "InfernoColorMap()"


def get_colormap(name: str) -> SonarColorMap:
    """Resolve a colormap by name ('gray', 'inferno' or any matplotlib name)."""
    key = name.lower()
    if key in ("gray", "grey", "grayscale"):
        return SonarColorMap()
    if key == "inferno":
        return InfernoColorMap()
    try:
        return MatplotlibColorMap(name)
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unknown colormap: {name}") from exc
