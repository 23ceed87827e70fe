from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np

from ..exceptions import InvalidRaster


@dataclass
class Raster:
    """
    Simple data object: RGBA pixels (+ optional source path for bookkeeping).
    No decoding logic outside the repository.
    """
    pixels: np.ndarray # Shape (H, W, 4), dtype uint8, RGBA order.
    path: Path | None = None # Source of the raster.

    def __post_init__(self) -> None:
        if not isinstance(self.pixels, np.ndarray):
            raise InvalidRaster(f"pixels must be a numpy array, got {type(self.pixels).__name__}")
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise InvalidRaster(f"pixels must have shape (H, W, 4), got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise InvalidRaster(f"pixels must be uint8, got {self.pixels.dtype}")
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise InvalidRaster(f"raster is empty: {self.pixels.shape[1]}x{self.pixels.shape[0]}")

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]
