import numpy as np

from ..models.raster import Raster


class ToneService:
    """Per-channel color inversion. Alpha is left alone."""

    @staticmethod
    def invert_pixels(pixels: np.ndarray) -> np.ndarray:
        out = pixels.copy()
        np.subtract(255, pixels[:, :, :3], out=out[:, :, :3])
        return out

    def invert(self, raster: Raster) -> Raster:
        """
        Involutive: invert(invert(x)) == x exactly, since 255 - c stays in
        uint8 range for every c.
        """
        return Raster(pixels=self.invert_pixels(raster.pixels), path=raster.path)
