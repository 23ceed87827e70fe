import os
import logging

import cv2
from dotenv import load_dotenv

from ..exceptions import InvalidParameter
from ..models.raster import Raster

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

_FILTERS = {
    "area": cv2.INTER_AREA,      # area averaging, best for downscale
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
}


class GeometryService:
    """
    Bounds a raster to a maximum dimension before keying.
    Never uses nearest-neighbour: aliasing on the subject edge would show up
    as a jagged alpha ramp.
    """

    def __init__(self, max_dimension: int = None, resample: str = None):
        self.max_dimension = int(os.getenv("MAX_IMAGE_DIMENSION", "1536")) if max_dimension is None else max_dimension
        if isinstance(self.max_dimension, bool) or not isinstance(self.max_dimension, int) or self.max_dimension < 1:
            raise InvalidParameter(f"max_dimension must be a positive integer, got {self.max_dimension!r}")
        resample = (resample or os.getenv("RESAMPLE_FILTER", "area")).lower()
        if resample not in _FILTERS:
            raise InvalidParameter(f"Unknown resample filter {resample!r}, expected one of {sorted(_FILTERS)}")
        self.interpolation = _FILTERS[resample]

    @staticmethod
    def target_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
        """
        Returns (width, height) with the larger side equal to *max_dimension*
        and the other rounded half-up, never below 1.
        """
        if width >= height:
            return max_dimension, max(1, int(height * max_dimension / width + 0.5))
        return max(1, int(width * max_dimension / height + 0.5)), max_dimension

    def normalize(self, raster: Raster, max_dimension: int = None) -> Raster:
        max_dimension = self.max_dimension if max_dimension is None else max_dimension
        if isinstance(max_dimension, bool) or not isinstance(max_dimension, int) or max_dimension < 1:
            raise InvalidParameter(f"max_dimension must be a positive integer, got {max_dimension!r}")

        if max(raster.width, raster.height) <= max_dimension:
            return raster

        new_w, new_h = self.target_size(raster.width, raster.height, max_dimension)
        resized = cv2.resize(raster.pixels, (new_w, new_h), interpolation=self.interpolation)
        logger.info(f"Normalized {raster.width}x{raster.height} → {new_w}x{new_h}")
        return Raster(pixels=resized, path=raster.path)
