from concurrent.futures import ThreadPoolExecutor
import math
import os
import time
import logging

import numpy as np
from dotenv import load_dotenv

from ..exceptions import InvalidParameter
from ..models.keying import KeyColor, KeyingMode, KeyingParams
from ..models.raster import Raster
from .key_classifier import KeyClassifier
from .alpha_service import AlphaService
from .despill_service import DespillService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class KeyingService:
    """
    One classify → alpha → despill pass over a raster.

    *   Pure function of (raster, params): the source buffer is copied, never
        mutated, and nothing is cached between calls.
    *   The pass is row-independent, so it can be split into horizontal bands
        and run on a thread pool without changing a single output byte.
    """

    def __init__(self, workers: int = None):
        self.workers = int(os.getenv("KEYING_WORKERS", "1")) if workers is None else workers
        if self.workers < 1:
            raise InvalidParameter(f"workers must be >= 1, got {self.workers}")
        self.classifier = KeyClassifier()
        self.alpha_service = AlphaService()
        self.despill_service = DespillService()

    # ─── Public API ────────────────────────────────────────────────
    def apply(self, raster: Raster, params: KeyingParams) -> Raster:
        """
        Returns a *new* Raster with synthesized alpha and despilled color.
        Raises InvalidParameter before any pixel is touched.
        """
        if not isinstance(params, KeyingParams):
            raise InvalidParameter(f"Expected KeyingParams, got {type(params).__name__}")
        mode = params.mode
        out = raster.pixels.copy()

        start = time.perf_counter()
        bands = self._bands(raster.height)
        if len(bands) == 1:
            self._key_band(out, mode, params.threshold, params.smoothing)
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                futures = [
                    pool.submit(self._key_band, out[top:bottom], mode, params.threshold, params.smoothing)
                    for top, bottom in bands
                ]
                for future in futures:
                    future.result()

        logger.debug(
            f"Keyed {raster.width}x{raster.height} mode={mode.kind.value} "
            f"thr={params.threshold} smooth={params.smoothing} "
            f"bands={len(bands)} in {time.perf_counter() - start:.3f}s"
        )
        return Raster(pixels=out, path=raster.path)

    def pick_key_color(self, raster: Raster, x: int, y: int) -> KeyColor:
        """Eyedropper: the RGB of the pixel at (x, y) in raster coordinates."""
        # fractional positions address the pixel they fall inside
        x, y = math.floor(x), math.floor(y)
        if not (0 <= x < raster.width and 0 <= y < raster.height):
            raise InvalidParameter(f"({x}, {y}) is outside the {raster.width}x{raster.height} raster")
        r, g, b = (int(c) for c in raster.pixels[y, x, :3])
        return KeyColor(r, g, b)

    def pick_key_color_scaled(
            self,
            raster: Raster,
            x: float,
            y: float,
            display_width: float,
            display_height: float,
    ) -> KeyColor:
        """
        Eyedropper for a click on a scaled preview of *raster*.
        (x, y) are relative to the preview's top-left corner.
        """
        if display_width <= 0 or display_height <= 0:
            raise InvalidParameter(f"Invalid display size {display_width}x{display_height}")
        # a click on the far edge lands exactly on width/height
        natural_x = min(math.floor(x / display_width * raster.width), raster.width - 1)
        natural_y = min(math.floor(y / display_height * raster.height), raster.height - 1)
        return self.pick_key_color(raster, natural_x, natural_y)

    # ─── Internal helpers ──────────────────────────────────────────
    def _bands(self, height: int) -> list[tuple[int, int]]:
        n = min(self.workers, height)
        edges = np.linspace(0, height, n + 1).astype(int)
        return [(int(top), int(bottom)) for top, bottom in zip(edges[:-1], edges[1:])]

    def _key_band(self, pixels: np.ndarray, mode: KeyingMode, threshold: int, smoothing: int) -> None:
        """Keys a (h, W, 4) slice in place."""
        rgb = pixels[:, :, :3]
        score = self.classifier.score(rgb, mode)
        alpha = self.alpha_service.synthesize(score, mode, threshold, smoothing)
        self.despill_service.despill(rgb, alpha, mode)
        pixels[:, :, 3] = alpha
