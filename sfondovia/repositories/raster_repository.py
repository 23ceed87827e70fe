from pathlib import Path
from typing import Union
from io import BytesIO
import base64
import binascii
import logging

import numpy as np
from PIL import Image as PILImage, UnidentifiedImageError

from ..exceptions import DecodeError
from ..models.raster import Raster

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = "data:"


class RasterRepository:
    """
    Handles decode/encode and file I/O for Raster entities.
    Everything that touches an encoded image format lives here.
    """

    @staticmethod
    def create_raster(pixels: np.ndarray, path: Union[str, Path] = None) -> Raster:
        if path is None:
            return Raster(pixels)
        return Raster(pixels=pixels, path=Path(path))

    @staticmethod
    def _to_rgba_array(pil_img: PILImage.Image) -> np.ndarray:
        if pil_img.mode != "RGBA":
            pil_img = pil_img.convert("RGBA")
        return np.array(pil_img, dtype=np.uint8)

    # ─── decode ───────────────────────────────────────────────────────
    def decode(self, data: bytes) -> Raster:
        """Rasterize an encoded image (PNG, JPEG, WebP, ...) into RGBA."""
        if not data:
            raise DecodeError("Empty image payload")
        try:
            with PILImage.open(BytesIO(data)) as pil_img:
                pil_img.load()
                pixels = self._to_rgba_array(pil_img)
        except (UnidentifiedImageError, OSError, SyntaxError, EOFError, ValueError,
                PILImage.DecompressionBombError) as err:
            raise DecodeError(f"Could not rasterize image: {err}") from err
        return self.create_raster(pixels)

    def decode_base64(self, text: str) -> Raster:
        """Accepts a bare base64 payload or a data URL."""
        if text.startswith(_DATA_URL_PREFIX):
            _, _, text = text.partition(",")
        try:
            data = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as err:
            raise DecodeError(f"Invalid base64 image payload: {err}") from err
        return self.decode(data)

    def load(self, path: Union[str, Path]) -> Raster:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as err:
            raise DecodeError(f"Image not found or unreadable: {path}") from err
        raster = self.decode(data)
        raster.path = path
        logger.debug(f"Loaded {path} ({raster.width}x{raster.height})")
        return raster

    # ─── encode ───────────────────────────────────────────────────────
    @staticmethod
    def encode_png(raster: Raster) -> bytes:
        buf = BytesIO()
        PILImage.fromarray(raster.pixels).save(buf, format="PNG")
        return buf.getvalue()

    def encode_base64(self, raster: Raster) -> str:
        return base64.b64encode(self.encode_png(raster)).decode("ascii")

    def save(self, raster: Raster, path: Union[str, Path] = None) -> Path:
        target = Path(path) if path is not None else raster.path
        if target is None:
            raise ValueError("Raster has no path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.encode_png(raster))
        logger.debug(f"Saved {target}")
        return target

    @staticmethod
    def mime_type(data: bytes) -> str:
        """Sniff the mime type of an encoded image."""
        try:
            with PILImage.open(BytesIO(data)) as pil_img:
                fmt = pil_img.format
        except (UnidentifiedImageError, OSError, ValueError) as err:
            raise DecodeError(f"Unrecognised image format: {err}") from err
        return PILImage.MIME.get(fmt, "application/octet-stream")

