"""
SfondoVia: interactive chroma-key background removal.

Takes an image whose background was flattened to pure green or magenta,
synthesizes alpha and removes edge spill. Re-run on every parameter change.
"""
from .exceptions import DecodeError, InvalidParameter, InvalidRaster, KeyingError
from .models import KeyColor, KeyingMode, KeyingParams, ModeKind, Preset, Raster
from .repositories import RasterRepository
from .services import (
    AlphaService,
    DespillService,
    GeometryService,
    KeyClassifier,
    KeyingService,
    ToneService,
)
from .pipeline import KeyingSession, isolate_subject, prepare_isolation_input, prepare_key_source

__version__ = "1.0.0"

__all__ = [
    "DecodeError",
    "InvalidParameter",
    "InvalidRaster",
    "KeyingError",
    "KeyColor",
    "KeyingMode",
    "KeyingParams",
    "ModeKind",
    "Preset",
    "Raster",
    "RasterRepository",
    "AlphaService",
    "DespillService",
    "GeometryService",
    "KeyClassifier",
    "KeyingService",
    "ToneService",
    "KeyingSession",
    "isolate_subject",
    "prepare_isolation_input",
    "prepare_key_source",
]
