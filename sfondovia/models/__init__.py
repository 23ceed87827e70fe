from .raster import Raster
from .keying import KeyColor, KeyingMode, KeyingParams, ModeKind, Preset

__all__ = ["Raster", "KeyColor", "KeyingMode", "KeyingParams", "ModeKind", "Preset"]
