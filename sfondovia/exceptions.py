# sfondovia/exceptions.py
"""
Typed failures surfaced by the keying engine.

Only buffer acquisition and parameter validation can fail; the per-pixel
math never raises.
"""


class KeyingError(Exception):
    """Base class for every error raised by sfondovia."""


class DecodeError(KeyingError):
    """The input could not be rasterized."""


class InvalidParameter(KeyingError, ValueError):
    """A threshold, smoothing, key color or coordinate is out of range."""


class InvalidRaster(InvalidParameter):
    """The pixel buffer does not have shape (H, W, 4) uint8."""
