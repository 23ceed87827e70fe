"""Shared raster fixtures for the keying tests."""

import numpy as np
import pytest

from sfondovia.models.raster import Raster

GREEN = (0, 255, 0)
MAGENTA = (255, 0, 255)
SKIN = (200, 50, 40)


def solid(color, width: int = 4, height: int = 4, alpha: int = 255) -> Raster:
    """A raster filled with a single RGB color."""
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :, :3] = color
    pixels[:, :, 3] = alpha
    return Raster(pixels)


def with_subject(background, subject, width: int = 8, height: int = 6) -> Raster:
    """*background* everywhere except a centered block of *subject*."""
    raster = solid(background, width, height)
    raster.pixels[height // 3: 2 * height // 3, width // 4: 3 * width // 4, :3] = subject
    return raster


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def noisy_raster(rng: np.random.Generator) -> Raster:
    """Random RGBA content, odd sizes so banding never divides evenly."""
    return Raster(rng.integers(0, 256, size=(37, 23, 4), dtype=np.uint8))


@pytest.fixture
def green_screen() -> Raster:
    return with_subject(GREEN, SKIN)


@pytest.fixture
def magenta_screen() -> Raster:
    return with_subject(MAGENTA, (30, 40, 35))
