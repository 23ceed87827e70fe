# services/key_classifier.py
"""
Per-pixel "background-likeness" score under one of three keying modes.

• Manual       distance to the picked key color; LOW  ⇒ background
• AutoGreen    green-difference g - max(r, b);   HIGH ⇒ background
• AutoMagenta  proximity to pure #FF00FF;        HIGH ⇒ background

Magenta uses distance rather than a channel difference: a dark subject and a
dark magenta backdrop are both low in brightness, so only proximity to the
exact key color keeps subject shadows from being treated as background.
"""
from typing import Callable, Dict
import numpy as np

from ..models.keying import KeyingMode, ModeKind

# Calibration constants. They map each score onto the same 0-100-ish scale as
# the threshold/smoothing controls; they are tuned, not derived.
MANUAL_DISTANCE_DIVISOR = 3.0     # 0-441 euclidean range → ~0-147
MAGENTA_DISTANCE_DIVISOR = 1.7
MAGENTA_KEY = (255, 0, 255)


def _euclidean(rgb: np.ndarray, key) -> np.ndarray:
    diff = rgb.astype(np.float64) - np.asarray(key, dtype=np.float64)
    return np.sqrt(np.sum(diff * diff, axis=-1))


class KeyClassifier:
    """
    Stateless. Works on any array whose last axis is RGB, so a single pixel
    (shape (3,)) and a whole buffer (shape (H, W, 3)) go through the same code.
    """

    @staticmethod
    def _manual(rgb: np.ndarray, mode: KeyingMode) -> np.ndarray:
        return _euclidean(rgb, mode.key_color.as_tuple()) / MANUAL_DISTANCE_DIVISOR

    @staticmethod
    def _auto_green(rgb: np.ndarray, mode: KeyingMode) -> np.ndarray:
        px = rgb.astype(np.int16)
        return px[..., 1] - np.maximum(px[..., 0], px[..., 2])

    @staticmethod
    def _auto_magenta(rgb: np.ndarray, mode: KeyingMode) -> np.ndarray:
        return 255.0 - _euclidean(rgb, MAGENTA_KEY) / MAGENTA_DISTANCE_DIVISOR

    _SCORERS: Dict[ModeKind, Callable[[np.ndarray, KeyingMode], np.ndarray]] = {
        ModeKind.MANUAL: _manual.__func__,
        ModeKind.AUTO_GREEN: _auto_green.__func__,
        ModeKind.AUTO_MAGENTA: _auto_magenta.__func__,
    }

    def scorer(self, mode: KeyingMode) -> Callable[[np.ndarray], np.ndarray]:
        """Resolve the mode once and hand back a specialised scoring function."""
        fn = self._SCORERS[mode.kind]
        return lambda rgb: fn(np.asarray(rgb), mode)

    def score(self, rgb, mode: KeyingMode) -> np.ndarray:
        return self.scorer(mode)(rgb)
