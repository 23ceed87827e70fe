import numpy as np

from ..models.keying import KeyingMode, ModeKind


class AlphaService:
    """
    Maps a classifier score onto alpha with a three-region ramp
    (transparent / linear transition / opaque).

    The ramp rises with the score in manual mode (score is a distance) and
    falls with it in the auto modes (score is a likeness).
    """

    @staticmethod
    def _ramp(numerator: np.ndarray, smoothing: int) -> np.ndarray:
        # smoothing == 0 means the ramp region is empty; the denominator only
        # has to be non-zero for the values np.where throws away
        return np.floor(255.0 * numerator / max(smoothing, 1))

    def _rising(self, score: np.ndarray, boundary: float, smoothing: int) -> np.ndarray:
        return np.where(
            score < boundary,
            0.0,
            np.where(score < boundary + smoothing, self._ramp(score - boundary, smoothing), 255.0),
        )

    def _falling(self, score: np.ndarray, boundary: float, smoothing: int) -> np.ndarray:
        return np.where(
            score > boundary,
            0.0,
            np.where(score > boundary - smoothing, self._ramp(boundary - score, smoothing), 255.0),
        )

    def synthesize(self, score, mode: KeyingMode, threshold: int, smoothing: int) -> np.ndarray:
        """
        Args
        ----
        score     : classifier output, any shape
        threshold : decision boundary, already validated to [1, 100]
        smoothing : ramp width, already validated to [0, 50]

        Returns
        -------
        alpha : uint8 array, same shape as *score*, clamped to [0, 255]
        """
        score = np.asarray(score, dtype=np.float64)
        if mode.kind is ModeKind.MANUAL:
            alpha = self._rising(score, threshold, smoothing)
        elif mode.kind is ModeKind.AUTO_GREEN:
            alpha = self._falling(score, threshold, smoothing)
        else:
            alpha = self._falling(score, 255 - threshold, smoothing)
        return np.clip(alpha, 0, 255).astype(np.uint8)
