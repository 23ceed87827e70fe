import numpy as np

from ..models.keying import KeyingMode, ModeKind


class DespillService:
    """
    Neutralises key-color fringing on pixels that survived keying.

    • AutoGreen   : cap green at max(r, b)
    • AutoMagenta : where r > g and b > g, pull r and b down to g
    • Manual      : untouched, a picked key color has no preset to spill

    Only pixels with alpha > 0 are touched; alpha itself is never written.
    """

    @staticmethod
    def _green(rgb: np.ndarray, keep: np.ndarray) -> None:
        cap = np.maximum(rgb[..., 0], rgb[..., 2])
        spill = keep & (rgb[..., 1] > cap)
        rgb[..., 1][spill] = cap[spill]

    @staticmethod
    def _magenta(rgb: np.ndarray, keep: np.ndarray) -> None:
        g = rgb[..., 1]
        spill = keep & (rgb[..., 0] > g) & (rgb[..., 2] > g)
        rgb[..., 0][spill] = g[spill]
        rgb[..., 2][spill] = g[spill]

    def despill(self, rgb: np.ndarray, alpha: np.ndarray, mode: KeyingMode) -> np.ndarray:
        """Mutates *rgb* (uint8, (..., 3)) in place and returns it."""
        if not mode.is_auto:
            return rgb
        keep = alpha > 0
        if mode.kind is ModeKind.AUTO_GREEN:
            self._green(rgb, keep)
        else:
            self._magenta(rgb, keep)
        return rgb
