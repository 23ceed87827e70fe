from __future__ import annotations
from dataclasses import dataclass, replace
import os
from enum import Enum
from typing import Optional

from ..exceptions import InvalidParameter

THRESHOLD_RANGE = (1, 100)
SMOOTHING_RANGE = (0, 50)
PICKED_KEY_THRESHOLD = 30  # threshold applied right after an eyedropper pick


def picked_key_threshold() -> int:
    """Threshold after an eyedropper pick, overridable through the environment."""
    return int(os.getenv("PICKED_KEY_THRESHOLD", str(PICKED_KEY_THRESHOLD)))


def _check_int(name: str, value, low: int, high: int) -> None:
    # bool is an int subclass; a slider never produces one
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise InvalidParameter(f"{name} must be in [{low}, {high}], got {value}")


@dataclass(frozen=True)
class KeyColor:
    """Background shade picked by the user, channels in [0, 255]."""
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            _check_int(f"key color channel {name}", getattr(self, name), 0, 255)

    @classmethod
    def from_hex(cls, value: str) -> "KeyColor":
        """Parse '#rrggbb' / 'rrggbb' / '#rgb'."""
        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(ch * 2 for ch in text)
        if len(text) != 6:
            raise InvalidParameter(f"Invalid hex color: {value!r}")
        try:
            r, g, b = (int(text[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError as err:
            raise InvalidParameter(f"Invalid hex color: {value!r}") from err
        return cls(r, g, b)

    def as_tuple(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


class Preset(str, Enum):
    """Flat background color the isolation step paints behind the subject."""
    GREEN = "green"
    MAGENTA = "magenta"


class ModeKind(str, Enum):
    MANUAL = "manual"
    AUTO_GREEN = "auto_green"
    AUTO_MAGENTA = "auto_magenta"


@dataclass(frozen=True)
class KeyingMode:
    """
    Tagged variant: Manual(KeyColor) | AutoGreen | AutoMagenta.
    Resolved once per pass so the per-pixel code never branches on optionals.
    """
    kind: ModeKind
    key_color: Optional[KeyColor] = None

    @classmethod
    def resolve(cls, key_color: Optional[KeyColor], preset: Preset) -> "KeyingMode":
        if key_color is not None:
            return cls(ModeKind.MANUAL, key_color)
        if Preset(preset) is Preset.GREEN:
            return cls(ModeKind.AUTO_GREEN)
        return cls(ModeKind.AUTO_MAGENTA)

    @property
    def is_auto(self) -> bool:
        return self.kind is not ModeKind.MANUAL


@dataclass(frozen=True)
class KeyingParams:
    """
    Value-object holding the interactive controls.

    threshold : decision boundary on the classifier score   [1, 100]
    smoothing : width of the anti-aliased ramp               [0, 50]
    key_color : explicit pick; when set it always wins over the preset
    """
    threshold: int = 15
    smoothing: int = 25
    key_color: Optional[KeyColor] = None
    preset: Preset = Preset.GREEN

    def __post_init__(self) -> None:
        _check_int("threshold", self.threshold, *THRESHOLD_RANGE)
        _check_int("smoothing", self.smoothing, *SMOOTHING_RANGE)
        if self.key_color is not None and not isinstance(self.key_color, KeyColor):
            raise InvalidParameter(f"key_color must be a KeyColor, got {self.key_color!r}")
        try:
            object.__setattr__(self, "preset", Preset(self.preset))
        except ValueError as err:
            raise InvalidParameter(f"Unknown preset: {self.preset!r}") from err

    @property
    def mode(self) -> KeyingMode:
        return KeyingMode.resolve(self.key_color, self.preset)

    # ── Transitions driven by the editor ─────────────────────────────
    def with_key_color(self, color: KeyColor, threshold: int = None) -> "KeyingParams":
        """Switch to manual keying; a fresh pick restarts from a wider threshold."""
        if threshold is None:
            threshold = picked_key_threshold()
        return replace(self, key_color=color, threshold=threshold)

    def with_preset(self, preset: Preset) -> "KeyingParams":
        """Back to automatic keying for *preset*."""
        return replace(self, key_color=None, preset=preset)

    def with_changes(self, **changes) -> "KeyingParams":
        return replace(self, **changes)
