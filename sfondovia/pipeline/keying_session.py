# pipeline/keying_session.py
"""
Interactive keying loop around one prepared source raster.

Every parameter change bumps a generation counter. A pass remembers the
generation it started from and its result is published only if no newer
change arrived meanwhile; superseded results are dropped, never merged.
"""
from __future__ import annotations

from typing import Callable, Optional
import os
import threading
import logging

from dotenv import load_dotenv

from ..exceptions import KeyingError
from ..models.keying import KeyingParams, Preset
from ..models.raster import Raster
from ..services.keying_service import KeyingService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def default_params() -> KeyingParams:
    """Initial slider positions, overridable through the environment."""
    return KeyingParams(
        threshold=int(os.getenv("DEFAULT_THRESHOLD", "15")),
        smoothing=int(os.getenv("DEFAULT_SMOOTHING", "25")),
    )


class KeyingSession:
    """Manages state for a single image being tuned by one user."""

    def __init__(
            self,
            source: Raster,
            params: KeyingParams = None,
            *,
            keying_service: KeyingService = None,
            debounce_seconds: float = None,
            on_result: Callable[[Raster], None] = None,
            on_error: Callable[[KeyingError], None] = None,
    ):
        self.source: Optional[Raster] = source
        self.params = params or default_params()
        self.keying_service = keying_service or KeyingService()
        self.debounce_seconds = (
            float(os.getenv("DEBOUNCE_SECONDS", "0.05")) if debounce_seconds is None else debounce_seconds
        )
        self.on_result = on_result
        self.on_error = on_error

        self.generation = 0
        self.current: Optional[Raster] = None  # latest accepted result
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    # ─── Parameter changes ─────────────────────────────────────────
    def _set_params(self, change: Callable[[KeyingParams], KeyingParams]) -> int:
        with self._lock:
            self.params = change(self.params)
            self.generation += 1
            return self.generation

    def update(self, **changes) -> int:
        """
        Apply slider/preset changes and return the new generation.
        Invalid values raise InvalidParameter and leave the session as it was.
        """
        return self._set_params(lambda params: params.with_changes(**changes))

    def pick_key_color(self, x: int, y: int) -> int:
        """Eyedropper on the source raster; switches to manual keying."""
        color = self.keying_service.pick_key_color(self._require_source(), x, y)
        logger.debug(f"Picked key color {color.to_hex()} at ({x}, {y})")
        return self._set_params(lambda params: params.with_key_color(color))

    def use_preset(self, preset: Preset) -> int:
        return self._set_params(lambda params: params.with_preset(preset))

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self.generation and self.source is not None

    # ─── Passes ────────────────────────────────────────────────────
    def _require_source(self) -> Raster:
        if self.source is None:
            raise KeyingError("No source raster loaded")
        return self.source

    def run(self, generation: int = None) -> Optional[Raster]:
        """
        Compute a pass for *generation* (default: the latest).
        Returns None when the pass was superseded before it finished.
        """
        with self._lock:
            if generation is None:
                generation = self.generation
            elif generation != self.generation:
                logger.debug(f"Skipping stale pass {generation} (current {self.generation})")
                return None
            source, params = self._require_source(), self.params

        result = self.keying_service.apply(source, params)

        with self._lock:
            if generation != self.generation or self.source is None:
                logger.debug(f"Discarding pass {generation}, superseded by {self.generation}")
                return None
            self.current = result
        return result

    def schedule(self, **changes) -> int:
        """
        Debounced update: rapid slider drags coalesce into a single pass run
        *debounce_seconds* after the last change.
        """
        if changes:
            self.update(**changes)
        with self._lock:
            # a concurrent schedule() may have bumped the generation since update()
            generation = self.generation
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._fire, args=(generation,))
            self._timer.daemon = True
            self._timer.start()
        return generation

    def _fire(self, generation: int) -> None:
        try:
            result = self.run(generation)
        except KeyingError as err:
            # the previous result stays on screen
            if self.on_error is None:
                raise
            self.on_error(err)
            return
        if result is not None and self.on_result is not None:
            self.on_result(result)

    # ─── Lifecycle ─────────────────────────────────────────────────
    def load(self, source: Raster) -> None:
        """Replace the source (new upload); in-flight passes are discarded."""
        with self._lock:
            self.source = source
            self.current = None
            self.generation += 1

    def reset(self) -> None:
        """Drop the source and every result."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self.source = None
            self.current = None
            self.generation += 1
