"""Tests for the interactive session: generations, stale passes, debounce."""

import threading

import numpy as np
import pytest

from sfondovia.exceptions import InvalidParameter, KeyingError
from sfondovia.models.keying import KeyColor, KeyingParams, ModeKind, Preset
from sfondovia.models.raster import Raster
from sfondovia.pipeline.keying_session import KeyingSession, default_params
from sfondovia.services.keying_service import KeyingService

from conftest import GREEN, SKIN


@pytest.fixture
def session(green_screen: Raster) -> KeyingSession:
    return KeyingSession(green_screen, KeyingParams(), debounce_seconds=0.02)


def test_default_params_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_THRESHOLD", "40")
    monkeypatch.setenv("DEFAULT_SMOOTHING", "5")
    params = default_params()
    assert (params.threshold, params.smoothing) == (40, 5)


def test_run_publishes_current_result(session: KeyingSession, green_screen: Raster) -> None:
    result = session.run()
    assert result is session.current
    expected = KeyingService().apply(green_screen, KeyingParams())
    np.testing.assert_array_equal(result.pixels, expected.pixels)


def test_update_bumps_generation(session: KeyingSession) -> None:
    first = session.update(threshold=20)
    second = session.update(smoothing=5)
    assert second == first + 1
    assert (session.params.threshold, session.params.smoothing) == (20, 5)


def test_invalid_update_leaves_session_untouched(session: KeyingSession) -> None:
    generation, params = session.generation, session.params
    with pytest.raises(InvalidParameter):
        session.update(threshold=500)
    assert session.generation == generation
    assert session.params == params


def test_stale_generation_is_skipped(session: KeyingSession) -> None:
    session.run()
    accepted = session.current
    stale = session.update(threshold=20)
    session.update(threshold=30)
    assert not session.is_current(stale)
    assert session.is_current(stale + 1)
    assert session.run(stale) is None
    assert session.current is accepted


def test_pass_superseded_while_running_is_discarded(green_screen: Raster) -> None:
    class InterruptedService(KeyingService):
        def apply(self, raster, params):
            result = super().apply(raster, params)
            session.update(threshold=99)  # a slider moved mid-pass
            return result

    session = KeyingSession(green_screen, KeyingParams(), keying_service=InterruptedService())
    assert session.run() is None
    assert session.current is None


def test_pick_key_color_switches_to_manual(session: KeyingSession) -> None:
    session.pick_key_color(0, 0)
    assert session.params.key_color == KeyColor(*GREEN)
    assert session.params.mode.kind is ModeKind.MANUAL
    assert session.params.threshold == 30

    result = session.run()
    assert result.alpha[0, 0] == 0


def test_use_preset_returns_to_auto(session: KeyingSession) -> None:
    session.pick_key_color(0, 0)
    session.use_preset(Preset.MAGENTA)
    assert session.params.key_color is None
    assert session.params.mode.kind is ModeKind.AUTO_MAGENTA


def test_schedule_coalesces_rapid_changes(green_screen: Raster) -> None:
    results = []
    done = threading.Event()

    def on_result(raster: Raster) -> None:
        results.append(raster)
        done.set()

    session = KeyingSession(green_screen, KeyingParams(), debounce_seconds=0.05, on_result=on_result)
    for threshold in (20, 25, 30):
        session.schedule(threshold=threshold)

    assert done.wait(timeout=5)
    session._timer.join(timeout=5)
    assert len(results) == 1
    assert results[0] is session.current
    expected = KeyingService().apply(green_screen, KeyingParams(threshold=30))
    np.testing.assert_array_equal(results[0].pixels, expected.pixels)


def test_scheduled_failure_keeps_previous_result(session: KeyingSession) -> None:
    errors = []
    done = threading.Event()
    session.on_error = lambda err: (errors.append(err), done.set())

    session.run()
    previous = session.current
    session.source = None  # the upload went away under a pending pass
    session.schedule(threshold=40)

    assert done.wait(timeout=5)
    assert isinstance(errors[0], KeyingError)
    assert session.current is previous


def test_reset_drops_everything(session: KeyingSession) -> None:
    session.run()
    session.schedule(threshold=40)
    session.reset()
    assert session.current is None
    assert session.source is None
    with pytest.raises(KeyingError):
        session.run()


def test_load_new_source_invalidates_results(session: KeyingSession) -> None:
    session.run()
    before = session.generation
    fresh = Raster(np.full((2, 2, 4), 255, dtype=np.uint8))
    session.load(fresh)
    assert session.generation == before + 1
    assert session.current is None
    assert session.run().pixels.shape == (2, 2, 4)


def test_results_are_independent_of_each_other(session: KeyingSession) -> None:
    first = session.run()
    session.update(threshold=100, smoothing=50)
    second = session.run()
    assert first is not second
    # skin stays opaque under both; background transparency differs only by params
    subject = np.all(session.source.rgb == SKIN, axis=-1)
    assert np.all(first.alpha[subject] == 255)
    assert np.all(second.alpha[subject] == 255)


def test_interleaved_schedule_publishes_latest_params(green_screen: Raster) -> None:
    results = []
    done = threading.Event()

    class RacingSession(KeyingSession):
        """A second slider event lands between update() and arming the timer."""
        interleaved = False

        def update(self, **changes) -> int:
            generation = super().update(**changes)
            if not self.interleaved:
                self.interleaved = True
                self.schedule(threshold=30)
            return generation

    def on_result(raster: Raster) -> None:
        results.append(raster)
        done.set()

    session = RacingSession(green_screen, KeyingParams(), debounce_seconds=0.02, on_result=on_result)
    generation = session.schedule(threshold=20)

    assert generation == session.generation
    assert done.wait(timeout=5)
    session._timer.join(timeout=5)
    assert len(results) == 1
    assert results[0] is session.current
    assert session.params.threshold == 30
    expected = KeyingService().apply(green_screen, KeyingParams(threshold=30))
    np.testing.assert_array_equal(results[0].pixels, expected.pixels)


def test_picked_threshold_from_environment(session: KeyingSession, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PICKED_KEY_THRESHOLD", "42")
    session.pick_key_color(0, 0)
    assert session.params.threshold == 42
