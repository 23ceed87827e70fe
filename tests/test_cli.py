"""Smoke tests for the sfondovia-key command."""

import numpy as np
import pytest

from sfondovia.cli.key_image import build_parser, main
from sfondovia.repositories.raster_repository import RasterRepository

from conftest import GREEN, SKIN, with_subject


@pytest.fixture
def green_png(tmp_path):
    path = tmp_path / "isolated.png"
    RasterRepository().save(with_subject(GREEN, SKIN), path)
    return path


def test_keys_green_screen_to_png(green_png, tmp_path) -> None:
    output = tmp_path / "cutout.png"
    assert main([str(green_png), str(output)]) == 0

    result = RasterRepository().load(output)
    background = np.all(result.rgb == GREEN, axis=-1)
    assert np.all(result.alpha[background] == 0)
    assert np.all(result.alpha[~background] == 255)


def test_key_color_option(green_png, tmp_path) -> None:
    output = tmp_path / "manual.png"
    assert main([str(green_png), str(output), "--key-color", "#00ff00", "-s", "0"]) == 0
    result = RasterRepository().load(output)
    assert result.alpha[0, 0] == 0


def test_invert_and_resize(green_png, tmp_path) -> None:
    output = tmp_path / "small.png"
    assert main([str(green_png), str(output), "--max-dimension", "4", "--invert-source", "-p", "magenta"]) == 0
    result = RasterRepository().load(output)
    assert (result.width, result.height) == (4, 3)
    # inverted green is magenta, so the background keys out
    assert result.alpha[0, 0] == 0


@pytest.mark.parametrize(
    "extra",
    [["--threshold", "0"], ["--smoothing", "80"], ["--key-color", "#zzz"], ["--max-dimension", "0"]],
)
def test_invalid_parameters_exit_with_error(green_png, tmp_path, extra) -> None:
    assert main([str(green_png), str(tmp_path / "out.png"), *extra]) == 1


def test_unreadable_input_exits_with_error(tmp_path) -> None:
    bogus = tmp_path / "bogus.png"
    bogus.write_bytes(b"not a png")
    assert main([str(bogus), str(tmp_path / "out.png")]) == 1
    assert main([str(tmp_path / "missing.png"), str(tmp_path / "out.png")]) == 1


def test_parser_rejects_unknown_preset() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["in.png", "out.png", "--preset", "blue"])


def test_key_color_uses_picked_threshold_from_environment(tmp_path, monkeypatch) -> None:
    # (0, 180, 0) scores 75 / 3 = 25 against the key: transparent at 30, opaque at 20
    source = tmp_path / "near.png"
    RasterRepository().save(with_subject((0, 180, 0), SKIN), source)
    monkeypatch.setenv("PICKED_KEY_THRESHOLD", "20")
    output = tmp_path / "out.png"
    assert main([str(source), str(output), "--key-color", "#00ff00", "-s", "0"]) == 0
    assert RasterRepository().load(output).alpha[0, 0] == 255
