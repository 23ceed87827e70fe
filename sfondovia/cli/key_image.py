# cli/key_image.py
"""
Key a single image whose background is already a flat green or magenta.

    sfondovia-key isolated.png cutout.png --preset green --threshold 15 --smoothing 25
"""
import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from ..exceptions import DecodeError, InvalidParameter
from ..models.keying import KeyColor, KeyingParams, Preset, picked_key_threshold
from ..pipeline.keying_session import default_params
from ..repositories.raster_repository import RasterRepository
from ..services.geometry_service import GeometryService
from ..services.keying_service import KeyingService
from ..services.tone_service import ToneService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chroma-key a flat green/magenta background to transparency")

    parser.add_argument("input", help="Input image path")
    parser.add_argument("output", help="Output PNG path")

    parser.add_argument("-p", "--preset", choices=[p.value for p in Preset], default=Preset.GREEN.value,
                        help="Background color produced by the isolation step. Default green.")
    parser.add_argument("-t", "--threshold", type=int, default=None,
                        help="Decision boundary on the classifier score (1-100).")
    parser.add_argument("-s", "--smoothing", type=int, default=None,
                        help="Width of the soft edge ramp (0-50).")
    parser.add_argument("-c", "--key-color",
                        help="Exact background color in hex (e.g. #0AC80A). Overrides the preset.")
    parser.add_argument("--max-dimension", type=int, default=None,
                        help="Downscale so the longest side is at most this many pixels.")
    parser.add_argument("--invert-source", action="store_true",
                        help="Invert the input first (dark-background workflow on a raw isolation result).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def run(args: argparse.Namespace) -> int:
    repo = RasterRepository()
    geometry_service = GeometryService()
    keying_service = KeyingService()

    key_color = KeyColor.from_hex(args.key_color) if args.key_color else None
    defaults = default_params()
    threshold = args.threshold
    if threshold is None:
        threshold = picked_key_threshold() if key_color is not None else defaults.threshold
    params = KeyingParams(
        threshold=threshold,
        smoothing=defaults.smoothing if args.smoothing is None else args.smoothing,
        key_color=key_color,
        preset=Preset(args.preset),
    )

    raster = repo.load(args.input)
    logger.info(f"Loaded {args.input} ({raster.width}x{raster.height})")

    raster = geometry_service.normalize(raster, args.max_dimension)
    if args.invert_source:
        raster = ToneService().invert(raster)

    logger.info(f"Keying mode={params.mode.kind.value} threshold={params.threshold} smoothing={params.smoothing}")
    result = keying_service.apply(raster, params)

    saved = repo.save(result, args.output)
    logger.info(f"Saved {saved}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        return run(args)
    except (DecodeError, InvalidParameter) as err:
        logger.error(str(err))
        return 1


if __name__ == "__main__":
    sys.exit(main())
