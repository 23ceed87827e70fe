# pipeline/prepare_source.py
from typing import Callable
import logging

from ..exceptions import DecodeError
from ..models.keying import Preset
from ..models.raster import Raster
from ..repositories.raster_repository import RasterRepository
from ..services.geometry_service import GeometryService
from ..services.tone_service import ToneService

logger = logging.getLogger(__name__)

# (encoded image, mime type) -> encoded image with a flat key-color background.
# The hosted model call behind it, its prompt and its credentials are owned by
# the caller; nothing here knows about them.
SubjectIsolator = Callable[[bytes, str], bytes]


def _uses_dark_workflow(preset: Preset) -> bool:
    return Preset(preset) is Preset.MAGENTA


def _prepare(raster: Raster, preset: Preset, geometry_service, tone_service) -> Raster:
    geometry_service = geometry_service or GeometryService()
    tone_service = tone_service or ToneService()

    prepared = geometry_service.normalize(raster)
    if _uses_dark_workflow(preset):
        prepared = tone_service.invert(prepared)
    return prepared


# ------------------------------------------------------------------
def prepare_isolation_input(
    raster: Raster,
    preset: Preset,
    *,
    geometry_service: GeometryService = None,
    tone_service: ToneService = None,
) -> Raster:
    """
    Runs once per upload, before the isolation step:
        • bound the size
        • magenta preset → invert, so a dark canvas reads as a light one
    """
    return _prepare(raster, preset, geometry_service, tone_service)


def prepare_key_source(
    raster: Raster,
    preset: Preset,
    *,
    geometry_service: GeometryService = None,
    tone_service: ToneService = None,
) -> Raster:
    """
    Runs once on the isolation result, before the interactive loop:
        • bound the size
        • magenta preset → invert back; the green the isolation step painted
          on the inverted canvas becomes magenta on the true dark canvas
    """
    return _prepare(raster, preset, geometry_service, tone_service)


def isolate_subject(
    source: bytes,
    mime_type: str,
    isolator: SubjectIsolator,
    preset: Preset = Preset.GREEN,
    *,
    raster_repository: RasterRepository = None,
    geometry_service: GeometryService = None,
    tone_service: ToneService = None,
) -> Raster:
    """
    decode → prepare → isolator → decode → prepare.
    Returns the raster the keying loop works on. Isolator failures propagate
    untouched; an empty reply is a DecodeError.
    """
    repo = raster_repository or RasterRepository()
    services = dict(geometry_service=geometry_service, tone_service=tone_service)

    source_raster = repo.decode(source)
    isolation_input = prepare_isolation_input(source_raster, preset, **services)

    # Untransformed input is forwarded as-is to keep the original encoding.
    if isolation_input is source_raster:
        payload, payload_mime = source, mime_type
    else:
        payload, payload_mime = repo.encode_png(isolation_input), "image/png"

    logger.info(f"Requesting subject isolation ({payload_mime}, preset={Preset(preset).value})")
    isolated = isolator(payload, payload_mime)
    if not isolated:
        raise DecodeError("Isolation step returned no image data")

    return prepare_key_source(repo.decode(isolated), preset, **services)
