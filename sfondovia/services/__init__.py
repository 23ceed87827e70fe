from .geometry_service import GeometryService
from .tone_service import ToneService
from .key_classifier import KeyClassifier
from .alpha_service import AlphaService
from .despill_service import DespillService
from .keying_service import KeyingService

__all__ = [
    "GeometryService",
    "ToneService",
    "KeyClassifier",
    "AlphaService",
    "DespillService",
    "KeyingService",
]
