from .raster_repository import RasterRepository

__all__ = ["RasterRepository"]
