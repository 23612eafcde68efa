from .base import ChartCanvas, PageBackend, RenderBackend
from .raster import RasterPageBackend
from .svg import SvgPageBackend

__all__ = [
    "ChartCanvas",
    "PageBackend",
    "RasterPageBackend",
    "RenderBackend",
    "SvgPageBackend",
]
