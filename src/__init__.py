"""svginline: inline small SVG images referenced by HTML documents."""

from svginline.core.models import CacheEfficiency, InlineReport, PolicyThresholds
from svginline.pipeline.engine import InlineSvgEngine
from svginline.version import __version__

__all__ = [
    "CacheEfficiency",
    "InlineReport",
    "InlineSvgEngine",
    "PolicyThresholds",
    "__version__",
]
