"""coloring_book package: line art binarization, boundary fill and viewport math."""

from .errors import ColoringError, ImageLoadError, RestoreError
from .lineart_pipeline import load_image_source, process_line_art, decode_image, encode_png
from .lineart_utils import dilate_lines, extract_palette, multiply_composite, parse_color
from .surface import BoundaryMask, PaintSurface
from .flood_fill import FillEngine
from .viewport import ViewportTransform
from .tool_controller import ToolController, InputEvent, TOOL_MODES
from .session import ColoringSession

__all__ = [
    'ColoringError', 'ImageLoadError', 'RestoreError',
    'load_image_source', 'process_line_art', 'decode_image', 'encode_png',
    'dilate_lines', 'extract_palette', 'multiply_composite', 'parse_color',
    'BoundaryMask', 'PaintSurface', 'FillEngine', 'ViewportTransform',
    'ToolController', 'InputEvent', 'TOOL_MODES', 'ColoringSession',
]
