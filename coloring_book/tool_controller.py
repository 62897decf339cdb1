"""Tool mode state machine.

Input arrives as device-agnostic events in screen coordinates:

    start(x, y, button)   pointer/touch down
    move(x, y)            pointer/touch drag
    end(x, y)             pointer/touch up
    wheel(x, y, delta)    scroll; delta > 0 zooms in

``button`` is PRIMARY, SECONDARY or MIDDLE. The active mode decides what
happens:

- pan: drag moves the artwork (the middle button pans in every mode).
- brush / eraser: drag paints a stroke of the current width; the eraser
  paints opaque white. Only the primary button draws.
- fill: primary fills with the current color, secondary erase-fills.

When an interaction that changed pixels ends, ``on_content_changed`` receives
a snapshot of the paint surface.
"""
from typing import Callable, NamedTuple, Optional

import numpy as np

from .defaults import DEFAULT_BRUSH_WIDTH, DEFAULT_COLOR, DEFAULT_TOLERANCE, ERASE_COLOR
from .flood_fill import FillEngine
from .lineart_utils import parse_color
from .log_utils import get_logger
from .surface import PaintSurface
from .viewport import ViewportTransform

logger = get_logger('ColoringTools')

BRUSH = 'brush'
ERASER = 'eraser'
FILL = 'fill'
PAN = 'pan'
TOOL_MODES = (BRUSH, ERASER, FILL, PAN)

PRIMARY = 'primary'
SECONDARY = 'secondary'
MIDDLE = 'middle'
BUTTONS = (PRIMARY, SECONDARY, MIDDLE)


class InputEvent(NamedTuple):
    kind: str  # 'start', 'move', 'end' or 'wheel'
    x: float
    y: float
    button: str = PRIMARY
    delta: float = 0.0


class ToolController:
    def __init__(
        self,
        surface: PaintSurface,
        fill_engine: FillEngine,
        viewport: ViewportTransform,
        color=DEFAULT_COLOR,
        brush_width: float = DEFAULT_BRUSH_WIDTH,
        tolerance: int = DEFAULT_TOLERANCE,
        on_content_changed: Optional[Callable[[np.ndarray], None]] = None,
    ):
        self.surface = surface
        self.fill_engine = fill_engine
        self.viewport = viewport
        self.tolerance = int(tolerance)
        self.on_content_changed = on_content_changed
        self._mode = FILL
        self._color = parse_color(color)
        self._brush_width = DEFAULT_BRUSH_WIDTH
        self.set_brush_width(brush_width)

        # drag state
        self._panning = False
        self._pan_anchor = None
        self._drawing = False
        self._last_point = None
        self._changed = False

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def color(self):
        return self._color

    @property
    def brush_width(self) -> float:
        return self._brush_width

    @property
    def is_panning(self) -> bool:
        return self._panning

    @property
    def is_drawing(self) -> bool:
        return self._drawing

    def set_mode(self, mode: str):
        if mode not in TOOL_MODES:
            raise ValueError(f"Unknown tool mode {mode!r}, expected one of {TOOL_MODES}")
        self._cancel_drag()
        self._mode = mode

    def set_color(self, color):
        self._color = parse_color(color)

    def set_brush_width(self, width: float):
        width = float(width)
        if width < 1.0:
            raise ValueError(f"Brush width must be >= 1, got {width}")
        self._brush_width = width

    def _cancel_drag(self):
        self._panning = False
        self._pan_anchor = None
        self._drawing = False
        self._last_point = None

    def _stroke_color(self):
        return ERASE_COLOR if self._mode == ERASER else self._color

    def start(self, x: float, y: float, button: str = PRIMARY):
        if button not in BUTTONS:
            raise ValueError(f"Unknown button {button!r}")
        if self._mode == PAN or button == MIDDLE:
            pan_x, pan_y = self.viewport.pan
            self._pan_anchor = (x - pan_x, y - pan_y)
            self._panning = True
            return
        cx, cy = self.viewport.screen_to_content(x, y)
        if self._mode == FILL:
            erase = button == SECONDARY
            count = self.fill_engine.fill(cx, cy, self._color, tolerance=self.tolerance, erase_mode=erase)
            if count:
                self._changed = True
            return
        if button != PRIMARY:
            return
        self._drawing = True
        self._last_point = (cx, cy)
        if self.surface.draw_segment(cx, cy, cx, cy, self._stroke_color(), self._brush_width):
            self._changed = True

    def move(self, x: float, y: float):
        if self._panning:
            ax, ay = self._pan_anchor
            self.viewport.set_pan(x - ax, y - ay)
            return
        if not self._drawing:
            return
        cx, cy = self.viewport.screen_to_content(x, y)
        lx, ly = self._last_point
        if self.surface.draw_segment(lx, ly, cx, cy, self._stroke_color(), self._brush_width):
            self._changed = True
        self._last_point = (cx, cy)

    def end(self, x: float = None, y: float = None) -> bool:
        """Finish the current interaction; returns True if content changed."""
        self._cancel_drag()
        if not self._changed:
            return False
        self._changed = False
        if self.on_content_changed is not None:
            self.on_content_changed(self.surface.export_bitmap())
        return True

    def wheel(self, x: float, y: float, delta: float) -> bool:
        if delta > 0:
            return self.viewport.zoom_at(x, y, 1)
        if delta < 0:
            return self.viewport.zoom_at(x, y, -1)
        return False

    def handle(self, event: InputEvent):
        if event.kind == 'start':
            return self.start(event.x, event.y, event.button)
        if event.kind == 'move':
            return self.move(event.x, event.y)
        if event.kind == 'end':
            return self.end(event.x, event.y)
        if event.kind == 'wheel':
            return self.wheel(event.x, event.y, event.delta)
        raise ValueError(f"Unknown input event kind {event.kind!r}")
