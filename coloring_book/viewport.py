"""Zoom & pan state of the artwork inside its viewport.

The artwork keeps its own pixel size; what changes is how it is drawn:

    screen = content * zoom + pan

(no rotation, top-left origin). Zooming with the wheel keeps the content
point under the pointer where it was, the same way the editor canvases do it:
read the content coordinate under the cursor with the old zoom, apply the new
zoom, then solve the pan that puts that content coordinate back under the
cursor.

Usage example:

    vt = ViewportTransform()
    vt.fit_to_screen(800, 600, art_w, art_h)
    vt.zoom_at(event.x, event.y, +1)
    cx, cy = vt.screen_to_content(event.x, event.y)
"""
import math
from typing import Tuple

from .defaults import MIN_ZOOM, MAX_ZOOM, ZOOM_STEP, FIT_MAX_ZOOM, FIT_PADDING
from .log_utils import get_logger

logger = get_logger('ZoomDebug')


class ViewportTransform:
    def __init__(
        self,
        zoom: float = 1.0,
        pan_x: float = 0.0,
        pan_y: float = 0.0,
        min_zoom: float = MIN_ZOOM,
        max_zoom: float = MAX_ZOOM,
        zoom_step: float = ZOOM_STEP,
    ):
        if min_zoom <= 0 or max_zoom < min_zoom:
            raise ValueError(f"Invalid zoom range [{min_zoom}, {max_zoom}]")
        self.min_zoom = float(min_zoom)
        self.max_zoom = float(max_zoom)
        self.zoom_step = float(zoom_step)
        self._zoom = self.clamp_zoom(zoom)
        self._pan_x = float(pan_x)
        self._pan_y = float(pan_y)

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def pan(self) -> Tuple[float, float]:
        return (self._pan_x, self._pan_y)

    def clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, float(zoom)))

    def set_zoom(self, zoom: float):
        self._zoom = self.clamp_zoom(zoom)

    def set_pan(self, x: float, y: float):
        self._pan_x = float(x)
        self._pan_y = float(y)

    def pan_by(self, dx: float, dy: float):
        self._pan_x += float(dx)
        self._pan_y += float(dy)

    def reset(self):
        self._zoom = self.clamp_zoom(1.0)
        self._pan_x = 0.0
        self._pan_y = 0.0

    def screen_to_content(self, sx: float, sy: float) -> Tuple[float, float]:
        return ((sx - self._pan_x) / self._zoom, (sy - self._pan_y) / self._zoom)

    def content_to_screen(self, cx: float, cy: float) -> Tuple[float, float]:
        return (cx * self._zoom + self._pan_x, cy * self._zoom + self._pan_y)

    def fit_to_screen(self, container_w, container_h, content_w, content_h,
                      padding=FIT_PADDING, max_zoom=FIT_MAX_ZOOM) -> float:
        """Scale the content into the container (never above ``max_zoom``) and center it."""
        if content_w <= 0 or content_h <= 0:
            raise ValueError(f"Content size must be positive, got {content_w}x{content_h}")
        scale_x = (container_w - padding) / float(content_w)
        scale_y = (container_h - padding) / float(content_h)
        self._zoom = self.clamp_zoom(min(scale_x, scale_y, max_zoom))
        self._pan_x = (container_w - content_w * self._zoom) / 2.0
        self._pan_y = (container_h - content_h * self._zoom) / 2.0
        logger.debug(
            f"Fit {content_w}x{content_h} into {container_w}x{container_h}: "
            f"zoom={self._zoom:.4f} pan=({self._pan_x:.2f}, {self._pan_y:.2f})"
        )
        return self._zoom

    def zoom_at(self, sx: float, sy: float, direction: int) -> bool:
        """Step the zoom in (direction > 0) or out (< 0) keeping (sx, sy) anchored.

        Returns False when nothing changed (direction 0 or already at a limit).
        """
        if not direction:
            return False
        old_zoom = self._zoom
        step = self.zoom_step if direction > 0 else -self.zoom_step
        new_zoom = self.clamp_zoom(old_zoom + step)
        if new_zoom == old_zoom:
            return False
        anchor_x, anchor_y = self.screen_to_content(sx, sy)
        self._zoom = new_zoom
        self._pan_x = sx - anchor_x * new_zoom
        self._pan_y = sy - anchor_y * new_zoom
        logger.debug(
            f"Zoom: {old_zoom:.4f} -> {new_zoom:.4f} at ({sx}, {sy}) "
            f"anchor=({anchor_x:.2f}, {anchor_y:.2f}) pan=({self._pan_x:.2f}, {self._pan_y:.2f})"
        )
        return True

    def visible_region(self, view_w: int, view_h: int, content_w: int, content_h: int):
        """Part of the content that lands inside a view_w x view_h viewport.

        Returns ``((ix0, iy0, ix1, iy1), (sx0, sy0))``: the content pixel box
        (end-exclusive) and the screen position of its top-left corner, or
        None when nothing of the content is visible.
        """
        disp_w = content_w * self._zoom; disp_h = content_h * self._zoom
        x0, y0 = self._pan_x, self._pan_y
        vx0 = max(0.0, x0); vy0 = max(0.0, y0)
        vx1 = min(float(view_w), x0 + disp_w); vy1 = min(float(view_h), y0 + disp_h)
        if vx1 <= vx0 or vy1 <= vy0:
            return None
        ix0 = int(max(0, math.floor((vx0 - x0) / self._zoom)))
        iy0 = int(max(0, math.floor((vy0 - y0) / self._zoom)))
        ix1 = int(min(content_w, math.ceil((vx1 - x0) / self._zoom)))
        iy1 = int(min(content_h, math.ceil((vy1 - y0) / self._zoom)))
        if ix1 <= ix0 or iy1 <= iy0:
            return None
        return (ix0, iy0, ix1, iy1), self.content_to_screen(ix0, iy0)


__all__ = ['ViewportTransform']
