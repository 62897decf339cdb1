"""Pixel buffers of an editing session.

BoundaryMask wraps the two-tone line art and answers "may color go here?".
PaintSurface is the opaque RGBA layer underneath the line art that strokes
and fills write into. Both use (x, y) with pixel centers on integer
coordinates; every access is bounds-checked.
"""
import math

import numpy as np

from .errors import RestoreError
from .lineart_utils import outline_to_rgba, parse_color

WHITE = (255, 255, 255)


class BoundaryMask:
    def __init__(self, binary):
        arr = np.array(binary, dtype=np.uint8, copy=True)
        if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError(f"Boundary bitmap must be a non-empty 2-D array, got shape {arr.shape}")
        if not np.isin(arr, (0, 255)).all():
            raise ValueError("Boundary bitmap must only contain 0 (line) and 255 (open)")
        arr.setflags(write=False)
        self._data = arr
        self._blocked = arr == 0
        self._blocked.setflags(write=False)

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def blocked(self) -> np.ndarray:
        """Read-only boolean array, True on line pixels."""
        return self._blocked

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def shape(self):
        return self._data.shape

    def in_bounds(self, x, y) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_boundary(self, x, y) -> bool:
        xi = int(math.floor(x)); yi = int(math.floor(y))
        if not self.in_bounds(xi, yi):
            return True
        return bool(self._blocked[yi, xi])

    def outline_rgba(self) -> np.ndarray:
        return outline_to_rgba(self._data)


class PaintSurface:
    def __init__(self, width: int, height: int):
        width = int(width); height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self._pixels = np.full((height, width, 4), 255, dtype=np.uint8)

    @classmethod
    def like(cls, mask: BoundaryMask):
        return cls(mask.width, mask.height)

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def shape(self):
        return self._pixels.shape

    @property
    def rgb(self) -> np.ndarray:
        """Read-only view of the color channels."""
        view = self._pixels[..., :3]
        view.setflags(write=False)
        return view

    def in_bounds(self, x, y) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def read_pixel(self, x, y):
        x = int(x); y = int(y)
        if not self.in_bounds(x, y):
            return None
        return tuple(int(c) for c in self._pixels[y, x])

    def write_pixel(self, x, y, color) -> bool:
        x = int(x); y = int(y)
        if not self.in_bounds(x, y):
            return False
        r, g, b = parse_color(color)
        self._pixels[y, x] = (r, g, b, 255)
        return True

    def fill_region(self, region, color) -> int:
        """Paint every True pixel of ``region`` in one assignment."""
        region = np.asarray(region, dtype=bool)
        if region.shape != self._pixels.shape[:2]:
            raise ValueError(f"Region shape {region.shape} does not match surface {self._pixels.shape[:2]}")
        r, g, b = parse_color(color)
        self._pixels[region] = (r, g, b, 255)
        return int(np.count_nonzero(region))

    def draw_segment(self, x0, y0, x1, y1, color, width) -> int:
        """Rasterize a round-capped segment of the given diameter.

        Returns the number of in-bounds pixels covered.
        """
        r = max(0.5, float(width) / 2.0)
        h, w = self._pixels.shape[:2]
        x_min = int(max(0, math.floor(min(x0, x1) - r))); x_max = int(min(w - 1, math.ceil(max(x0, x1) + r)))
        y_min = int(max(0, math.floor(min(y0, y1) - r))); y_max = int(min(h - 1, math.ceil(max(y0, y1) + r)))
        if x_min > x_max or y_min > y_max:
            return 0
        yy, xx = np.ogrid[y_min:y_max + 1, x_min:x_max + 1]
        dx = float(x1 - x0); dy = float(y1 - y0)
        seg_len2 = dx * dx + dy * dy
        if seg_len2 <= 0:
            t = 0.0
        else:
            t = np.clip(((xx - x0) * dx + (yy - y0) * dy) / seg_len2, 0.0, 1.0)
        px = x0 + t * dx; py = y0 + t * dy
        hit = (xx - px) ** 2 + (yy - py) ** 2 <= r * r
        if not hit.any():
            return 0
        cr, cg, cb = parse_color(color)
        sub = self._pixels[y_min:y_max + 1, x_min:x_max + 1]
        sub[hit] = (cr, cg, cb, 255)
        return int(np.count_nonzero(hit))

    def export_bitmap(self) -> np.ndarray:
        return self._pixels.copy()

    def restore_from_bitmap(self, bitmap):
        arr = np.asarray(bitmap)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise RestoreError(f"Snapshot must be an RGB or RGBA image, got shape {arr.shape}")
        if arr.shape[:2] != self._pixels.shape[:2]:
            raise RestoreError(
                f"Snapshot is {arr.shape[1]}x{arr.shape[0]}, artwork is {self.width}x{self.height}"
            )
        if arr.dtype != np.uint8:
            raise RestoreError(f"Snapshot must be uint8, got {arr.dtype}")
        self._pixels[..., :3] = arr[..., :3]
        self._pixels[..., 3] = 255

    def clear(self):
        self._pixels[...] = 255
