"""Boundary-respecting flood fill over a PaintSurface.

The region grown from a seed is the 4-connected set of pixels that are not
line pixels and whose R, G and B each lie within ``tolerance`` of the seed
color. It is found by labeling the candidate pixels once (the label image is
the visited set, one entry per surface pixel) and then written to the
surface in a single assignment, so nobody ever sees a half-filled region.
"""
import math
from typing import Callable, Optional

import cv2
import numpy as np

from .defaults import DEFAULT_TOLERANCE, ERASE_COLOR
from .lineart_utils import parse_color
from .log_utils import get_logger
from .surface import BoundaryMask, PaintSurface

logger = get_logger('ColoringFill')


class FillEngine:
    def __init__(
        self,
        mask: BoundaryMask,
        surface: PaintSurface,
        on_result: Optional[Callable[[int, bool], None]] = None,
    ):
        """mask/surface: must have the same width and height.
        on_result: called with (filled_pixel_count, erase_mode) after every
                   fill that changed at least one pixel.
        """
        if mask.shape != surface.shape[:2]:
            raise ValueError(f"Mask {mask.shape} and surface {surface.shape[:2]} sizes differ")
        self.mask = mask
        self.surface = surface
        self.on_result = on_result

    def region_at(self, x: int, y: int, tolerance: int = DEFAULT_TOLERANCE) -> np.ndarray:
        """Boolean array of the pixels a fill seeded at (x, y) would cover."""
        x = int(x); y = int(y)
        if self.mask.is_boundary(x, y):
            return np.zeros(self.mask.shape, dtype=bool)
        rgb = self.surface.rgb.astype(np.int16)
        seed = rgb[y, x]
        close = np.all(np.abs(rgb - seed) <= int(tolerance), axis=2)
        candidates = close & ~self.mask.blocked
        _, labels = cv2.connectedComponents(candidates.astype(np.uint8), connectivity=4)
        return labels == labels[y, x]

    def fill(self, x, y, color=None, tolerance: int = DEFAULT_TOLERANCE, erase_mode: bool = False) -> int:
        """Flood fill from (x, y) and return the number of pixels recolored.

        Coordinates are rounded to the nearest pixel. Seeds outside the image
        or on a line are ignored, and so is a seed already painted with the
        target color. ``erase_mode`` paints opaque white instead of ``color``.
        """
        if tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {tolerance}")
        xi = int(math.floor(x + 0.5)); yi = int(math.floor(y + 0.5))
        if self.mask.is_boundary(xi, yi):
            return 0
        if erase_mode:
            target = ERASE_COLOR
        elif color is None:
            raise ValueError("color is required unless erase_mode is set")
        else:
            target = parse_color(color)
        seed = self.surface.read_pixel(xi, yi)
        if seed[:3] == tuple(target) and seed[3] == 255:
            return 0
        region = self.region_at(xi, yi, tolerance)
        count = self.surface.fill_region(region, target)
        logger.debug(f"Fill at ({xi},{yi}) color={target} tol={tolerance} erase={erase_mode} -> {count} px")
        if count and self.on_result is not None:
            self.on_result(count, erase_mode)
        return count
