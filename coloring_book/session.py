"""One editing session: a loaded artwork with its mask, paint layer, view and tools.

A session is only built after the source image decoded successfully, so a
failed load never leaves a half-initialized mask or surface behind. Loading
another artwork means building a new session.
"""
import numpy as np

from .defaults import DEFAULT_THRESHOLD, DEFAULT_DILATION_RADIUS, DEFAULT_PALETTE_SIZE, FIT_PADDING
from .errors import ImageLoadError, RestoreError
from .flood_fill import FillEngine
from .lineart_pipeline import load_image_source, process_line_art, encode_png, decode_image
from .lineart_utils import extract_palette, multiply_composite
from .log_utils import get_logger
from .surface import BoundaryMask, PaintSurface
from .tool_controller import ToolController
from .viewport import ViewportTransform

logger = get_logger('ColoringSession')


class ColoringSession:
    def __init__(self, source_rgba, line_art, on_content_changed=None, on_fill_result=None):
        self.source = source_rgba
        self.mask = BoundaryMask(line_art)
        self.surface = PaintSurface.like(self.mask)
        self.viewport = ViewportTransform()
        self.fill_engine = FillEngine(self.mask, self.surface, on_result=on_fill_result)
        self.controller = ToolController(
            self.surface, self.fill_engine, self.viewport,
            on_content_changed=on_content_changed,
        )

    @classmethod
    def load(cls, source, threshold=DEFAULT_THRESHOLD, dilation_radius=DEFAULT_DILATION_RADIUS,
             gaussian_blur=False, edge_detect=False, snapshot=None,
             on_content_changed=None, on_fill_result=None):
        """Decode ``source``, binarize it and return a fresh session.

        source: bytes, file path, http(s) URL or decoded array.
        snapshot: optional saved paint layer (PNG bytes or array) to restore;
                  a snapshot that does not fit leaves the surface blank.
        Raises ImageLoadError if the source cannot be decoded.
        """
        rgba = load_image_source(source)
        line_art = process_line_art(
            rgba, threshold=threshold, dilation_radius=dilation_radius,
            gaussian_blur=gaussian_blur, edge_detect=edge_detect,
        )
        session = cls(rgba, line_art, on_content_changed=on_content_changed, on_fill_result=on_fill_result)
        if snapshot is not None:
            session.restore_snapshot(snapshot)
        logger.info(f"Session ready: {session.width}x{session.height}")
        return session

    @property
    def width(self) -> int:
        return self.mask.width

    @property
    def height(self) -> int:
        return self.mask.height

    def fit_to_screen(self, container_w, container_h, padding=FIT_PADDING):
        return self.viewport.fit_to_screen(container_w, container_h, self.width, self.height, padding=padding)

    def outline_rgba(self) -> np.ndarray:
        return self.mask.outline_rgba()

    def export_composite(self) -> np.ndarray:
        """Painted layer multiplied with the line art, as opaque RGBA."""
        return multiply_composite(self.surface.export_bitmap(), self.mask.data)

    def export_composite_png(self) -> bytes:
        return encode_png(self.export_composite())

    def snapshot(self) -> np.ndarray:
        return self.surface.export_bitmap()

    def snapshot_png(self) -> bytes:
        return encode_png(self.surface.export_bitmap())

    def restore_snapshot(self, snapshot) -> bool:
        """Restore a saved paint layer; on mismatch fall back to a blank surface."""
        try:
            if isinstance(snapshot, (bytes, bytearray, memoryview)):
                try:
                    bitmap = decode_image(snapshot)
                except ImageLoadError as e:
                    raise RestoreError(str(e)) from e
            else:
                bitmap = np.asarray(snapshot)
            self.surface.restore_from_bitmap(bitmap)
        except RestoreError as e:
            logger.warning(f"Restore failed, starting blank: {e}")
            self.surface.clear()
            return False
        logger.info("Restored paint layer from snapshot")
        return True

    def palette(self, count=DEFAULT_PALETTE_SIZE):
        return extract_palette(self.source, count)
