import cv2
import numpy as np
from PIL import ImageColor
from skimage.morphology import disk

from .defaults import (
    EDGE_MAGNITUDE_THRESHOLD,
    PALETTE_QUANT,
    PALETTE_SAMPLE_STEP,
    DEFAULT_PALETTE_SIZE,
)

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)
GAUSS_3x3 = np.array([[1, 2, 1],
                      [2, 4, 2],
                      [1, 2, 1]], dtype=np.float64) / 16.0


def _to_u8(values):
    # Rounds half to even, then clamps
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def luminance(rgba):
    """Unrounded luminance 0.299R + 0.587G + 0.114B of an RGB(A) image."""
    rgb = np.asarray(rgba)[..., :3].astype(np.float64)
    return rgb @ LUMA_WEIGHTS


def to_grayscale(rgba):
    """Luminance of an RGB(A) image as uint8 (0.299R + 0.587G + 0.114B)."""
    return _to_u8(luminance(rgba))


def gaussian_blur_3x3(gray):
    """Normalized 3x3 blur; pixels without a full neighborhood are left as-is."""
    out = np.array(gray, dtype=np.uint8, copy=True)
    h, w = out.shape[:2]
    if h < 3 or w < 3:
        return out
    blurred = cv2.filter2D(out.astype(np.float64), -1, GAUSS_3x3, borderType=cv2.BORDER_REPLICATE)
    out[1:-1, 1:-1] = _to_u8(blurred[1:-1, 1:-1])
    return out


def sobel_edges(gray, magnitude_threshold=EDGE_MAGNITUDE_THRESHOLD):
    """Black (0) where the 3x3 Sobel gradient magnitude exceeds the threshold.

    Border pixels have no full neighborhood and are reported as white.
    """
    g = np.asarray(gray, dtype=np.float64)
    out = np.full(g.shape[:2], 255, dtype=np.uint8)
    h, w = out.shape
    if h < 3 or w < 3:
        return out
    gx = cv2.Sobel(g, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(g, cv2.CV_64F, 0, 1, ksize=3)
    magnitude = np.hypot(gx, gy)
    inner = out[1:-1, 1:-1]
    inner[magnitude[1:-1, 1:-1] > magnitude_threshold] = 0
    return out


def threshold_binary(values, threshold):
    """Pure two-tone result: 0 below the threshold, 255 otherwise."""
    return np.where(np.asarray(values) < threshold, 0, 255).astype(np.uint8)


def dilate_lines(binary, radius):
    """Grow black pixels by a disk of the given radius.

    A pixel is black in the result iff some pixel within Euclidean distance
    ``radius`` was black in ``binary``. Pixels outside the image never
    contribute.
    """
    binary = np.asarray(binary, dtype=np.uint8)
    radius = int(radius)
    if radius <= 0:
        return binary.copy()
    kernel = disk(radius).astype(np.uint8)
    black = (binary == 0).astype(np.uint8)
    grown = cv2.dilate(black, kernel, iterations=1, borderType=cv2.BORDER_CONSTANT, borderValue=0)
    return np.where(grown > 0, 0, 255).astype(np.uint8)


def flatten_on_white(rgba):
    """Composite an RGBA image over opaque white and return RGB uint8."""
    arr = np.asarray(rgba)
    if arr.shape[-1] < 4:
        return arr[..., :3].astype(np.uint8)
    alpha = arr[..., 3:4].astype(np.float64) / 255.0
    rgb = arr[..., :3].astype(np.float64) * alpha + 255.0 * (1.0 - alpha)
    return _to_u8(rgb)


def outline_to_rgba(binary):
    """Render a 0/255 line-art bitmap as an opaque RGBA image."""
    b = np.asarray(binary, dtype=np.uint8)
    out = np.empty(b.shape + (4,), dtype=np.uint8)
    out[..., 0] = b
    out[..., 1] = b
    out[..., 2] = b
    out[..., 3] = 255
    return out


def multiply_composite(surface_rgba, outline):
    """Multiply-blend the line art over the painted layer (white background).

    surface_rgba: HxWx4 uint8 paint layer.
    outline: HxW uint8 line art (0 = line, 255 = open).
    """
    surface = np.asarray(surface_rgba)
    lines = np.asarray(outline)
    if surface.shape[:2] != lines.shape[:2]:
        raise ValueError("surface and outline sizes differ: %s vs %s" % (surface.shape[:2], lines.shape[:2]))
    base = flatten_on_white(surface).astype(np.float64)
    blended = base * (lines[..., None].astype(np.float64) / 255.0)
    out = np.empty(surface.shape[:2] + (4,), dtype=np.uint8)
    out[..., :3] = _to_u8(blended)
    out[..., 3] = 255
    return out


def parse_color(color):
    """Return ``(r, g, b)`` for a color string (``#rrggbb``, names) or tuple."""
    if isinstance(color, str):
        try:
            rgb = ImageColor.getrgb(color)
        except ValueError as e:
            raise ValueError(f"Unknown color: {color!r}") from e
        return tuple(int(c) for c in rgb[:3])
    try:
        channels = tuple(int(c) for c in color)
    except TypeError as e:
        raise ValueError(f"Unknown color: {color!r}") from e
    if len(channels) not in (3, 4) or any(c < 0 or c > 255 for c in channels):
        raise ValueError(f"Color channels must be 3 or 4 values in 0..255, got {color!r}")
    return channels[:3]


def extract_palette(rgba, count=DEFAULT_PALETTE_SIZE, step=PALETTE_SAMPLE_STEP, quant=PALETTE_QUANT):
    """Most frequent quantized colors of an image as ``#rrggbb`` strings.

    Every ``step``-th pixel is sampled, mostly transparent pixels are skipped
    and each channel is snapped to a multiple of ``quant``. Ties keep the
    order of first appearance.
    """
    arr = np.asarray(rgba)
    if count <= 0 or arr.size == 0:
        return []
    pixels = arr.reshape(-1, arr.shape[-1])[::max(1, int(step))]
    if pixels.shape[1] >= 4:
        pixels = pixels[pixels[:, 3] >= 128]
    if len(pixels) == 0:
        return []
    q = np.floor(pixels[:, :3].astype(np.float64) / quant + 0.5) * quant
    q = np.minimum(q, 255).astype(np.int64)
    keys = (q[:, 0] << 16) | (q[:, 1] << 8) | q[:, 2]
    uniq, first, counts = np.unique(keys, return_index=True, return_counts=True)
    order = np.lexsort((first, -counts))
    return ['#%06x' % int(k) for k in uniq[order][:count]]
