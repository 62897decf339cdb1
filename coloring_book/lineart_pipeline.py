import os

import cv2
import numpy as np
import requests

from .defaults import DEFAULT_THRESHOLD, DEFAULT_DILATION_RADIUS, HTTP_TIMEOUT_S
from .errors import ColoringError, ImageLoadError
from .lineart_utils import (
    luminance,
    to_grayscale,
    gaussian_blur_3x3,
    sobel_edges,
    threshold_binary,
    dilate_lines,
    flatten_on_white,
)
from .log_utils import get_logger

logger = get_logger('ColoringPipeline')


def as_rgba(img):
    """Normalize a decoded array to read-only RGBA uint8.

    - Gray, BGR and BGRA inputs (OpenCV channel order) are converted.
    - 16-bit/32-bit inputs are rescaled to 0..255 using min/max.
    """
    if img.dtype != np.uint8:
        imin = float(np.min(img))
        imax = float(np.max(img))
        if imax <= imin:
            img = np.zeros_like(img, dtype=np.uint8)
        else:
            img = cv2.normalize(img, None, alpha=0, beta=255, norm_type=cv2.NORM_MINMAX).astype(np.uint8)
    if img.ndim == 2:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.shape[2] == 3:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    elif img.shape[2] == 4:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    else:
        raise ImageLoadError(f"Unsupported channel count: {img.shape[2]}")
    rgba.setflags(write=False)
    return rgba


def decode_image(data):
    """Decode encoded image bytes (PNG, JPEG, ...) into read-only RGBA."""
    buf = np.frombuffer(bytes(data), dtype=np.uint8)
    if buf.size == 0:
        raise ImageLoadError("Empty image data")
    img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageLoadError("Failed to decode image data")
    return as_rgba(img)


def read_image(path):
    # Read the bytes ourselves: cv2.imread cannot open non-ASCII paths on Windows
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise ImageLoadError(f"Cannot read {path}: {e}") from e
    return decode_image(data)


def fetch_image(url, timeout=HTTP_TIMEOUT_S):
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise ImageLoadError(f"Failed to fetch {url}: {e}") from e
    return decode_image(r.content)


def load_image_source(source):
    """Decode a source image given as bytes, an http(s) URL, a path or an array.

    Arrays are taken as already decoded RGB/RGBA (or gray) in RGB order.
    Raises ImageLoadError when nothing usable comes out.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        rgba = decode_image(source)
    elif isinstance(source, str) and source.lower().startswith(('http://', 'https://')):
        rgba = fetch_image(source)
    elif isinstance(source, (str, os.PathLike)):
        rgba = read_image(source)
    elif isinstance(source, np.ndarray):
        # as_rgba expects OpenCV channel order
        arr = source
        if arr.ndim == 3 and arr.shape[2] == 3:
            arr = arr[..., [2, 1, 0]]
        elif arr.ndim == 3 and arr.shape[2] == 4:
            arr = arr[..., [2, 1, 0, 3]]
        elif arr.ndim != 2:
            raise ImageLoadError(f"Unsupported array shape: {arr.shape}")
        rgba = as_rgba(arr)
    else:
        raise ImageLoadError(f"Unsupported image source: {type(source).__name__}")
    if rgba.shape[0] == 0 or rgba.shape[1] == 0:
        raise ImageLoadError("Image has no pixels")
    logger.info(f"Decoded source image {rgba.shape[1]}x{rgba.shape[0]}")
    return rgba


def encode_png(rgba):
    """Encode an RGBA (or gray) array as PNG bytes."""
    arr = np.asarray(rgba, dtype=np.uint8)
    if arr.ndim == 3 and arr.shape[2] == 4:
        arr = cv2.cvtColor(arr, cv2.COLOR_RGBA2BGRA)
    elif arr.ndim == 3 and arr.shape[2] == 3:
        arr = cv2.cvtColor(arr, cv2.COLOR_RGB2BGR)
    ok, buf = cv2.imencode('.png', arr)
    if not ok:
        raise ColoringError("cv2.imencode returned False")
    return buf.tobytes()


def process_line_art(rgba, threshold=DEFAULT_THRESHOLD, dilation_radius=DEFAULT_DILATION_RADIUS,
                     gaussian_blur=False, edge_detect=False):
    """Return the two-tone line art (uint8, 0 = line, 255 = open) of an image.

    Steps run in a fixed order: grayscale, optional blur, optional Sobel edge
    detection, threshold, then disk dilation. The same buffer serves as the
    fill boundary and as the displayed outline.
    """
    if not 0 <= threshold <= 255:
        raise ValueError(f"threshold must be in 0..255, got {threshold}")
    if dilation_radius < 0:
        raise ValueError(f"dilation_radius must be >= 0, got {dilation_radius}")
    arr = np.asarray(rgba)
    if arr.ndim == 2:
        gray = arr.astype(np.uint8)
    elif gaussian_blur or edge_detect:
        gray = to_grayscale(flatten_on_white(arr))
    else:
        # Plain threshold compares the unrounded luminance
        gray = luminance(flatten_on_white(arr))
    if gaussian_blur:
        gray = gaussian_blur_3x3(gray)
    if edge_detect:
        gray = sobel_edges(gray)
    binary = threshold_binary(gray, threshold)
    if dilation_radius > 0:
        binary = dilate_lines(binary, dilation_radius)
    logger.info(
        f"Line art {binary.shape[1]}x{binary.shape[0]} threshold={threshold} radius={dilation_radius} "
        f"blur={gaussian_blur} edges={edge_detect} line_px={int(np.count_nonzero(binary == 0))}"
    )
    return binary
