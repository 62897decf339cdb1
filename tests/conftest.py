import os
import tempfile

# Keep test runs from writing into the repository's logs/ folder
os.environ.setdefault('COLORING_BOOK_LOG_DIR', tempfile.mkdtemp(prefix='coloring-logs-'))

import numpy as np
import pytest

from coloring_book import BoundaryMask, PaintSurface, FillEngine


def make_ring_art(size=100):
    """Two-tone bitmap with a 1 px black frame around an open interior."""
    art = np.full((size, size), 255, dtype=np.uint8)
    art[0, :] = 0; art[-1, :] = 0
    art[:, 0] = 0; art[:, -1] = 0
    return art


@pytest.fixture
def ring_art():
    return make_ring_art()


@pytest.fixture
def ring_rgb(ring_art):
    return np.repeat(ring_art[..., None], 3, axis=2)


@pytest.fixture
def ring_mask(ring_art):
    return BoundaryMask(ring_art)


@pytest.fixture
def ring_engine(ring_mask):
    surface = PaintSurface.like(ring_mask)
    return FillEngine(ring_mask, surface)
