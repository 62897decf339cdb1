import numpy as np
import pytest

from coloring_book import BoundaryMask, FillEngine, PaintSurface

RED = (255, 0, 0)


def _engine(art, on_result=None):
    mask = BoundaryMask(art)
    return FillEngine(mask, PaintSurface.like(mask), on_result=on_result)


def test_fill_colors_exactly_the_ring_interior(ring_engine, ring_art):
    count = ring_engine.fill(50, 50, '#ff0000')
    assert count == 98 * 98
    bmp = ring_engine.surface.export_bitmap()
    assert (bmp[1:-1, 1:-1, :3] == RED).all()
    # Ring pixels are never painted and the line art stays black
    assert (bmp[0, :, :3] == 255).all() and (bmp[:, -1, :3] == 255).all()
    assert (ring_engine.mask.data[0, :] == 0).all()


def test_fill_is_idempotent(ring_engine):
    ring_engine.fill(50, 50, RED)
    once = ring_engine.surface.export_bitmap()
    assert ring_engine.fill(50, 50, RED) == 0
    np.testing.assert_array_equal(ring_engine.surface.export_bitmap(), once)


def test_fill_stays_inside_enclosed_region():
    art = np.full((20, 20), 255, np.uint8)
    art[:, 10] = 0  # wall splits the page in two
    engine = _engine(art)
    engine.fill(3, 3, RED)
    bmp = engine.surface.export_bitmap()
    assert (bmp[:, :10, :3] == RED).all()
    assert (bmp[:, 10:, :3] == 255).all()


def test_diagonal_line_blocks_four_connected_fill():
    art = np.full((5, 5), 255, np.uint8)
    for i in range(5):
        art[i, 4 - i] = 0
    engine = _engine(art)
    engine.fill(0, 0, RED)
    region = np.all(engine.surface.export_bitmap()[..., :3] == RED, axis=2)
    yy, xx = np.mgrid[0:5, 0:5]
    np.testing.assert_array_equal(region, xx + yy < 4)


def test_zero_tolerance_does_not_cross_one_level_difference():
    art = np.full((4, 8), 255, np.uint8)
    engine = _engine(art)
    for y in range(4):
        for x in range(8):
            engine.surface.write_pixel(x, y, (100, 100, 100) if x < 4 else (101, 100, 100))
    engine.fill(1, 1, RED, tolerance=0)
    bmp = engine.surface.export_bitmap()
    assert (bmp[:, :4, :3] == RED).all()
    assert (bmp[:, 4:, 0] == 101).all()


def test_default_tolerance_absorbs_small_differences():
    art = np.full((4, 8), 255, np.uint8)
    engine = _engine(art)
    for x in range(4, 8):
        for y in range(4):
            engine.surface.write_pixel(x, y, (230, 240, 250))
    engine.fill(0, 0, RED)
    assert (engine.surface.export_bitmap()[..., :3] == RED).all()


def test_isolated_open_pixel_fills_to_one_pixel():
    art = np.zeros((3, 3), np.uint8)
    art[1, 1] = 255
    engine = _engine(art)
    assert engine.fill(1, 1, RED) == 1
    assert engine.surface.read_pixel(1, 1) == (255, 0, 0, 255)


def test_seed_on_boundary_or_outside_is_ignored(ring_engine):
    assert ring_engine.fill(0, 10, RED) == 0
    assert ring_engine.fill(-5, 10, RED) == 0
    assert ring_engine.fill(10, 500, RED) == 0
    assert (ring_engine.surface.export_bitmap() == 255).all()


def test_seed_coordinates_are_rounded(ring_engine):
    # 0.6 rounds to pixel 1, which is open
    assert ring_engine.fill(0.6, 0.6, RED) == 98 * 98


def test_erase_mode_paints_white(ring_engine):
    ring_engine.fill(50, 50, RED)
    assert ring_engine.fill(50, 50, None, erase_mode=True) == 98 * 98
    assert (ring_engine.surface.export_bitmap() == 255).all()


def test_result_callback_only_fires_for_real_fills(ring_art):
    calls = []
    engine = _engine(ring_art, on_result=lambda n, erase: calls.append((n, erase)))
    engine.fill(0, 0, RED)
    engine.fill(50, 50, '#ffffff')  # already white
    assert calls == []
    engine.fill(50, 50, RED)
    engine.fill(50, 50, None, erase_mode=True)
    assert calls == [(98 * 98, False), (98 * 98, True)]


def test_negative_tolerance_rejected(ring_engine):
    with pytest.raises(ValueError):
        ring_engine.fill(50, 50, RED, tolerance=-1)


def test_mask_and_surface_must_match(ring_mask):
    with pytest.raises(ValueError):
        FillEngine(ring_mask, PaintSurface(10, 10))
