import numpy as np
import pytest

from coloring_book import process_line_art
from coloring_book.lineart_utils import (
    luminance,
    to_grayscale,
    gaussian_blur_3x3,
    sobel_edges,
    threshold_binary,
    dilate_lines,
    extract_palette,
    multiply_composite,
    parse_color,
)


def _solid(h, w, rgb):
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[..., :3] = rgb
    img[..., 3] = 255
    return img


def brute_force_dilate(binary, r):
    h, w = binary.shape
    out = np.full_like(binary, 255)
    ys, xs = np.nonzero(binary == 0)
    for y in range(h):
        for x in range(w):
            if np.any((xs - x) ** 2 + (ys - y) ** 2 <= r * r):
                out[y, x] = 0
    return out


def test_grayscale_uses_luminance_weights():
    img = _solid(1, 1, (100, 150, 200))
    # 0.299*100 + 0.587*150 + 0.114*200 = 140.75
    assert to_grayscale(img)[0, 0] == 141


def test_single_dark_pixel_is_the_only_line():
    img = _solid(5, 5, (220, 220, 220))
    img[2, 2, :3] = 150
    art = process_line_art(img, threshold=200, dilation_radius=0)
    expected = np.full((5, 5), 255, np.uint8)
    expected[2, 2] = 0
    np.testing.assert_array_equal(art, expected)


def test_luminance_just_below_threshold_is_a_line():
    # 0.299*201 + 0.587*199 + 0.114*199 = 199.598
    img = _solid(1, 1, (201, 199, 199))
    assert luminance(img)[0, 0] == pytest.approx(199.598)
    art = process_line_art(img, threshold=200, dilation_radius=0)
    assert art[0, 0] == 0


def test_radius_one_grows_dark_pixel_to_its_four_neighbors():
    img = _solid(5, 5, (220, 220, 220))
    img[2, 2, :3] = 150
    art = process_line_art(img, threshold=200, dilation_radius=1)
    black = np.argwhere(art == 0)
    assert sorted(map(tuple, black)) == [(1, 2), (2, 1), (2, 2), (2, 3), (3, 2)]


def test_radius_two_covers_the_full_3x3_neighborhood():
    img = _solid(5, 5, (220, 220, 220))
    img[2, 2, :3] = 150
    art = process_line_art(img, threshold=200, dilation_radius=2)
    assert (art[1:4, 1:4] == 0).all()
    assert art[0, 0] == 255


def test_dilation_is_clipped_at_image_edges():
    binary = np.full((4, 4), 255, np.uint8)
    binary[0, 0] = 0
    out = dilate_lines(binary, 1)
    assert sorted(map(tuple, np.argwhere(out == 0))) == [(0, 0), (0, 1), (1, 0)]


def test_dilation_matches_distance_definition():
    rng = np.random.default_rng(7)
    binary = np.where(rng.random((30, 30)) < 0.05, 0, 255).astype(np.uint8)
    for r in (1, 2, 3):
        np.testing.assert_array_equal(dilate_lines(binary, r), brute_force_dilate(binary, r))


def test_dilation_radius_zero_is_identity():
    binary = np.full((3, 3), 255, np.uint8)
    binary[1, 1] = 0
    out = dilate_lines(binary, 0)
    np.testing.assert_array_equal(out, binary)
    assert out is not binary


def test_blur_leaves_border_pixels_alone():
    gray = np.zeros((5, 5), np.uint8)
    gray[2, 2] = 160
    gray[0, 0] = 90
    out = gaussian_blur_3x3(gray)
    assert out[2, 2] == 40  # 160 * 4/16
    assert out[1, 1] == 16  # (90 + 160) / 16
    assert out[0, 0] == 90
    assert out[0, 1] == 0


def test_sobel_marks_step_edge_and_keeps_border_white():
    gray = np.zeros((5, 5), np.uint8)
    gray[:, 2:] = 255
    edges = sobel_edges(gray)
    assert (edges[1:4, 1] == 0).all()
    assert (edges[1:4, 2] == 0).all()
    assert (edges[1:4, 3] == 255).all()
    assert (edges[0, :] == 255).all() and (edges[:, 0] == 255).all()
    assert (edges[-1, :] == 255).all() and (edges[:, -1] == 255).all()


def test_edge_detection_on_flat_image_finds_nothing():
    art = process_line_art(_solid(6, 6, (10, 10, 10)), threshold=200, dilation_radius=0, edge_detect=True)
    assert (art == 255).all()


def test_threshold_value_itself_is_white():
    out = threshold_binary(np.array([[199, 200, 201]], np.uint8), 200)
    assert out.tolist() == [[0, 255, 255]]


def test_output_is_strictly_two_tone():
    rng = np.random.default_rng(3)
    img = rng.integers(0, 256, size=(20, 20, 4), dtype=np.uint8)
    img[..., 3] = 255
    art = process_line_art(img, gaussian_blur=True, dilation_radius=1)
    assert set(np.unique(art).tolist()) <= {0, 255}


def test_transparent_pixels_count_as_paper():
    img = np.zeros((2, 2, 4), np.uint8)
    art = process_line_art(img, dilation_radius=0)
    assert (art == 255).all()


@pytest.mark.parametrize('kwargs', [{'threshold': 300}, {'threshold': -1}, {'dilation_radius': -1}])
def test_invalid_options_are_rejected(kwargs):
    with pytest.raises(ValueError):
        process_line_art(_solid(2, 2, (0, 0, 0)), **kwargs)


def test_palette_orders_by_frequency_and_skips_transparent():
    img = np.zeros((1, 100, 4), np.uint8)
    img[0, :60] = (250, 10, 10, 255)
    img[0, 60:90] = (0, 0, 255, 255)
    img[0, 90:] = (0, 255, 0, 0)
    assert extract_palette(img) == ['#ff0000', '#0000ff']
    assert extract_palette(img, count=1) == ['#ff0000']


def test_multiply_composite_darkens_only_line_pixels():
    surface = np.zeros((2, 2, 4), np.uint8)
    surface[...] = (200, 50, 0, 255)
    outline = np.array([[0, 255], [255, 255]], np.uint8)
    out = multiply_composite(surface, outline)
    assert tuple(out[0, 0]) == (0, 0, 0, 255)
    assert tuple(out[1, 1]) == (200, 50, 0, 255)


def test_parse_color_forms():
    assert parse_color('#ff8000') == (255, 128, 0)
    assert parse_color('red') == (255, 0, 0)
    assert parse_color((1, 2, 3, 4)) == (1, 2, 3)
    with pytest.raises(ValueError):
        parse_color('not-a-color')
    with pytest.raises(ValueError):
        parse_color((256, 0, 0))
