import numpy as np
import pytest
from scipy.ndimage import uniform_filter1d

from physarum.blur import BoxBlur, box_blur_h, boxes_for_gaussian


def test_boxes_for_gaussian_reference_values():
    assert boxes_for_gaussian(1.5, 3) == [1, 1, 1]
    assert boxes_for_gaussian(1.8, 3) == [1, 1, 2]
    assert boxes_for_gaussian(2.5, 3) == [2, 2, 2]


def test_boxes_for_gaussian_two_passes():
    radii = boxes_for_gaussian(2.0, 2)
    assert len(radii) == 2
    assert radii == sorted(radii)
    assert all(r >= 0 for r in radii)


@pytest.mark.parametrize("sigma", [0.0, -1.0])
def test_boxes_for_gaussian_rejects_non_positive_sigma(sigma):
    with pytest.raises(ValueError):
        boxes_for_gaussian(sigma, 3)


def test_horizontal_pass_matches_periodic_reference():
    src = np.random.default_rng(0).random((8, 16))
    dst = np.zeros_like(src)
    box_blur_h(src, dst, 2)
    expected = uniform_filter1d(src, size=5, axis=1, mode="wrap")
    np.testing.assert_allclose(dst, expected, rtol=1e-12)


def test_vertical_pass_matches_periodic_reference():
    src = np.random.default_rng(1).random((16, 8))
    dst = np.zeros_like(src)
    BoxBlur(8, 16).box_blur_v(src, dst, 3)
    expected = uniform_filter1d(src, size=7, axis=0, mode="wrap")
    np.testing.assert_allclose(dst, expected, rtol=1e-12)


def test_vertical_pass_column_zero_matches_manual_wraparound():
    n, radius = 16, 2
    src = np.random.default_rng(2).random((n, 4))
    dst = np.zeros_like(src)
    BoxBlur(4, n).box_blur_v(src, dst, radius)

    column = src[:, 0]
    padded = np.concatenate([column[-radius:], column, column[:radius]])
    expected = [padded[k : k + 2 * radius + 1].mean() for k in range(n)]
    np.testing.assert_allclose(dst[:, 0], expected, rtol=1e-12)


@pytest.mark.parametrize("radius", [0, 1, 3])
def test_single_pass_preserves_total(radius):
    src = np.random.default_rng(3).random((32, 32)).astype(np.float32)
    scratch = np.zeros_like(src)
    field = src.copy()
    BoxBlur(32, 32).box_blur(field, scratch, radius)
    assert field.sum() == pytest.approx(src.sum(), rel=1e-5)


def test_radius_zero_is_identity():
    src = np.random.default_rng(4).random((8, 8))
    dst = np.zeros_like(src)
    box_blur_h(src, dst, 0)
    np.testing.assert_allclose(dst, src)


def test_radius_wider_than_grid_wraps_repeatedly():
    src = np.random.default_rng(5).random((4, 4))
    dst = np.zeros_like(src)
    box_blur_h(src, dst, 4)
    # window of 9 over a 4-periodic row: every column twice plus the centre column
    expected = (2 * src.sum(axis=1, keepdims=True) + src) / 9
    np.testing.assert_allclose(dst, expected, rtol=1e-12)


def test_run_applies_decay_once_and_lands_in_field():
    src = np.random.default_rng(6).random((16, 16)).astype(np.float32)
    field = src.copy()
    scratch = np.zeros_like(field)
    BoxBlur(16, 16).run(field, scratch, 1.8, decay=0.25)
    assert field.sum() == pytest.approx(0.25 * src.sum(), rel=1e-5)
    assert not np.allclose(field, 0.25 * src)


def test_run_with_executor_matches_inline():
    from concurrent.futures import ThreadPoolExecutor

    src = np.random.default_rng(7).random((256, 64)).astype(np.float32)
    inline, threaded = src.copy(), src.copy()
    BoxBlur(64, 256).run(inline, np.zeros_like(src), 2.5, decay=0.9)
    with ThreadPoolExecutor(max_workers=4) as executor:
        BoxBlur(64, 256).run(threaded, np.zeros_like(src), 2.5, decay=0.9, executor=executor)
    np.testing.assert_array_equal(inline, threaded)
