import math

import pytest

from drowsewatch.geometry import (
    FacialRegions,
    compute_ear,
    compute_mar,
    extract_facial_regions,
)

OPEN_EYE = [(0, 0), (1, -1), (2, -1), (3, 0), (2, 1), (1, 1)]


def _mouth(opening, count=20):
    points = [(float(i), 0.0) for i in range(count)]
    points[0] = (0.0, 0.0)
    points[6] = (6.0, 0.0)
    points[2] = (2.0, -opening)
    points[10] = (2.0, opening)
    points[4] = (4.0, -opening)
    points[8] = (4.0, opening)
    return points


@pytest.mark.parametrize("count", [0, 5, 7])
def test_ear_requires_six_points(count):
    eye = [(float(i), float(i)) for i in range(count)]
    assert compute_ear(eye) == 0.0


@pytest.mark.parametrize("count", [0, 6, 10])
def test_mar_requires_eleven_points(count):
    mouth = [(float(i), 1.0) for i in range(count)]
    assert compute_mar(mouth) == 0.0


def test_ear_worked_example():
    assert compute_ear(OPEN_EYE) == pytest.approx(2.0 / 3.0)


def test_ear_of_flat_eye_is_zero():
    flat = [(0, 0), (1, 0), (2, 0), (3, 0), (2, 0), (1, 0)]
    assert compute_ear(flat) == 0.0


@pytest.mark.parametrize("scale", [0.5, 2.0, 10.0])
def test_ear_is_scale_invariant(scale):
    scaled = [(x * scale, y * scale) for x, y in OPEN_EYE]
    assert compute_ear(scaled) == pytest.approx(compute_ear(OPEN_EYE))


def test_ear_is_translation_invariant():
    moved = [(x + 120, y + 75) for x, y in OPEN_EYE]
    assert compute_ear(moved) == pytest.approx(compute_ear(OPEN_EYE))


def test_ear_is_mirror_invariant():
    mirrored = [(x, -y) for x, y in OPEN_EYE]
    assert compute_ear(mirrored) == pytest.approx(compute_ear(OPEN_EYE))


def test_ear_grows_with_opening():
    narrow = [(0, 0), (1, -0.2), (2, -0.2), (3, 0), (2, 0.2), (1, 0.2)]
    assert compute_ear(narrow) < compute_ear(OPEN_EYE)


def test_ear_zero_width_with_height_is_infinite():
    eye = [(0, 0), (0, -1), (0, -1), (0, 0), (0, 1), (0, 1)]
    assert compute_ear(eye) == math.inf


def test_ear_all_points_coincident_is_nan():
    eye = [(5, 5)] * 6
    assert compute_ear(eye) == pytest.approx(math.nan, nan_ok=True)


def test_mar_grows_with_opening():
    assert compute_mar(_mouth(0.5)) < compute_mar(_mouth(2.0))


def test_mar_ignores_unused_points():
    base = _mouth(1.5)
    changed = list(base)
    for index in (1, 3, 5, 7, 9, 11, 15, 19):
        changed[index] = (100.0, -50.0)
    assert compute_mar(changed) == pytest.approx(compute_mar(base))


def test_mar_same_for_eleven_and_twenty_points():
    full = _mouth(1.0)
    assert compute_mar(full[:11]) == pytest.approx(compute_mar(full))


def test_mar_matches_ear_style_ratio_under_scaling():
    scaled = [(x * 3, y * 3) for x, y in _mouth(1.0)]
    assert compute_mar(scaled) == pytest.approx(compute_mar(_mouth(1.0)))


def test_extract_regions_from_full_shape():
    landmarks = [(i, 2 * i) for i in range(68)]
    regions = extract_facial_regions(landmarks, 10, -3)
    assert regions.left_eye == tuple((i + 10, 2 * i - 3) for i in range(36, 42))
    assert regions.right_eye == tuple((i + 10, 2 * i - 3) for i in range(42, 48))
    assert regions.mouth == tuple((i + 10, 2 * i - 3) for i in range(48, 68))


def test_extract_regions_sizes():
    landmarks = [(0, 0)] * 68
    regions = extract_facial_regions(landmarks, 0, 0)
    assert (len(regions.left_eye), len(regions.right_eye), len(regions.mouth)) == (6, 6, 20)


def test_extract_regions_partial_shape():
    landmarks = [(i, i) for i in range(40)]
    regions = extract_facial_regions(landmarks, 1, 1)
    assert regions.left_eye == tuple((i + 1, i + 1) for i in range(36, 40))
    assert regions.right_eye == ()
    assert regions.mouth == ()


def test_extract_regions_without_feature_points():
    regions = extract_facial_regions([(i, i) for i in range(30)], 5, 5)
    assert regions == FacialRegions()


def test_extracted_regions_feed_ratios():
    landmarks = [(0.0, 0.0)] * 36 + OPEN_EYE + OPEN_EYE + _mouth(1.0)
    regions = extract_facial_regions(landmarks, 50, 50)
    assert compute_ear(regions.left_eye) == pytest.approx(compute_ear(OPEN_EYE))
    assert compute_mar(regions.mouth) == pytest.approx(compute_mar(_mouth(1.0)))