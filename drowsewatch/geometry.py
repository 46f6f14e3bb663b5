"""Eye and mouth aspect ratios computed from 68-point facial landmarks."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence, Tuple

Point = Tuple[float, float]

LEFT_EYE = range(36, 42)
RIGHT_EYE = range(42, 48)
MOUTH = range(48, 68)

EYE_POINT_COUNT = 6
MOUTH_MIN_POINT_COUNT = 11


@dataclass(frozen=True)
class FacialRegions:
    """Landmark points of both eyes and the mouth, in image coordinates."""

    left_eye: Tuple[Point, ...] = field(default_factory=tuple)
    right_eye: Tuple[Point, ...] = field(default_factory=tuple)
    mouth: Tuple[Point, ...] = field(default_factory=tuple)


def _aspect_ratio(first: float, second: float, width: float) -> float:
    """(first + second) / (2 * width), following IEEE rules for a zero width."""
    height = first + second
    if width == 0:
        return math.inf if height > 0 else math.nan
    return height / (2.0 * width)


def compute_ear(eye: Sequence[Sequence[float]]) -> float:
    """Eye aspect ratio of six eye landmarks; 0.0 unless exactly six are given."""
    if len(eye) != EYE_POINT_COUNT:
        return 0.0
    vertical_a = math.dist(eye[1], eye[5])
    vertical_b = math.dist(eye[2], eye[4])
    horizontal = math.dist(eye[0], eye[3])
    return _aspect_ratio(vertical_a, vertical_b, horizontal)


def compute_mar(mouth: Sequence[Sequence[float]]) -> float:
    """Mouth aspect ratio of the mouth landmarks; 0.0 when fewer than eleven are given."""
    if len(mouth) < MOUTH_MIN_POINT_COUNT:
        return 0.0
    vertical_a = math.dist(mouth[2], mouth[10])
    vertical_b = math.dist(mouth[4], mouth[8])
    horizontal = math.dist(mouth[0], mouth[6])
    return _aspect_ratio(vertical_a, vertical_b, horizontal)


def extract_facial_regions(
    landmarks: Sequence[Sequence[float]], x_offset: float, y_offset: float
) -> FacialRegions:
    """Pick the eye and mouth landmarks out of a face shape, shifted by an offset."""
    left_eye: list[Point] = []
    right_eye: list[Point] = []
    mouth: list[Point] = []
    for index, (x, y) in enumerate(landmarks):
        point = (x + x_offset, y + y_offset)
        if index in LEFT_EYE:
            left_eye.append(point)
        elif index in RIGHT_EYE:
            right_eye.append(point)
        elif index in MOUTH:
            mouth.append(point)
    return FacialRegions(tuple(left_eye), tuple(right_eye), tuple(mouth))