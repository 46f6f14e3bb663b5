"""Per-frame fatigue analysis: blinks, yawns and nods counted over a sliding minute."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .geometry import (
    EYE_POINT_COUNT,
    MOUTH_MIN_POINT_COUNT,
    compute_ear,
    compute_mar,
    extract_facial_regions,
)
from .headpose import CUBE_EDGES, estimate_head_pose

Point = Tuple[float, float]
Color = Tuple[int, int, int]

CONSEC_FRAMES = 3

EYE_AR_THRESH = 0.20
EYE_CLOSED_TIME_THRESH = 2.0

MOUTH_AR_THRESH = 0.65
MOUTH_OPEN_TIME_THRESH = 2.0

PITCH_NOD_THRESH = 25.0
NOD_TIME_THRESH = 2.0

MIN_CONFIDENCE = 70
WINDOW_SECONDS = 60.0
BLINK_LIMIT = 25
YAWN_LIMIT = 5
NOD_LIMIT = 6

# Colours are RGB.
GREEN: Color = (0, 255, 0)
CYAN: Color = (0, 255, 255)
MAGENTA: Color = (255, 0, 255)
RED: Color = (255, 0, 0)

BOX_COLOR = GREEN
BOX_THICKNESS = 2
LANDMARK_COLOR = GREEN
LANDMARK_RADIUS = 2
CUBE_COLOR = RED
CUBE_THICKNESS = 2

FATIGUE_BANNER = ">>> DRIVER FATIGUE <<<"
EYES_ALERT = "ALERT: Eyes Closed Too Long!"
YAWN_ALERT = "ALERT: Yawning Detected!"
NOD_ALERT = "ALERT: Nodding Detected!"


@dataclass(frozen=True)
class Annotation:
    """A line of text to draw; position is the left end of its baseline."""

    text: str
    position: Tuple[int, int]
    scale: float
    color: Color
    thickness: int


@dataclass(frozen=True)
class Face:
    """A detected face box with its 68 landmarks relative to the box origin."""

    confidence: int
    x: int
    y: int
    width: int
    height: int
    landmarks: Tuple[Point, ...] = ()


@dataclass
class FrameReport:
    """Everything measured and to be drawn for one frame."""

    face_count: int = 0
    texts: List[Annotation] = field(default_factory=list)
    boxes: List[Tuple[int, int, int, int]] = field(default_factory=list)
    landmarks: List[Point] = field(default_factory=list)
    cube_lines: List[Tuple[Point, Point]] = field(default_factory=list)
    eye_aspect_ratios: List[float] = field(default_factory=list)
    mouth_aspect_ratios: List[float] = field(default_factory=list)
    pitches: List[float] = field(default_factory=list)
    eyes_closed_alert: bool = False
    yawn_alert: bool = False
    nod_alert: bool = False
    blinks: int = 0
    yawns: int = 0
    nods: int = 0
    fatigue: bool = False

    def text_lines(self) -> List[str]:
        """The texts of all annotations, in drawing order."""
        return [annotation.text for annotation in self.texts]


def _truncated(value: float, width: int) -> str:
    return f"{value:f}"[:width]


@dataclass
class _EventTracker:
    """Counts runs of consecutive frames and times how long a state lasts."""

    duration_limit: float
    count: int = 0
    frames: int = 0
    running: bool = False
    started: float = 0.0

    def update(self, active: bool, starts_timer: bool, clock: Callable[[], float]) -> bool:
        """Advance by one frame; True when the timed state has lasted too long."""
        if active:
            self.frames += 1
        else:
            self.frames = 0
            self.running = False

        if self.frames >= CONSEC_FRAMES:
            self.count += 1
            self.frames = 0
            self.running = False

        if starts_timer and not self.running:
            self.running = True
            self.started = clock()
        elif self.running:
            if clock() - self.started >= self.duration_limit:
                self.running = False
                return True
        return False


class FatigueDetector:
    """Tracks eye closure, yawning and nodding across frames."""

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock if clock is not None else time.monotonic
        self._eyes = _EventTracker(EYE_CLOSED_TIME_THRESH)
        self._mouth = _EventTracker(MOUTH_OPEN_TIME_THRESH)
        self._nods = _EventTracker(NOD_TIME_THRESH)
        self._window_start = self._clock()

    def process(self, faces: Iterable[Face]) -> FrameReport:
        """Analyse the faces found in one frame and describe what to draw."""
        faces = list(faces)
        report = FrameReport(face_count=len(faces))
        report.texts.append(
            Annotation(f"Detected Faces: {len(faces)}", (10, 20), 0.7, GREEN, 2)
        )

        for face in faces:
            if face.confidence < MIN_CONFIDENCE:
                continue
            self._process_face(face, report)

        report.blinks = self._eyes.count
        report.yawns = self._mouth.count
        report.nods = self._nods.count

        now = self._clock()
        if now - self._window_start >= WINDOW_SECONDS:
            report.fatigue = (
                self._eyes.count > BLINK_LIMIT
                or self._mouth.count > YAWN_LIMIT
                or self._nods.count > NOD_LIMIT
            )
            if report.fatigue:
                report.texts.append(Annotation(FATIGUE_BANNER, (10, 310), 1.0, RED, 3))
            self._eyes.count = self._mouth.count = self._nods.count = 0
            self._window_start = now
        return report

    def _process_face(self, face: Face, report: FrameReport) -> None:
        report.boxes.append((face.x, face.y, face.width, face.height))
        regions = extract_facial_regions(face.landmarks, face.x, face.y)

        if len(regions.left_eye) == EYE_POINT_COUNT and len(regions.right_eye) == EYE_POINT_COUNT:
            self._check_eyes(regions.left_eye, regions.right_eye, report)

        if len(regions.mouth) >= MOUTH_MIN_POINT_COUNT:
            self._check_mouth(regions.mouth, report)

        self._check_pose(face, report)

    def _check_eyes(
        self, left_eye: Sequence[Point], right_eye: Sequence[Point], report: FrameReport
    ) -> None:
        ear = (compute_ear(left_eye) + compute_ear(right_eye)) / 2.0
        report.eye_aspect_ratios.append(ear)
        report.texts.append(Annotation(f"EAR: {_truncated(ear, 4)}", (10, 60), 0.7, CYAN, 2))
        report.landmarks.extend(left_eye)
        report.landmarks.extend(right_eye)

        closed = ear < EYE_AR_THRESH
        if self._eyes.update(closed, closed, self._clock):
            report.eyes_closed_alert = True
            report.texts.append(Annotation(EYES_ALERT, (10, 75), 0.8, RED, 2))
        report.texts.append(
            Annotation(f"Blinks: {self._eyes.count}", (10, 90), 0.7, MAGENTA, 2)
        )

    def _check_mouth(self, mouth: Sequence[Point], report: FrameReport) -> None:
        mar = compute_mar(mouth)
        report.mouth_aspect_ratios.append(mar)
        report.texts.append(Annotation(f"MAR: {_truncated(mar, 4)}", (10, 140), 0.7, CYAN, 2))
        report.landmarks.extend(mouth)

        if self._mouth.update(mar > MOUTH_AR_THRESH, mar < MOUTH_AR_THRESH, self._clock):
            report.yawn_alert = True
            report.texts.append(Annotation(YAWN_ALERT, (10, 155), 0.8, RED, 2))
        report.texts.append(
            Annotation(f"Yawns: {self._mouth.count}", (10, 170), 0.7, MAGENTA, 2)
        )

    def _check_pose(self, face: Face, report: FrameReport) -> None:
        pose = estimate_head_pose(face.landmarks)
        pitch = pose.pitch
        report.pitches.append(pitch)
        report.texts.append(
            Annotation(f"Pitch: {_truncated(pitch, 5)}", (10, 220), 0.7, CYAN, 2)
        )

        corners = [(float(u) + face.x, float(v) + face.y) for u, v in pose.cube]
        report.cube_lines.extend((corners[a], corners[b]) for a, b in CUBE_EDGES)

        nodding = pitch > PITCH_NOD_THRESH
        if self._nods.update(nodding, nodding, self._clock):
            report.nod_alert = True
            report.texts.append(Annotation(NOD_ALERT, (10, 235), 0.8, RED, 2))
        report.texts.append(Annotation(f"Nods: {self._nods.count}", (10, 250), 0.7, MAGENTA, 2))