# drowsewatch

Detects signs of driver fatigue from 68-point facial landmarks, one video frame
at a time.

## What it measures

For every face, the detector tracks three signals:

- **Eye aspect ratio (EAR).** This is the mean of the two eyes' ratios. Three
  frames in a row below 0.20 count as one blink. A timer starts when the eyes
  close. If it reaches two seconds, the frame gets an "ALERT: Eyes Closed Too
  Long!" annotation and `eyes_closed_alert` is set.
- **Mouth aspect ratio (MAR).** Three frames in a row above 0.65 count as one
  yawn. A timer restarts on every frame whose MAR is below 0.65. If a later
  frame comes two seconds or more after that start, the frame gets
  "ALERT: Yawning Detected!" and `yawn_alert` is set.
- **Head pitch.** A head pose is fitted against a fixed 3D face model, with a
  fixed camera matrix and fixed distortion coefficients. Three frames in a row
  with the pitch above 25 degrees count as one nod. A nod that lasts two
  seconds gives "ALERT: Nodding Detected!" and sets `nod_alert`.

When a frame reaches a full 60 seconds since the current window began, the
counts are checked. More than 25 blinks, more than 5 yawns or more than 6 nods
sets `fatigue` and adds the ">>> DRIVER FATIGUE <<<" banner. All counts then
reset and a new window begins.

When a run of three frames is counted as an event, that signal's timer is
stopped as well.

## Installation

Install the `drowsewatch` distribution with pip. The `test` extra adds pytest,
which the test suite needs.

## Modules

### `drowsewatch.geometry`

- `compute_ear(eye)` gives the eye aspect ratio. It returns `0.0` unless exactly
  six points are given.
- `compute_mar(mouth)` uses mouth points 0, 2, 4, 6, 8 and 10. It returns `0.0`
  when fewer than eleven points are given.
- `extract_facial_regions(landmarks, x_offset, y_offset)` returns a
  `FacialRegions` holding `left_eye`, `right_eye` and `mouth`. These come from
  landmarks 36–41, 42–47 and 48–67, each shifted by the offset.

### `drowsewatch.headpose`

- `estimate_head_pose(landmarks, camera_matrix, dist_coeffs, object_points)`
  returns a `HeadPose` with these fields:
  - `pitch`, `yaw` and `roll` in degrees;
  - `rvec` and `tvec`;
  - `cube`, the eight corners of a pose cube projected into the image.

  The camera matrix, distortion coefficients and model points have defaults
  (`CAMERA_MATRIX`, `DIST_COEFFS`, `OBJECT_POINTS`). It needs at least 58
  landmarks.
- The building blocks are also available:
  - `solve_pnp(object_points, image_points, camera_matrix, dist_coeffs)` needs
    at least six non-coplanar points;
  - `project_points(points, rvec, tvec, camera_matrix, dist_coeffs)`;
  - `rodrigues(rvec)`;
  - `euler_angles(rotation)`.

  Bad input raises `ValueError`.

### `drowsewatch.detector`

- `FatigueDetector(clock=None)` takes a function that returns seconds. It
  defaults to `time.monotonic`.
- `FatigueDetector.process(faces)` takes the `Face` detections of one frame and
  returns a `FrameReport`.
  - Faces with a confidence below 70 are skipped.
  - Each `Face` holds `confidence`, `x`, `y`, `width`, `height` and
    `landmarks`. The landmarks are (x, y) pairs relative to the face box.
- `FrameReport` contains:
  - `face_count`;
  - the `Annotation` texts to draw, in drawing order (`text_lines()` lists
    their strings);
  - face `boxes`, eye and mouth `landmarks`, and pose-cube `cube_lines`, all in
    image coordinates;
  - the measured `eye_aspect_ratios`, `mouth_aspect_ratios` and `pitches`;
  - the three alert flags;
  - the current `blinks`, `yawns` and `nods` counts;
  - `fatigue`.

### `drowsewatch.render`

- `draw_report(image, report)` draws a report onto a Pillow image in RGB mode:
  the boxes, the landmark dots, the cube edges, and the texts in Pillow's
  default font.
  - It raises `ValueError` for any other image mode.
  - It returns the same image.

## Example

```python
import time
from PIL import Image
from drowsewatch.detector import Face, FatigueDetector
from drowsewatch.render import draw_report

detector = FatigueDetector(time.monotonic)

for frame, detections in frames_with_landmarks():   # your own source
    faces = [
        Face(confidence=conf, x=x, y=y, width=w, height=h, landmarks=points)
        for conf, x, y, w, h, points in detections
    ]
    report = detector.process(faces)
    draw_report(frame, report)
    if report.fatigue:
        print("driver fatigue")
```

## What it does not do

The package does not:

- find faces or predict landmarks: those come from your own detector;
- read from a camera or video file;
- show frames in a window;
- provide a command-line program.