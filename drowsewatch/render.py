"""Drawing of frame reports onto images."""

from __future__ import annotations

from PIL import Image, ImageDraw, ImageFont

from .detector import (
    BOX_COLOR,
    BOX_THICKNESS,
    CUBE_COLOR,
    CUBE_THICKNESS,
    LANDMARK_COLOR,
    LANDMARK_RADIUS,
    FrameReport,
)


def draw_report(image: Image.Image, report: FrameReport) -> Image.Image:
    """Draw boxes, landmarks, pose cubes and texts of a report; returns the image."""
    if image.mode != "RGB":
        raise ValueError("image must be in RGB mode")
    draw = ImageDraw.Draw(image)

    for x, y, width, height in report.boxes:
        draw.rectangle(
            [x, y, x + width - 1, y + height - 1], outline=BOX_COLOR, width=BOX_THICKNESS
        )

    for px, py in report.landmarks:
        draw.ellipse(
            [px - LANDMARK_RADIUS, py - LANDMARK_RADIUS, px + LANDMARK_RADIUS, py + LANDMARK_RADIUS],
            fill=LANDMARK_COLOR,
        )

    for start, end in report.cube_lines:
        draw.line([tuple(start), tuple(end)], fill=CUBE_COLOR, width=CUBE_THICKNESS)

    if report.texts:
        font = ImageFont.load_default()
        for annotation in report.texts:
            x, baseline = annotation.position
            bottom = font.getbbox(annotation.text)[3]
            draw.text((x, baseline - bottom), annotation.text, fill=annotation.color, font=font)

    return image