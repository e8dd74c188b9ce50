"""Random curve overlay with a global arc-length budget.

All curves of one image share a single budget of ``width + height``. Each
curve gets three quadratic segments whose reach is a third of whatever budget
is still left, so later curves shrink as the budget runs out and the total ink
stays roughly bounded no matter how many curves are requested.
"""

import math
import random
from typing import List, NamedTuple, Tuple

from PIL import ImageDraw

from .constants import CURVE_SAMPLES_PER_SEGMENT, SEGMENTS_PER_CURVE

Point = Tuple[float, float]


class CurveSegment(NamedTuple):
    control: Point
    end: Point
    # |last -> control| + |control -> end|
    length: float


class CurvePath(NamedTuple):
    color: Tuple[int, int, int, int]
    start: Point
    segments: List[CurveSegment]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def random_color(rng: random.Random) -> Tuple[int, int, int, int]:
    """Draw an opaque color, channels in R, G, B order."""
    r = rng.randrange(256)
    g = rng.randrange(256)
    b = rng.randrange(256)
    return (r, g, b, 255)


def plan_curves(rng: random.Random, width: int, height: int, curve_count: int) -> List[CurvePath]:
    """Draw the geometry of every curve without touching a canvas.

    Returns:
        One CurvePath per curve that was started. Fewer than ``curve_count``
        paths come back when the budget is exhausted early.
    """
    max_total_length = float(width + height)
    total_length = 0.0
    paths = []

    for _ in range(curve_count):
        if total_length >= max_total_length:
            break

        color = random_color(rng)
        start_x = rng.random() * width
        start_y = rng.random() * height
        last_x, last_y = start_x, start_y

        max_segment_length = (max_total_length - total_length) / SEGMENTS_PER_CURVE
        segments = []
        for _ in range(SEGMENTS_PER_CURVE):
            ctrl_x = _clamp(last_x + (rng.random() * 2 - 1) * max_segment_length, 0, width)
            ctrl_y = _clamp(last_y + (rng.random() * 2 - 1) * max_segment_length, 0, height)
            end_x = _clamp(last_x + (rng.random() * 2 - 1) * max_segment_length, 0, width)
            end_y = _clamp(last_y + (rng.random() * 2 - 1) * max_segment_length, 0, height)

            length = math.hypot(ctrl_x - last_x, ctrl_y - last_y) + math.hypot(end_x - ctrl_x, end_y - ctrl_y)
            segments.append(CurveSegment((ctrl_x, ctrl_y), (end_x, end_y), length))
            total_length += length
            last_x, last_y = end_x, end_y

            if total_length >= max_total_length:
                break

        paths.append(CurvePath(color, (start_x, start_y), segments))

    return paths


def flatten_path(path: CurvePath, samples: int = CURVE_SAMPLES_PER_SEGMENT) -> List[Point]:
    """Sample the quadratic segments of ``path`` into a polyline."""
    points = [path.start]
    x0, y0 = path.start
    for (cx, cy), (ex, ey), _ in path.segments:
        for step in range(1, samples + 1):
            t = step / samples
            u = 1.0 - t
            x = u * u * x0 + 2 * u * t * cx + t * t * ex
            y = u * u * y0 + 2 * u * t * cy + t * t * ey
            points.append((x, y))
        x0, y0 = ex, ey
    return points


def draw_curves(draw: ImageDraw.ImageDraw, paths: List[CurvePath], line_width: float) -> None:
    """Stroke each planned path onto the canvas behind ``draw``."""
    width = max(1, int(round(line_width)))
    for path in paths:
        points = flatten_path(path)
        if len(points) < 2:
            continue
        draw.line(points, fill=path.color, width=width, joint="curve")


def total_length(paths: List[CurvePath]) -> float:
    return sum(segment.length for path in paths for segment in path.segments)
