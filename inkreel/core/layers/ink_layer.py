from typing import List

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QPainter, QPainterPath, QPen

from ..annotations.models import AnnotationKind, InkPoint, InkStroke
from ..colors import parse_css_color
from ..geometry import Viewport, point_norm_to_abs
from ..timeline import ActiveEntry
from .base import BaseLayer


def revealed_points(stroke: InkStroke, elapsed: float, complete: bool) -> List[InkPoint]:
    """
    Points of ``stroke`` drawn after ``elapsed`` seconds.

    Args:
        stroke: Stroke with timestamps relative to its own start
        elapsed: Seconds since the annotation started
        complete: Draw the whole stroke regardless of timestamps

    Returns:
        Leading points whose timestamp is not after ``elapsed``
    """
    if complete:
        return list(stroke.points)

    points = []
    for point in stroke.points:
        if point.t > elapsed:
            break
        points.append(point)
    return points


class InkLayer(BaseLayer):
    """Freehand strokes drawn progressively along the timeline."""

    kind = AnnotationKind.INK
    z_order = 40

    def paint_entry(self, painter: QPainter, entry: ActiveEntry, viewport: Viewport) -> None:
        annotation = entry.annotation
        complete = entry.progress >= 1.0
        elapsed = entry.elapsed

        for stroke in annotation.strokes:
            points = revealed_points(stroke, elapsed, complete)
            if not points:
                continue

            color = parse_css_color(stroke.color, fallback=self.config.ink_color)
            size = stroke.size if stroke.size and stroke.size > 0 else self.config.ink_size
            pen = QPen(color, size)
            pen.setCapStyle(Qt.RoundCap)
            pen.setJoinStyle(Qt.RoundJoin)
            painter.setPen(pen)
            painter.setBrush(Qt.NoBrush)

            positions = [point_norm_to_abs(p, viewport).to_qpointf() for p in points]
            if len(positions) == 1:
                painter.drawPoint(positions[0])
                continue

            path = QPainterPath(positions[0])
            for position in positions[1:]:
                path.lineTo(position)
            painter.drawPath(path)

