from PyQt5.QtCore import Qt
from PyQt5.QtGui import QBrush, QPainter

from ..annotations.models import AnnotationKind
from ..colors import parse_css_color
from ..geometry import Viewport, rect_norm_to_abs
from ..timeline import ActiveEntry
from .base import BaseLayer


class HighlightLayer(BaseLayer):
    """Semi-transparent filled rectangles, one per quad."""

    kind = AnnotationKind.HIGHLIGHT
    z_order = 25

    def paint_entry(self, painter: QPainter, entry: ActiveEntry, viewport: Viewport) -> None:
        annotation = entry.annotation
        if annotation.mode != "quads" or not annotation.quads:
            return

        color = parse_css_color(
            annotation.style.get("color"), fallback=self.config.highlight_color
        )
        painter.setBrush(QBrush(color))
        painter.setPen(Qt.NoPen)

        segments = self._segments(annotation.quads)
        for quad, (seg_start, seg_end) in zip(annotation.quads, segments):
            rect = rect_norm_to_abs(quad, viewport).to_qrectf()

            if self.config.progressive_reveal:
                # Sweep each quad left to right during its share of the window
                local = (entry.progress - seg_start) / max(1e-6, seg_end - seg_start)
                local = max(0.0, min(1.0, local))
                if local <= 0.0:
                    continue
                rect.setWidth(rect.width() * local)

            painter.drawRect(rect)

    @staticmethod
    def _segments(quads):
        """Share of the progress window owned by each quad, by width."""
        total = sum(q.w for q in quads)
        if total <= 0:
            step = 1.0 / len(quads)
            return [(i * step, (i + 1) * step) for i in range(len(quads))]

        segments = []
        before = 0.0
        for quad in quads:
            segments.append((before / total, (before + quad.w) / total))
            before += quad.w
        return segments
