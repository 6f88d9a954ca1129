"""
Text callout layer.
"""

import math

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QBrush, QFont, QPainter, QPen

from ..annotations.models import AnnotationKind
from ..colors import parse_css_color
from ..geometry import Viewport, rect_norm_to_abs
from ..timeline import ActiveEntry
from .base import BaseLayer


def visible_text(content: str, progress: float) -> str:
    """
    Portion of ``content`` shown at ``progress`` when typing it in.

    Whole words appear in order; the word being typed is revealed
    character by character.

    Args:
        content: Full text
        progress: Animation progress (0-1)

    Returns:
        Visible prefix of the text
    """
    if progress >= 1.0:
        return content
    if progress <= 0.0:
        return ""

    words = content.split(" ")
    position = progress * len(words)
    complete = int(math.floor(position))
    if complete == 0:
        return ""

    shown = words[:complete]
    if complete < len(words):
        current = words[complete]
        chars = int(math.floor((position - complete) * len(current)))
        if chars > 0:
            shown.append(current[:chars])
    return " ".join(shown)


class TextLayer(BaseLayer):
    """Boxes of plain text positioned on the page."""

    kind = AnnotationKind.TEXT
    z_order = 30

    def paint_entry(self, painter: QPainter, entry: ActiveEntry, viewport: Viewport) -> None:
        annotation = entry.annotation
        rect = rect_norm_to_abs(annotation.rect, viewport).to_qrectf()
        if rect.width() <= 0 or rect.height() <= 0:
            return

        style = annotation.style
        background = parse_css_color(style.get("bg"), fallback=self.config.text_background)
        foreground = parse_css_color(style.get("color"), fallback=self.config.text_color)

        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(background))
        painter.drawRoundedRect(rect, 4, 4)

        content = annotation.content
        if self.config.progressive_reveal:
            content = visible_text(content, entry.progress)
        if not content:
            return

        font = QFont(self.config.text_font_family)
        font.setPixelSize(self.config.text_font_px)
        painter.setFont(font)
        painter.setPen(QPen(foreground))

        padding = self.config.text_padding_px
        text_rect = rect.adjusted(padding, padding, -padding, -padding)
        painter.save()
        painter.setClipRect(rect)
        # Plain text only, no markup interpretation
        painter.drawText(
            text_rect, int(Qt.AlignLeft | Qt.AlignVCenter | Qt.TextWordWrap), content
        )
        painter.restore()
