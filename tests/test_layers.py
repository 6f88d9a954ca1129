import pytest
from PyQt5.QtGui import QColor

from inkreel.core.annotations.models import (
    HighlightAnnotation,
    InkAnnotation,
    InkPoint,
    InkStroke,
    NormRect,
    TextAnnotation,
)
from inkreel.core.config import RendererConfig
from inkreel.core.geometry import Viewport
from inkreel.core.layers import (
    HighlightLayer,
    InkLayer,
    TextLayer,
    revealed_points,
    visible_text,
)
from inkreel.core.results import DestroyedError
from inkreel.core.surfaces import OverlayContainer
from inkreel.core.timeline import ActiveEntry

VIEWPORT = Viewport(100, 100)


def pixel(layer, x, y) -> QColor:
    return layer.surface.pixelColor(x, y)


def test_highlight_fills_quads_with_style_color():
    layer = HighlightLayer(OverlayContainer(), VIEWPORT)
    annotation = HighlightAnnotation(
        id="h",
        quads=[NormRect(0.1, 0.1, 0.3, 0.3)],
        style={"color": "rgba(255, 0, 0, 1)"},
    )
    layer.render([ActiveEntry(annotation, 1.0)], VIEWPORT)

    inside = pixel(layer, 20, 20)
    assert (inside.red(), inside.alpha()) == (255, 255)
    assert pixel(layer, 80, 80).alpha() == 0


def test_highlight_default_color_is_translucent():
    layer = HighlightLayer(OverlayContainer(), VIEWPORT)
    annotation = HighlightAnnotation(id="h", quads=[NormRect(0, 0, 1, 1)])
    layer.render([ActiveEntry(annotation, 1.0)], VIEWPORT)

    assert 60 <= pixel(layer, 50, 50).alpha() <= 90


def test_render_clears_previous_frame():
    container = OverlayContainer()
    layer = HighlightLayer(container, VIEWPORT)
    annotation = HighlightAnnotation(
        id="h", quads=[NormRect(0, 0, 0.5, 0.5)], style={"color": "red"}
    )
    layer.render([ActiveEntry(annotation, 1.0)], VIEWPORT)
    layer.render([], VIEWPORT)

    assert pixel(layer, 10, 10).alpha() == 0
    assert layer.entries == []


def test_progressive_highlight_sweeps_left_to_right():
    config = RendererConfig(progressive_reveal=True)
    layer = HighlightLayer(OverlayContainer(), VIEWPORT, config)
    annotation = HighlightAnnotation(
        id="h", quads=[NormRect(0, 0, 1, 0.5)], style={"color": "red"}
    )
    layer.render([ActiveEntry(annotation, 0.5)], VIEWPORT)

    assert pixel(layer, 20, 20).alpha() == 255
    assert pixel(layer, 80, 20).alpha() == 0


def test_highlight_is_filled_at_any_progress_by_default():
    layer = HighlightLayer(OverlayContainer(), VIEWPORT)
    annotation = HighlightAnnotation(
        id="h", start=0, end=10, quads=[NormRect(0, 0, 1, 0.5)], style={"color": "red"}
    )
    layer.render([ActiveEntry(annotation, 0.1)], VIEWPORT)

    assert pixel(layer, 5, 20).alpha() == 255
    assert pixel(layer, 95, 20).alpha() == 255


def test_text_draws_background_box():
    layer = TextLayer(OverlayContainer(), VIEWPORT)
    annotation = TextAnnotation(
        id="t",
        x=0.5,
        y=0.5,
        w=0.5,
        h=0.5,
        content="Hi",
        style={"bg": "#00ff00", "color": "#000000"},
    )
    layer.render([ActiveEntry(annotation, 1.0)], VIEWPORT)

    background = pixel(layer, 90, 55)
    assert background.green() == 255 and background.alpha() == 255
    assert pixel(layer, 10, 10).alpha() == 0


def test_visible_text_reveals_words_in_order():
    assert visible_text("one two three four", 1.0) == "one two three four"
    assert visible_text("one two three four", 0.0) == ""
    assert visible_text("one two three four", 0.5) == "one two"
    assert visible_text("one two", 0.75) == "one t"


class RecordingPainter:
    """Stands in for QPainter and keeps the strings passed to drawText."""

    def __init__(self):
        self.texts = []

    def drawText(self, rect, flags, text):
        self.texts.append(text)

    def __getattr__(self, name):
        return lambda *args, **kwargs: None


def test_text_content_is_drawn_verbatim():
    layer = TextLayer(OverlayContainer(), VIEWPORT)
    content = "<b>x</b> &amp; <i>y</i>"
    annotation = TextAnnotation(id="t", x=0, y=0, w=1, h=1, content=content, style={})
    painter = RecordingPainter()

    layer.paint_entry(painter, ActiveEntry(annotation, 1.0), VIEWPORT)

    assert painter.texts == [content]
    assert visible_text(content, 1.0) == content



def _stroke():
    return InkStroke(
        points=[InkPoint(0.1, 0.5, 0.0), InkPoint(0.5, 0.5, 1.0), InkPoint(0.9, 0.5, 2.0)],
        color="#0000ff",
        size=4,
    )


def test_revealed_points_follow_elapsed_time():
    stroke = _stroke()

    assert len(revealed_points(stroke, 0.0, False)) == 1
    assert len(revealed_points(stroke, 1.5, False)) == 2
    assert len(revealed_points(stroke, 0.0, True)) == 3


def test_ink_mid_progress_draws_only_revealed_part():
    layer = InkLayer(OverlayContainer(), VIEWPORT)
    annotation = InkAnnotation(id="i", start=10, end=12, strokes=[_stroke()])

    # 1 second in: points at t <= 1 are drawn
    layer.render([ActiveEntry(annotation, 0.5)], VIEWPORT)
    assert pixel(layer, 30, 50).blue() == 255
    assert pixel(layer, 80, 50).alpha() == 0

    layer.render([ActiveEntry(annotation, 1.0)], VIEWPORT)
    assert pixel(layer, 80, 50).alpha() == 255


def test_layer_notifies_container_and_keeps_surface_size():
    container = OverlayContainer()
    calls = []
    container.add_listener(lambda: calls.append(1))
    layer = InkLayer(container, VIEWPORT)

    layer.set_viewport(Viewport(300, 150, 1.5))

    assert calls
    assert (layer.surface.width(), layer.surface.height()) == (300, 150)


def test_destroyed_layer_rejects_render():
    layer = TextLayer(OverlayContainer(), VIEWPORT)
    layer.destroy()
    layer.destroy()

    with pytest.raises(DestroyedError):
        layer.render([], VIEWPORT)
