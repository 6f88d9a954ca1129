from inkreel.core.annotations.models import HighlightAnnotation, NormRect
from inkreel.core.geometry import Viewport
from inkreel.core.layers import HighlightLayer
from inkreel.core.surfaces import OverlayContainer, PageSurface
from inkreel.core.timeline import ActiveEntry


def test_page_surface_commit_and_clear_notify():
    surface = PageSurface()
    events = []
    surface.add_listener(lambda: events.append(surface.is_empty))

    staging = surface.create_staging(20, 10)
    assert surface.is_empty

    surface.commit(staging)
    surface.clear()

    assert events == [False, True]
    assert staging.pixelColor(0, 0).name() == "#ffffff"


def test_composite_draws_layers_over_page():
    container = OverlayContainer()
    viewport = Viewport(40, 40)
    layer = HighlightLayer(container, viewport)
    container.attach(layer)
    annotation = HighlightAnnotation(
        id="h", quads=[NormRect(0, 0, 0.5, 1)], style={"color": "#0000ff"}
    )
    layer.render([ActiveEntry(annotation, 1.0)], viewport)

    page = PageSurface().create_staging(40, 40)
    frame = container.composite(page)

    assert frame.pixelColor(5, 5).name() == "#0000ff"
    assert frame.pixelColor(35, 5).name() == "#ffffff"


def test_listener_removal():
    container = OverlayContainer()
    calls = []

    def listener():
        calls.append(1)

    container.add_listener(listener)
    container.remove_listener(listener)

    container.layer_changed(None)

    assert calls == []
