import asyncio

from fakes import PAGE_COLORS, FakeDocumentService
from PyQt5.QtGui import QColor

from inkreel.core.annotations.models import HighlightAnnotation, NormRect
from inkreel.core.engine import AnnotationRenderer
from inkreel.core.surfaces import OverlayContainer, PageSurface
from inkreel.ui.widgets import AnnotatedPageView


def test_view_tracks_page_surface_and_overlay():
    page_surface, overlay = PageSurface(), OverlayContainer()
    view = AnnotatedPageView(page_surface, overlay)
    engine = AnnotationRenderer(page_surface, overlay, FakeDocumentService())

    async def _run():
        await engine.load_document("doc.pdf")
        await engine.set_page(1)

    asyncio.run(_run())
    engine.set_annotations(
        [HighlightAnnotation(id="h", quads=[NormRect(0, 0, 0.25, 1)], style={"color": "#0000ff"})]
    )

    assert view.pixmap() is not None
    assert (view.width(), view.height()) == (200, 100)

    frame = view.grab_frame().toImage()
    assert frame.pixelColor(10, 10) == QColor(0, 0, 255)
    assert frame.pixelColor(150, 10) == PAGE_COLORS[1]

    engine.destroy()
    assert view.grab_frame() is None
    view.detach()
