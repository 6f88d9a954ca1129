import asyncio

from fakes import PAGE_COLORS, PAGE_HEIGHT, PAGE_WIDTH, FakeDocumentService

from inkreel.core.document import DocumentRenderer, DocumentState
from inkreel.core.generation import GenerationCounter
from inkreel.core.results import ErrorKind
from inkreel.core.surfaces import PageSurface


def make_renderer(**service_kwargs):
    service = FakeDocumentService(**service_kwargs)
    return DocumentRenderer(PageSurface(), service, GenerationCounter()), service


def test_load_reports_page_count():
    async def _run():
        renderer, _ = make_renderer(page_count=4)
        result = await renderer.load("doc.pdf")

        assert result.success
        assert result.page_count == 4
        assert renderer.state == DocumentState.LOADED
        assert renderer.source == "doc.pdf"

    asyncio.run(_run())


def test_load_failure_returns_error_result():
    async def _run():
        renderer, _ = make_renderer(failing_sources={"bad.pdf"})
        result = await renderer.load("bad.pdf")

        assert not result.success
        assert result.error_kind == ErrorKind.LOAD
        assert renderer.state == DocumentState.UNLOADED
        assert not renderer.is_loaded

    asyncio.run(_run())


def test_render_commits_page_and_viewport():
    async def _run():
        renderer, _ = make_renderer()
        await renderer.load("doc.pdf")
        token = renderer.generation.bump()

        result = await renderer.render_page(2, 1.5, token)

        assert result.success
        assert result.viewport.width == PAGE_WIDTH * 1.5
        assert renderer.viewport == result.viewport
        assert renderer.page_number == 2
        image = renderer.surface.image
        assert (image.width(), image.height()) == (300, 150)
        assert image.pixelColor(10, 10) == PAGE_COLORS[2]
        assert renderer.state == DocumentState.LOADED

    asyncio.run(_run())


def test_out_of_range_page_is_rejected():
    async def _run():
        renderer, _ = make_renderer(page_count=3)
        await renderer.load("doc.pdf")

        for page in (0, 4):
            result = await renderer.render_page(page, 1.0, renderer.generation.bump())
            assert result.error_kind == ErrorKind.PAGE_RANGE
        assert renderer.surface.is_empty

    asyncio.run(_run())


def test_render_without_document_fails():
    async def _run():
        renderer, _ = make_renderer()
        result = await renderer.render_page(1, 1.0, renderer.generation.bump())

        assert result.error_kind == ErrorKind.RENDER

    asyncio.run(_run())


def test_stale_render_does_not_touch_surface():
    async def _run():
        renderer, _ = make_renderer(render_delays={1: 0.05})
        await renderer.load("doc.pdf")

        token = renderer.generation.bump()
        pending = asyncio.ensure_future(renderer.render_page(1, 1.0, token))
        await asyncio.sleep(0.01)
        assert renderer.state == DocumentState.RENDERING

        renderer.generation.bump()
        result = await pending

        assert result.stale
        assert result.error is None
        assert renderer.surface.is_empty
        assert renderer.viewport is None

    asyncio.run(_run())


def test_failed_render_keeps_previous_frame():
    async def _run():
        renderer, _ = make_renderer(failing_pages={3})
        await renderer.load("doc.pdf")
        await renderer.render_page(1, 1.0, renderer.generation.bump())
        committed = renderer.viewport

        result = await renderer.render_page(3, 2.0, renderer.generation.bump())

        assert result.error_kind == ErrorKind.RENDER
        assert renderer.viewport == committed
        assert renderer.page_number == 1
        assert renderer.surface.image.pixelColor(5, 5) == PAGE_COLORS[1]

    asyncio.run(_run())


def test_superseded_load_closes_its_document():
    async def _run():
        renderer, service = make_renderer(load_delays={"slow.pdf": 0.05})

        slow = asyncio.ensure_future(renderer.load("slow.pdf"))
        await asyncio.sleep(0)
        fast = await renderer.load("fast.pdf")
        slow_result = await slow

        assert fast.success
        assert slow_result.stale
        assert renderer.source == "fast.pdf"
        slow_doc = next(d for d in service.opened if d.source == "slow.pdf")
        assert slow_doc.closed

    asyncio.run(_run())


def test_close_releases_document():
    async def _run():
        renderer, service = make_renderer()
        await renderer.load("doc.pdf")
        await renderer.render_page(1, 1.0, renderer.generation.bump())

        renderer.close()

        assert service.opened[0].closed
        assert renderer.surface.is_empty
        assert renderer.page_count == 0
        assert renderer.state == DocumentState.UNLOADED

    asyncio.run(_run())


def test_failed_load_keeps_current_document():
    async def _run():
        renderer, service = make_renderer(page_count=3, failing_sources={"bad.pdf"})
        await renderer.load("good.pdf")
        await renderer.render_page(2, 1.0, renderer.generation.bump())

        result = await renderer.load("bad.pdf")

        assert result.error_kind == ErrorKind.LOAD
        assert renderer.state == DocumentState.LOADED
        assert renderer.page_count == 3
        assert renderer.source == "good.pdf"
        assert renderer.page_number == 2
        assert not service.opened[0].closed
        assert renderer.surface.image.pixelColor(5, 5) == PAGE_COLORS[2]

    asyncio.run(_run())


def test_successful_load_releases_previous_document():
    async def _run():
        renderer, service = make_renderer()
        await renderer.load("a.pdf")
        await renderer.render_page(1, 1.0, renderer.generation.bump())

        result = await renderer.load("b.pdf")

        assert result.success
        assert service.opened[0].closed
        assert renderer.source == "b.pdf"
        assert renderer.viewport is None
        assert renderer.surface.is_empty

    asyncio.run(_run())
