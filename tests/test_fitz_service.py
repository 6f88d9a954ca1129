import asyncio

import fitz
import httpx
import pytest

from inkreel.core.document import DocumentRenderer, FitzDocumentService
from inkreel.core.generation import GenerationCounter
from inkreel.core.results import ErrorKind, LoadError, PageRangeError
from inkreel.core.surfaces import PageSurface


def build_pdf(page_count=2) -> bytes:
    doc = fitz.open()
    for number in range(1, page_count + 1):
        page = doc.new_page(width=200, height=100)
        page.draw_rect(fitz.Rect(0, 0, 100, 100), color=(1, 0, 0), fill=(1, 0, 0))
        page.insert_text((120, 50), f"Page {number}")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def pdf_bytes():
    return build_pdf()


@pytest.fixture
def pdf_path(tmp_path, pdf_bytes):
    path = tmp_path / "sample.pdf"
    path.write_bytes(pdf_bytes)
    return path


def test_open_from_path_and_render(pdf_path):
    async def _run():
        renderer = DocumentRenderer(PageSurface(), FitzDocumentService(), GenerationCounter())
        loaded = await renderer.load(str(pdf_path))
        assert loaded.success
        assert loaded.page_count == 2

        result = await renderer.render_page(1, 2.0, renderer.generation.bump())
        assert result.success
        assert (result.viewport.width, result.viewport.height) == (400, 200)

        image = renderer.surface.image
        assert (image.width(), image.height()) == (400, 200)
        red = image.pixelColor(50, 100)
        assert red.red() > 200 and red.green() < 50
        white = image.pixelColor(390, 10)
        assert white.name() == "#ffffff"

        renderer.close()

    asyncio.run(_run())


def test_open_from_bytes_and_file_url(pdf_bytes, pdf_path):
    async def _run():
        service = FitzDocumentService()

        document = await service.open(pdf_bytes)
        assert document.page_count == 2
        document.close()
        document.close()

        document = await service.open(pdf_path.as_uri())
        page = await document.get_page(2)
        assert page.compute_viewport(1.0).width == pytest.approx(200)
        with pytest.raises(PageRangeError):
            await document.get_page(3)
        document.close()

    asyncio.run(_run())


def test_open_from_http_url(pdf_bytes):
    def handler(request):
        if request.url.path == "/doc.pdf":
            return httpx.Response(200, content=pdf_bytes, headers={"content-type": "application/pdf"})
        return httpx.Response(404)

    async def _run():
        service = FitzDocumentService(transport=httpx.MockTransport(handler))

        document = await service.open("https://example.test/doc.pdf")
        assert document.page_count == 2
        document.close()

        with pytest.raises(LoadError, match="HTTP 404"):
            await service.open("https://example.test/missing.pdf")

    asyncio.run(_run())


def test_load_errors(tmp_path):
    async def _run():
        renderer = DocumentRenderer(PageSurface(), FitzDocumentService(), GenerationCounter())

        missing = await renderer.load(str(tmp_path / "nope.pdf"))
        assert missing.error_kind == ErrorKind.LOAD

        garbage = await renderer.load(b"definitely not a pdf")
        assert garbage.error_kind == ErrorKind.LOAD

        empty = await renderer.load(b"")
        assert empty.error_kind == ErrorKind.LOAD

        unsupported = await renderer.load(42)
        assert unsupported.error_kind == ErrorKind.LOAD

    asyncio.run(_run())
