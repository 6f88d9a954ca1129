"""
Document access used by the renderer, and its PyMuPDF implementation.

The renderer only talks to the abstract ``DocumentService``,
``DocumentHandle`` and ``PageHandle``; tests substitute their own.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

import fitz
import httpx
from PyQt5.QtCore import QRectF
from PyQt5.QtGui import QImage, QPainter

from ..geometry import Viewport, viewport_for_page
from ..results import LoadError, PageRangeError, RenderError

logger = logging.getLogger(__name__)

DocumentSource = Union[str, Path, bytes, bytearray]

T = TypeVar("T")


# ==============================================================================
# Abstract capability
# ==============================================================================


class PageHandle(ABC):
    """One page of an open document."""

    page_number: int

    @abstractmethod
    def compute_viewport(self, scale: float) -> Viewport:
        """Viewport of this page at ``scale``."""

    @abstractmethod
    async def render_into(self, surface: QImage, viewport: Viewport) -> None:
        """
        Draw the page into ``surface``.

        Raises:
            RenderError: If the page could not be rasterized
        """


class DocumentHandle(ABC):
    """An open document."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        ...

    @abstractmethod
    async def get_page(self, page_number: int) -> PageHandle:
        """
        Load a page by 1-based number.

        Raises:
            PageRangeError: If ``page_number`` is out of range
        """

    @abstractmethod
    def close(self) -> None:
        """Release the document. Safe to call more than once."""


class DocumentService(ABC):
    """Opens documents from a source."""

    @abstractmethod
    async def open(self, source: DocumentSource) -> DocumentHandle:
        """
        Open a document.

        Raises:
            LoadError: If the source cannot be fetched or parsed
        """


# ==============================================================================
# PyMuPDF implementation
# ==============================================================================


class FitzPage(PageHandle):
    def __init__(
        self,
        document: "FitzDocumentHandle",
        page: fitz.Page,
        page_number: int,
        width: float,
        height: float,
    ):
        self._document = document
        self._page = page
        self.page_number = page_number
        self.width = width
        self.height = height

    def compute_viewport(self, scale: float) -> Viewport:
        return viewport_for_page(self.width, self.height, scale)

    async def render_into(self, surface: QImage, viewport: Viewport) -> None:
        samples, width, height, stride = await self._document.run(
            self._rasterize, viewport.scale
        )

        # Copy so the image owns its pixels once ``samples`` goes away
        image = QImage(samples, width, height, stride, QImage.Format_RGB888).copy()
        if image.isNull():
            raise RenderError(f"Failed to convert page {self.page_number} to an image")

        painter = QPainter(surface)
        try:
            painter.setRenderHint(QPainter.SmoothPixmapTransform)
            target = QRectF(0, 0, surface.width(), surface.height())
            painter.drawImage(target, image)
        finally:
            painter.end()

    def _rasterize(self, scale: float):
        """Runs on the document worker thread."""
        mat = fitz.Matrix(scale, scale)
        pix = self._page.get_pixmap(matrix=mat, alpha=False)
        return pix.samples, pix.width, pix.height, pix.stride


class FitzDocumentHandle(DocumentHandle):
    """
    A PyMuPDF document confined to one worker thread.

    MuPDF objects are not safe to share between threads, so every call
    on the document goes through ``run`` and executes, in submission
    order, on the handle's single worker.
    """

    def __init__(self, doc: fitz.Document, page_count: int, executor: ThreadPoolExecutor):
        self._doc = doc
        self._executor = executor
        self._page_count = page_count
        self.is_closed = False

    @property
    def page_count(self) -> int:
        return self._page_count

    async def run(self, func: Callable[..., T], *args) -> T:
        """Run ``func(*args)`` on the document worker and await the result."""
        if self.is_closed:
            raise RenderError("Document is closed")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def get_page(self, page_number: int) -> FitzPage:
        if not 1 <= page_number <= self._page_count:
            raise PageRangeError(page_number, self._page_count)

        try:
            page, width, height = await self.run(self._load_page, page_number - 1)
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(f"Failed to load page {page_number}: {e}") from e
        return FitzPage(self, page, page_number, width, height)

    def _load_page(self, index: int):
        """Runs on the document worker thread."""
        page = self._doc.load_page(index)
        rect = page.rect
        return page, rect.width, rect.height

    def close(self) -> None:
        if self.is_closed:
            return
        self.is_closed = True
        # Queued behind any in-flight rasterization
        self._executor.submit(self._doc.close)
        self._executor.shutdown(wait=False)
        logger.debug("Document closed")


class FitzDocumentService(DocumentService):
    """
    Opens PDFs with PyMuPDF.

    Accepted sources: a filesystem path, a ``file://`` URL, an
    ``http(s)://`` URL or the raw document bytes.
    """

    def __init__(
        self,
        fetch_timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.fetch_timeout = fetch_timeout
        self._transport = transport

    async def open(self, source: DocumentSource) -> FitzDocumentHandle:
        if isinstance(source, (bytes, bytearray)):
            data, filename = bytes(source), None
        elif isinstance(source, (str, Path)):
            data, filename = await self._resolve(str(source))
        else:
            raise LoadError(f"Unsupported document source: {type(source).__name__}")

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="inkreel-doc")
        loop = asyncio.get_running_loop()
        try:
            doc, page_count = await loop.run_in_executor(
                executor, self._open_document, data, filename
            )
        except Exception as e:
            executor.shutdown(wait=False)
            if isinstance(e, LoadError):
                raise
            raise LoadError(f"Failed to load document: {e}") from e

        logger.info("Opened document with %d pages", page_count)
        return FitzDocumentHandle(doc, page_count, executor)

    async def _resolve(self, source: str):
        """Return ``(bytes, None)`` for remote sources, ``(None, path)`` otherwise."""
        if not source:
            raise LoadError("Empty document source")

        parsed = urlparse(source)
        scheme = parsed.scheme.lower()

        if scheme in ("http", "https"):
            return await self._fetch(source), None
        path = Path(url2pathname(parsed.path)) if scheme == "file" else Path(source)
        if not path.is_file():
            raise LoadError(f"Document not found: {source}")
        return None, str(path)

    async def _fetch(self, url: str) -> bytes:
        logger.debug("Fetching %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self.fetch_timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise LoadError(f"Timed out fetching {url}") from e
        except httpx.HTTPStatusError as e:
            raise LoadError(
                f"Failed to fetch {url}: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise LoadError(f"Failed to fetch {url}: {e}") from e

        content_type = response.headers.get("content-type", "")
        if "pdf" not in content_type.lower() and "octet-stream" not in content_type.lower():
            logger.warning("URL returned non-PDF content: %s", content_type)
        return response.content

    @staticmethod
    def _open_document(data: Optional[bytes], filename: Optional[str]):
        """Runs on the document worker thread."""
        if data is not None:
            if not data:
                raise LoadError("Document is empty")
            doc = fitz.open(stream=data, filetype="pdf")
        else:
            doc = fitz.open(filename)

        if doc.needs_pass:
            doc.close()
            raise LoadError("Document is password protected")
        if doc.page_count < 1:
            doc.close()
            raise LoadError("Document has no pages")
        return doc, doc.page_count
