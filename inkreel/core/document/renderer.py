"""
Loads a document and renders its pages into the page surface.
"""

import logging
import math
import numbers
from enum import Enum
from typing import Optional

from ..generation import GenerationCounter
from ..geometry import Viewport
from ..results import (
    InkreelError,
    InvalidArgumentError,
    LoadError,
    OperationResult,
    PageRangeError,
    RenderError,
)
from ..surfaces import PageSurface
from .service import DocumentHandle, DocumentService, DocumentSource

logger = logging.getLogger(__name__)


class DocumentState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    RENDERING = "rendering"


def is_valid_page_number(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def finite_float(value) -> Optional[float]:
    """
    Convert a real number to a finite float.

    Returns:
        The float, or None for non-numbers, NaN, infinities and integers
        too large to represent
    """
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None


def is_valid_scale(value) -> bool:
    scale = finite_float(value)
    return scale is not None and scale > 0


class DocumentRenderer:
    """
    Owns the open document and the page surface.

    Renders go to a staging image that is committed to the surface only if
    the caller's generation token is still current when the render
    completes. A stale or failed render leaves the surface and the
    committed viewport untouched.

    Args:
        surface: Page surface to commit rendered pages to
        service: Document service used to open sources
        generation: Render generation shared with the caller
    """

    def __init__(
        self,
        surface: PageSurface,
        service: DocumentService,
        generation: Optional[GenerationCounter] = None,
    ):
        self.surface = surface
        self.service = service
        self.generation = generation or GenerationCounter("render")
        self.epoch = GenerationCounter("document")

        self.state = DocumentState.UNLOADED
        self.source: Optional[DocumentSource] = None
        self.page_number: Optional[int] = None
        self.viewport: Optional[Viewport] = None

        self._document: Optional[DocumentHandle] = None
        self._pending_renders = 0

    @property
    def is_loaded(self) -> bool:
        return self._document is not None

    @property
    def page_count(self) -> int:
        return self._document.page_count if self._document else 0

    # ==============================================================================
    # Loading
    # ==============================================================================

    async def load(self, source: DocumentSource) -> OperationResult:
        """
        Open ``source``, replacing any current document.

        The current document, page and surface stay in place until the new
        document has opened; a failed load leaves them untouched.

        Args:
            source: Path, URL or document bytes

        Returns:
            OperationResult with ``page_count`` on success
        """
        epoch = self.epoch.bump()
        self.state = DocumentState.LOADING
        logger.debug("Loading document (epoch %d)", epoch)

        try:
            document = await self.service.open(source)
        except Exception as e:
            if not self.epoch.is_current(epoch):
                return OperationResult.superseded()
            self.state = DocumentState.LOADED if self._document else DocumentState.UNLOADED
            error = e if isinstance(e, LoadError) else LoadError(f"Failed to load document: {e}")
            logger.warning("Document load failed: %s", error)
            return OperationResult.failure(error)

        if not self.epoch.is_current(epoch):
            logger.debug("Dropping superseded document (epoch %d)", epoch)
            document.close()
            return OperationResult.superseded()

        self._release()
        self._document = document
        self.source = source
        self.state = DocumentState.LOADED
        return OperationResult.ok(page_count=document.page_count)

    def close(self) -> None:
        """Release the document and invalidate pending loads."""
        self.epoch.bump()
        self._release()
        self.state = DocumentState.UNLOADED

    def _release(self) -> None:
        document, self._document = self._document, None
        if document is not None:
            document.close()
        self.source = None
        self.page_number = None
        self.viewport = None
        self.surface.clear()

    # ==============================================================================
    # Rendering
    # ==============================================================================

    async def render_page(self, page_number: int, scale: float, token: int) -> OperationResult:
        """
        Render a page into the surface.

        Args:
            page_number: 1-based page number
            scale: Zoom factor (1.0 = 100%)
            token: Value of ``generation`` captured by the caller

        Returns:
            OperationResult with the committed ``viewport``, or a stale
            result if a newer request superseded this one
        """
        document = self._document
        if document is None:
            return OperationResult.failure(RenderError("No document loaded"))
        if not is_valid_page_number(page_number) or not 1 <= page_number <= document.page_count:
            return OperationResult.failure(PageRangeError(page_number, document.page_count))
        if not is_valid_scale(scale):
            return OperationResult.failure(
                InvalidArgumentError(f"Invalid scale {scale!r} (must be a positive number)")
            )

        self._begin_render()
        try:
            page = await document.get_page(page_number)
            if not self._is_current(token, document):
                return self._stale(page_number, token)

            viewport = page.compute_viewport(scale)
            width, height = viewport.pixel_size
            staging = self.surface.create_staging(width, height)
            await page.render_into(staging, viewport)
        except Exception as e:
            if not self._is_current(token, document):
                return self._stale(page_number, token)
            if isinstance(e, InkreelError):
                error = e
            else:
                error = RenderError(f"Failed to render page {page_number}: {e}")
            logger.warning("Render of page %d failed: %s", page_number, error)
            return OperationResult.failure(error)
        finally:
            self._end_render()

        if not self._is_current(token, document):
            return self._stale(page_number, token)

        self.surface.commit(staging)
        self.page_number = page_number
        self.viewport = viewport
        logger.debug("Rendered page %d at scale %.2f", page_number, scale)
        return OperationResult.ok(viewport=viewport, page_count=document.page_count)

    def _is_current(self, token: int, document: DocumentHandle) -> bool:
        return self.generation.is_current(token) and document is self._document

    @staticmethod
    def _stale(page_number: int, token: int) -> OperationResult:
        logger.debug("Discarding stale render of page %d (generation %d)", page_number, token)
        return OperationResult.superseded()

    def _begin_render(self) -> None:
        self._pending_renders += 1
        if self.state != DocumentState.LOADING:
            self.state = DocumentState.RENDERING

    def _end_render(self) -> None:
        self._pending_renders -= 1
        if self._pending_renders == 0 and self.state == DocumentState.RENDERING:
            self.state = DocumentState.LOADED if self._document else DocumentState.UNLOADED
