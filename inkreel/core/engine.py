"""
The annotation renderer: keeps the page surface and the annotation layers
in sync with the current document, page, zoom and playback time.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .annotations.models import Annotation
from .config import RendererConfig
from .document.renderer import (
    DocumentRenderer,
    finite_float,
    is_valid_page_number,
    is_valid_scale,
)
from .document.runtime import require_runtime
from .document.service import DocumentService, DocumentSource, FitzDocumentService
from .generation import GenerationCounter
from .geometry import Viewport
from .layers.manager import LayerManager
from .results import (
    DestroyedError,
    InkreelError,
    InvalidArgumentError,
    OperationResult,
    PageRangeError,
    RenderError,
)
from .surfaces import OverlayContainer, PageSurface
from .timeline import ActiveEntry, TimelineSync, group_by_kind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineState:
    """Snapshot of an ``AnnotationRenderer``."""

    page: int
    scale: float
    page_count: int
    time: float
    viewport: Optional[Viewport]
    source: Optional[DocumentSource]
    generation: int
    annotation_count: int
    destroyed: bool


class AnnotationRenderer:
    """
    Orchestrates document rendering, timeline filtering and layer painting.

    Public operations never raise; they return an ``OperationResult``.
    Page and scale changes are asynchronous and the most recent request
    wins: an older request that completes late returns a stale result and
    leaves the surfaces alone.

    Args:
        page_surface: Surface receiving the rendered page
        overlay: Container receiving the annotation layer surfaces
        service: Document service; PyMuPDF is used when omitted
        config: Renderer configuration

    Raises:
        RuntimeNotInitializedError: If ``initialize_runtime()`` was not called
    """

    def __init__(
        self,
        page_surface: Optional[PageSurface] = None,
        overlay: Optional[OverlayContainer] = None,
        service: Optional[DocumentService] = None,
        config: Optional[RendererConfig] = None,
    ):
        require_runtime()

        self.config = config or RendererConfig()
        self.page_surface = page_surface if page_surface is not None else PageSurface()
        self.overlay = overlay if overlay is not None else OverlayContainer()

        self._generation = GenerationCounter("render")
        self._document = DocumentRenderer(
            self.page_surface,
            service or FitzDocumentService(fetch_timeout=self.config.fetch_timeout),
            self._generation,
        )
        self._timeline = TimelineSync()
        self._layers = LayerManager(
            self.overlay, Viewport(1, 1, self.config.initial_scale), self.config
        )

        # Requested view; the committed one lives in the document renderer
        self._page = self.config.initial_page
        self._scale = self.config.initial_scale

        self._annotations: List[Annotation] = []
        self._active: List[ActiveEntry] = []
        self._time = 0.0
        self.is_destroyed = False

    # ==============================================================================
    # Properties
    # ==============================================================================

    @property
    def page(self) -> int:
        return self._page

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def time(self) -> float:
        return self._time

    @property
    def page_count(self) -> int:
        return self._document.page_count

    @property
    def viewport(self) -> Optional[Viewport]:
        """Viewport of the page currently on the surface."""
        return self._document.viewport

    @property
    def active_entries(self) -> List[ActiveEntry]:
        return list(self._active)

    @property
    def annotations(self) -> List[Annotation]:
        return copy.deepcopy(self._annotations)

    @property
    def layer_manager(self) -> LayerManager:
        return self._layers

    def state(self) -> EngineState:
        return EngineState(
            page=self._page,
            scale=self._scale,
            page_count=self.page_count,
            time=self._time,
            viewport=self.viewport,
            source=self._document.source,
            generation=self._generation.value,
            annotation_count=len(self._annotations),
            destroyed=self.is_destroyed,
        )

    # ==============================================================================
    # Document and view
    # ==============================================================================

    async def load_document(self, source: DocumentSource) -> OperationResult:
        """
        Load a document, replacing the current one.

        On success the page resets to 1 and nothing is rendered until
        ``set_page`` or ``set_scale`` is called. Stored annotations are kept.
        A failed load keeps the current document and frame.
        """
        if self.is_destroyed:
            return self._destroyed("load_document")

        self._generation.bump()
        result = await self._document.load(source)
        if result.stale or self.is_destroyed:
            return result
        if not result.success:
            self._restore_committed_view()
            return result

        self._page = 1
        self._active = []
        self._layers.clear_all()
        logger.info("Loaded document (%d pages)", result.page_count)
        return result

    async def set_page(self, page_number: int) -> OperationResult:
        """
        Render ``page_number`` at the current scale.

        Args:
            page_number: 1-based page number
        """
        if self.is_destroyed:
            return self._destroyed("set_page")
        if not is_valid_page_number(page_number):
            return OperationResult.failure(
                InvalidArgumentError(f"Invalid page number: {page_number!r}")
            )
        if not self._document.is_loaded:
            return OperationResult.failure(RenderError("No document loaded"))
        if not 1 <= page_number <= self.page_count:
            return OperationResult.failure(PageRangeError(page_number, self.page_count))

        token = self._generation.bump()
        self._page = page_number
        result = await self._document.render_page(page_number, self._scale, token)
        return self._after_render(result, token)

    async def set_scale(self, scale: float) -> OperationResult:
        """
        Re-render the current page at ``scale``.

        Without a document the scale is only recorded for the next render.
        """
        if self.is_destroyed:
            return self._destroyed("set_scale")
        if not is_valid_scale(scale):
            return OperationResult.failure(
                InvalidArgumentError(f"Invalid scale {scale!r} (must be a positive number)")
            )

        self._scale = float(scale)
        if not self._document.is_loaded:
            return OperationResult.ok()

        token = self._generation.bump()
        result = await self._document.render_page(self._page, self._scale, token)
        return self._after_render(result, token)

    def _after_render(self, result: OperationResult, token: int) -> OperationResult:
        if result.stale or self.is_destroyed or not self._generation.is_current(token):
            return OperationResult.superseded()

        if not result.success:
            self._restore_committed_view()
            return result

        synced = self._sync()
        if not synced.success:
            return synced
        return OperationResult.ok(
            viewport=result.viewport, page_count=result.page_count, active=synced.active
        )

    def _restore_committed_view(self) -> None:
        # Fall back to what is actually on screen
        if self._document.page_number is not None:
            self._page = self._document.page_number
        if self._document.viewport is not None:
            self._scale = self._document.viewport.scale

    # ==============================================================================
    # Annotations and time
    # ==============================================================================

    def set_annotations(self, annotations: Iterable[Annotation]) -> OperationResult:
        """
        Replace the annotation set.

        The list is deep-copied, so later changes by the caller have no
        effect until the next call.
        """
        if self.is_destroyed:
            return self._destroyed("set_annotations")
        if annotations is None:
            annotations = []
        if isinstance(annotations, (str, bytes)) or not isinstance(annotations, Iterable):
            return OperationResult.failure(
                InvalidArgumentError("annotations must be a list of Annotation objects")
            )

        accepted = []
        for index, annotation in enumerate(annotations):
            if not isinstance(annotation, Annotation):
                logger.warning(
                    "Ignoring annotation at index %d: not an Annotation (%s)",
                    index,
                    type(annotation).__name__,
                )
                continue
            accepted.append(annotation)

        self._annotations = copy.deepcopy(accepted)
        logger.debug("Stored %d annotations", len(self._annotations))
        return self._sync()

    def set_time(self, time: float) -> OperationResult:
        """Move the playback position to ``time`` seconds."""
        if self.is_destroyed:
            return self._destroyed("set_time")
        seconds = finite_float(time)
        if seconds is None:
            return OperationResult.failure(InvalidArgumentError(f"Invalid time: {time!r}"))

        self._time = seconds
        return self._sync()

    def _sync(self) -> OperationResult:
        """Filter annotations for the committed page and time, then repaint."""
        viewport = self._document.viewport
        page_number = self._document.page_number
        if viewport is None or page_number is None:
            self._active = []
            return OperationResult.ok()

        page_count = self.page_count
        on_page = [
            a
            for a in self._annotations
            if a.page == page_number and 1 <= a.page <= page_count
        ]
        active = self._timeline.filter(on_page, self._time)

        try:
            self._layers.update_annotations(group_by_kind(active), viewport)
        except InkreelError as e:
            logger.warning("Layer update failed: %s", e)
            return OperationResult.failure(e)

        self._active = active
        return OperationResult.ok(viewport=viewport, active=tuple(active))

    # ==============================================================================
    # Lifecycle
    # ==============================================================================

    def destroy(self) -> OperationResult:
        """
        Tear down the renderer.

        In-flight renders become stale, the document is closed and every
        layer is destroyed. Every later call returns a destroyed error.
        """
        if self.is_destroyed:
            return self._destroyed("destroy")

        self.is_destroyed = True
        self._generation.bump()
        self._document.close()
        self._layers.destroy_all()
        self._annotations = []
        self._active = []
        logger.debug("Renderer destroyed")
        return OperationResult.ok()

    @staticmethod
    def _destroyed(operation: str) -> OperationResult:
        return OperationResult.failure(DestroyedError(operation))
