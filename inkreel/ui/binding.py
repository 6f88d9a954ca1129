"""
Declarative binding: apply a set of view properties to an
``AnnotationRenderer``, calling only the operations whose input changed.
"""

import asyncio
import copy
import logging
from typing import Any, Dict, Iterable, List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from inkreel.core.config import RendererConfig
from inkreel.core.document.service import DocumentService
from inkreel.core.engine import AnnotationRenderer
from inkreel.core.results import OperationResult
from inkreel.core.surfaces import OverlayContainer, PageSurface

logger = logging.getLogger(__name__)

_UNSET = object()


class RendererBinding(QObject):
    """
    Owns one ``AnnotationRenderer`` between ``mount()`` and ``unmount()``.

    ``update()`` receives the desired properties and diffs them against the
    last applied values. Properties that are not passed keep their current
    value. Annotations are compared by value against a snapshot of the
    last applied list.
    """

    # Signals
    document_loaded = pyqtSignal(int)  # page count
    page_changed = pyqtSignal(int)  # committed page number
    error_occurred = pyqtSignal(object)  # InkreelError

    def __init__(
        self,
        page_surface: PageSurface,
        overlay: OverlayContainer,
        service: Optional[DocumentService] = None,
        config: Optional[RendererConfig] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.page_surface = page_surface
        self.overlay = overlay
        self.service = service
        self.config = config or RendererConfig()

        self._renderer: Optional[AnnotationRenderer] = None
        self._desired: Dict[str, Any] = {}
        self._applied: Dict[str, Any] = {}

    @property
    def renderer(self) -> Optional[AnnotationRenderer]:
        return self._renderer

    @property
    def is_mounted(self) -> bool:
        return self._renderer is not None

    def mount(self) -> AnnotationRenderer:
        """Create the renderer; repeated calls return the same instance."""
        if self._renderer is None:
            self._renderer = AnnotationRenderer(
                self.page_surface, self.overlay, self.service, self.config
            )
            self._desired = {}
            self._applied = {}
            logger.debug("Renderer mounted")
        return self._renderer

    def unmount(self) -> None:
        """Destroy the renderer. Later calls do nothing."""
        renderer, self._renderer = self._renderer, None
        self._desired = {}
        self._applied = {}
        if renderer is not None:
            renderer.destroy()
            logger.debug("Renderer unmounted")

    async def update(
        self,
        source: Any = _UNSET,
        page: Any = _UNSET,
        scale: Any = _UNSET,
        annotations: Any = _UNSET,
        current_time: Any = _UNSET,
    ) -> List[OperationResult]:
        """
        Apply changed properties to the renderer.

        A new source is loaded first; page and scale are then applied again
        for the new document even if they did not change. A page requested
        before any document is loaded is applied once one is.

        Returns:
            Results of the operations that ran, in call order

        Raises:
            RuntimeError: If the binding is not mounted
        """
        renderer = self._renderer
        if renderer is None:
            raise RuntimeError("RendererBinding.update() called before mount()")

        if isinstance(annotations, Iterable) and not isinstance(annotations, (str, bytes)):
            annotations = list(annotations)

        passed = {
            "source": source,
            "page": page,
            "scale": scale,
            "annotations": annotations,
            "current_time": current_time,
        }
        self._desired.update({k: v for k, v in passed.items() if v is not _UNSET})

        results = []
        if self._changed("source"):
            self._applied["source"] = self._desired["source"]
            self._applied.pop("page", None)
            self._applied.pop("scale", None)
            result = await renderer.load_document(self._desired["source"])
            results.append(self._report(result))
            if result.success:
                self.document_loaded.emit(result.page_count)
            if renderer is not self._renderer:
                # Unmounted while loading
                return results

        results.extend(await self._apply_view(renderer))
        if renderer is not self._renderer:
            return results

        if self._changed("annotations"):
            # Snapshot, so in-place edits to the caller's list show up as changes
            self._applied["annotations"] = copy.deepcopy(self._desired["annotations"])
            results.append(self._report(renderer.set_annotations(self._desired["annotations"])))

        if self._changed("current_time"):
            self._applied["current_time"] = self._desired["current_time"]
            results.append(self._report(renderer.set_time(self._desired["current_time"])))

        return results

    async def _apply_view(self, renderer: AnnotationRenderer) -> List[OperationResult]:
        scale_changed = self._changed("scale")
        if scale_changed:
            self._applied["scale"] = self._desired["scale"]

        page_changed = False
        if renderer.page_count > 0:
            self._desired.setdefault("page", renderer.page)
            page_changed = self._changed("page")
            if page_changed:
                self._applied["page"] = self._desired["page"]

        page = self._desired.get("page")
        page_result = None
        if scale_changed and page_changed:
            # Issued together; the page request supersedes the scale render
            scale_result, page_result = await asyncio.gather(
                renderer.set_scale(self._desired["scale"]), renderer.set_page(page)
            )
            results = [self._report(scale_result), self._report(page_result)]
        elif scale_changed:
            results = [self._report(await renderer.set_scale(self._desired["scale"]))]
        elif page_changed:
            page_result = await renderer.set_page(page)
            results = [self._report(page_result)]
        else:
            return []

        if page_result is not None and page_result.success:
            self.page_changed.emit(page)
        return results

    def set_current_time(self, time: float) -> Optional[OperationResult]:
        """Fast path for playback: update the time without diffing other props."""
        if self._renderer is None:
            return None
        self._desired["current_time"] = time
        self._applied["current_time"] = time
        return self._report(self._renderer.set_time(time))

    def _changed(self, name: str) -> bool:
        if name not in self._desired:
            return False
        return name not in self._applied or self._applied[name] != self._desired[name]

    def _report(self, result: OperationResult) -> OperationResult:
        if not result.success and not result.stale:
            logger.warning("Renderer operation failed: %s", result.message)
            self.error_occurred.emit(result.error)
        return result
