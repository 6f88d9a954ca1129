"""
Common contract for annotation layers.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from PyQt5.QtGui import QImage, QPainter

from ..annotations.models import AnnotationKind
from ..config import RendererConfig
from ..geometry import Viewport
from ..results import DestroyedError, RenderError
from ..surfaces import OverlayContainer, blank_image
from ..timeline import ActiveEntry

logger = logging.getLogger(__name__)


class BaseLayer(ABC):
    """
    A transparent surface dedicated to one annotation kind.

    Every ``render`` call clears and repaints the whole surface. Painting
    goes to a fresh image that replaces ``surface`` only once it is
    complete, so a failure leaves the previous frame in place.
    """

    kind: AnnotationKind = None
    z_order: int = 0

    def __init__(
        self,
        container: OverlayContainer,
        viewport: Viewport,
        config: Optional[RendererConfig] = None,
    ):
        self.container = container
        self.config = config or RendererConfig()
        self.viewport = viewport
        self.entries: List[ActiveEntry] = []
        self.is_destroyed = False

        width, height = viewport.pixel_size
        self.surface: Optional[QImage] = blank_image(width, height)

    def set_viewport(self, viewport: Viewport) -> None:
        """Resize the surface and repaint the last entries."""
        self._check_destroyed("set_viewport")
        self.render(self.entries, viewport)

    def render(self, entries: Sequence[ActiveEntry], viewport: Viewport) -> None:
        """
        Redraw the surface for the given entries.

        Args:
            entries: Active entries of this layer's kind, in paint order
            viewport: Viewport the entries are positioned in

        Raises:
            RenderError: If painting failed; the previous frame is kept
        """
        self._check_destroyed("render")

        width, height = viewport.pixel_size
        image = blank_image(width, height)
        painter = QPainter(image)
        try:
            painter.setRenderHint(QPainter.Antialiasing)
            for entry in entries:
                self.paint_entry(painter, entry, viewport)
        except Exception as e:
            logger.exception("%s layer failed to paint", self.kind.value)
            raise RenderError(f"Failed to render {self.kind.value} layer: {e}") from e
        finally:
            painter.end()

        self.entries = list(entries)
        self.viewport = viewport
        self.surface = image
        self.container.layer_changed(self)

    def clear(self) -> None:
        if not self.is_destroyed:
            self.render([], self.viewport)

    @abstractmethod
    def paint_entry(self, painter: QPainter, entry: ActiveEntry, viewport: Viewport) -> None:
        """Paint one active annotation."""

    def destroy(self) -> None:
        """Release the surface. Safe to call more than once."""
        if self.is_destroyed:
            return
        self.entries = []
        self.surface = None
        self.is_destroyed = True

    def _check_destroyed(self, method_name: str) -> None:
        if self.is_destroyed:
            raise DestroyedError(f"{type(self).__name__}.{method_name}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entries={len(self.entries)}, viewport={self.viewport})"
