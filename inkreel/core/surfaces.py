"""
Pixel surfaces the engine draws into.

``PageSurface`` holds the rendered document page; ``OverlayContainer``
stacks the per-kind layer surfaces above it. Both notify listeners when
their content changes so a widget can repaint.
"""

from typing import TYPE_CHECKING, Callable, List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QImage, QPainter

if TYPE_CHECKING:
    from .layers.base import BaseLayer

Listener = Callable[[], None]

SURFACE_FORMAT = QImage.Format_ARGB32_Premultiplied


def blank_image(width: int, height: int) -> QImage:
    """Fully transparent image of the given size."""
    image = QImage(max(1, width), max(1, height), SURFACE_FORMAT)
    image.fill(Qt.transparent)
    return image


class _Notifier:
    def __init__(self):
        self._listeners: List[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()


class PageSurface(_Notifier):
    """The surface holding the currently displayed page image."""

    def __init__(self):
        super().__init__()
        self.image: Optional[QImage] = None

    @property
    def is_empty(self) -> bool:
        return self.image is None

    def create_staging(self, width: int, height: int) -> QImage:
        """Image to render into before it is committed."""
        image = QImage(max(1, width), max(1, height), SURFACE_FORMAT)
        image.fill(Qt.white)
        return image

    def commit(self, image: QImage) -> None:
        """Replace the displayed page in one step."""
        self.image = image
        self._notify()

    def clear(self) -> None:
        self.image = None
        self._notify()


class OverlayContainer(_Notifier):
    """Ordered stack of layer surfaces drawn over the page."""

    def __init__(self):
        super().__init__()
        self._layers: List["BaseLayer"] = []

    @property
    def layers(self) -> List["BaseLayer"]:
        """Attached layers, bottom first."""
        return list(self._layers)

    def attach(self, layer: "BaseLayer") -> None:
        if layer in self._layers:
            return
        self._layers.append(layer)
        self._layers.sort(key=lambda item: item.z_order)
        self._notify()

    def detach(self, layer: "BaseLayer") -> None:
        if layer in self._layers:
            self._layers.remove(layer)
            self._notify()

    def layer_changed(self, layer: "BaseLayer") -> None:
        """Called by a layer after it redrew its surface."""
        self._notify()

    def paint(self, painter: QPainter) -> None:
        """Paint every layer surface at the origin, bottom first."""
        for layer in self._layers:
            if layer.surface is not None:
                painter.drawImage(0, 0, layer.surface)

    def composite(self, base: Optional[QImage] = None) -> QImage:
        """
        Flatten the page image and all layers into a new image.

        Args:
            base: Page image; a transparent canvas sized to the largest
                layer is used when omitted

        Returns:
            Composited image
        """
        if base is not None:
            result = base.convertToFormat(SURFACE_FORMAT)
        else:
            width = max((l.surface.width() for l in self._layers if l.surface), default=1)
            height = max((l.surface.height() for l in self._layers if l.surface), default=1)
            result = blank_image(width, height)

        painter = QPainter(result)
        try:
            self.paint(painter)
        finally:
            painter.end()
        return result
